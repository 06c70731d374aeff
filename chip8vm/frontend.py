"""pygame window, keyboard and beeper for the cycle driver."""

import numpy as np
import pygame

from chip8vm.constants import NUM_KEYS, SCREEN_WIDTH, SCREEN_HEIGHT
from chip8vm.rendering import chip8_display_to_rgb, create_color_scheme

# COSMAC VIP keypad on the left of a QWERTY keyboard:
#   1 2 3 C        1 2 3 4
#   4 5 6 D   <-   Q W E R
#   7 8 9 E        A S D F
#   A 0 B F        Z X C V
KEY_MAP = {
    pygame.K_1: 0x1, pygame.K_2: 0x2, pygame.K_3: 0x3, pygame.K_4: 0xC,
    pygame.K_q: 0x4, pygame.K_w: 0x5, pygame.K_e: 0x6, pygame.K_r: 0xD,
    pygame.K_a: 0x7, pygame.K_s: 0x8, pygame.K_d: 0x9, pygame.K_f: 0xE,
    pygame.K_z: 0xA, pygame.K_x: 0x0, pygame.K_c: 0xB, pygame.K_v: 0xF,
}


class PygameRenderer:
    """Blits the framebuffer into a scaled pygame window."""

    def __init__(self, scale: int = 12, color_scheme: str = "white", caption: str = "CHIP-8"):
        self.scale = scale
        self.on_color, self.off_color = create_color_scheme(color_scheme)
        pygame.display.init()
        self.screen = pygame.display.set_mode((SCREEN_WIDTH * scale, SCREEN_HEIGHT * scale))
        pygame.display.set_caption(caption)

    def draw(self, display):
        rgb = chip8_display_to_rgb(display, self.scale, self.on_color, self.off_color)
        # surfarray is indexed [x, y]
        pygame.surfarray.blit_array(self.screen, rgb.swapaxes(0, 1))
        pygame.display.flip()


class PygameKeyboard:
    """Translates pygame key events into a 16-key keypad snapshot."""

    def __init__(self, key_map: dict = None):
        self.key_map = KEY_MAP if key_map is None else key_map
        self.keys = [False] * NUM_KEYS
        self.quit_requested = False

    def handle(self, event):
        if event.type == pygame.QUIT:
            self.quit_requested = True
        elif event.type == pygame.KEYDOWN:
            if event.key == pygame.K_ESCAPE:
                self.quit_requested = True
            elif event.key in self.key_map:
                self.keys[self.key_map[event.key]] = True
        elif event.type == pygame.KEYUP:
            if event.key in self.key_map:
                self.keys[self.key_map[event.key]] = False

    def poll(self) -> list:
        for event in pygame.event.get():
            self.handle(event)
        return list(self.keys)


class PygameBeeper:
    """Square-wave tone played while the sound timer is non-zero."""

    def __init__(self, frequency: int = 440, volume: float = 0.2, sample_rate: int = 44100):
        pygame.mixer.init(frequency=sample_rate, size=-16, channels=1)
        period = max(2, sample_rate // frequency)
        samples = np.arange(sample_rate // 10 // period * period)
        amplitude = int(volume * 32767)
        wave = np.where((samples % period) < period // 2, amplitude, -amplitude).astype(np.int16)
        _, _, channels = pygame.mixer.get_init()
        if channels > 1:
            wave = np.repeat(wave[:, None], channels, axis=1)
        self.sound = pygame.sndarray.make_sound(wave)

    def start_tone(self):
        self.sound.play(loops=-1)

    def stop_tone(self):
        self.sound.stop()


def close():
    pygame.quit()
