"""Cycle driver: owns the machine state and paces instructions and timers.

Instructions run at ``cycles_per_second`` and the delay/sound timers tick at
``timer_hz``; each timer period is one frame. Before a frame the keypad
snapshot is refreshed from the input source, after it the framebuffer is handed
to the renderer and the audio sink is told about sound timer edges.

Collaborators are duck-typed and optional:

- renderer: ``draw(display)``
- input source: ``poll() -> sequence of 16 bools`` and ``quit_requested``
- audio sink: ``start_tone()`` / ``stop_tone()``
"""

import time
from typing import Optional, Sequence

import jax
import jax.numpy as jnp

from chip8vm.config import EmulatorConfig
from chip8vm.constants import NUM_KEYS, STATUS_RUNNING, STATUS_WAITING_FOR_KEY
from chip8vm.decode import disassemble
from chip8vm.emulator import step, tick_timers, run_cycles
from chip8vm.errors import Chip8Error, raise_for_status
from chip8vm.logging import MachineLogger
from chip8vm.memory import load_program
from chip8vm.state import EmulatorState, create_state, reset, is_faulted

_step = jax.jit(step)
_tick_timers = jax.jit(tick_timers)


class CycleDriver:
    """Runs a single CHIP-8 machine against host collaborators."""

    def __init__(
        self,
        config: EmulatorConfig,
        renderer=None,
        input_source=None,
        audio=None,
        logger: Optional[MachineLogger] = None,
        clock=time.perf_counter,
        sleep=time.sleep,
    ):
        self.config = config
        self.renderer = renderer
        self.input_source = input_source
        self.audio = audio
        self.logger = logger or MachineLogger(log_level=config.log_level)
        self.clock = clock
        self.sleep = sleep

        self.state: EmulatorState = create_state(jax.random.PRNGKey(config.seed))
        self.frames = 0
        self.tone_on = False

    def boot(self, program: bytes) -> EmulatorState:
        """Build a fresh machine with ``program`` loaded at 0x200.

        Raises:
            RomTooLarge: before anything runs, if the program does not fit.
        """
        state = load_program(create_state(jax.random.PRNGKey(self.config.seed)), program)
        self.state = state
        self.frames = 0
        self._set_tone(False)
        self.logger.log_boot(self.config.as_dict(), len(program))
        return state

    def boot_rom(self, path: Optional[str] = None) -> EmulatorState:
        """Read a ROM file (default: ``config.rom_path``) and boot it."""
        path = path or self.config.rom_path
        with open(path, "rb") as f:
            program = f.read()
        self.logger.info(f"Loaded {path}")
        return self.boot(program)

    def reset(self) -> EmulatorState:
        """Return to boot-time state keeping the loaded program."""
        self.state = reset(self.state)
        self.frames = 0
        self._set_tone(False)
        self.logger.info("Reset")
        return self.state

    @property
    def waiting_for_key(self) -> bool:
        return int(self.state.status) == STATUS_WAITING_FOR_KEY

    @property
    def running(self) -> bool:
        return int(self.state.status) == STATUS_RUNNING

    @property
    def halted(self) -> bool:
        return bool(is_faulted(self.state))

    def set_keypad(self, keys: Sequence[bool]):
        """Replace the keypad snapshot with 16 pressed/released flags."""
        if len(keys) != NUM_KEYS:
            raise ValueError(f"Expected {NUM_KEYS} key states, got {len(keys)}")
        self.state = self.state.replace(keypad=jnp.asarray(keys, dtype=jnp.bool_))

    def step(self) -> EmulatorState:
        """Run one driver tick (one instruction, or one key poll while waiting)."""
        if self.config.trace and self.running:
            pc = int(self.state.pc)
            if pc + 1 < len(self.state.memory):
                word = (int(self.state.memory[pc]) << 8) | int(self.state.memory[pc + 1])
                self.logger.log_instruction(pc, disassemble(word))
        self.state = _step(self.state)
        self._check()
        self._update_tone()
        return self.state

    def tick_timers(self) -> EmulatorState:
        """Apply one timer period to the delay and sound timers."""
        self.state = _tick_timers(self.state)
        self._update_tone()
        return self.state

    def run_frame(self) -> EmulatorState:
        """Run one frame: poll input, execute a timer period of cycles, tick, render."""
        if self.input_source is not None:
            self.set_keypad(self.input_source.poll())

        if self.config.trace:
            for _ in range(self.config.cycles_per_frame):
                self.step()
        else:
            self.state = run_cycles(self.state, self.config.cycles_per_frame)
            self._check()
            self._update_tone()

        self.tick_timers()
        self.frames += 1
        self.logger.log_registers(self.state)

        if self.renderer is not None:
            self.renderer.draw(self.state.display)
        return self.state

    def run(self, max_frames: Optional[int] = None, paced: bool = True) -> EmulatorState:
        """Run frames until the input source asks to quit or ``max_frames`` is reached.

        Frames are paced to ``timer_hz`` of wall-clock time unless ``paced`` is
        False. A machine fault stops the loop and is re-raised.
        """
        period = 1.0 / self.config.timer_hz
        deadline = self.clock()
        try:
            while max_frames is None or self.frames < max_frames:
                if self.input_source is not None and self.input_source.quit_requested:
                    break
                self.run_frame()
                if not paced:
                    continue
                deadline += period
                delay = deadline - self.clock()
                if delay > 0:
                    self.sleep(delay)
                else:
                    # Fell behind; drop the backlog rather than run frames back to back.
                    deadline = self.clock()
        except Chip8Error as error:
            self.logger.log_fault(error)
            raise
        finally:
            self._set_tone(False)
        self.logger.log_shutdown(self.frames)
        return self.state

    def _check(self):
        raise_for_status(self.state)

    def _update_tone(self):
        self._set_tone(int(self.state.sound_timer) > 0)

    def _set_tone(self, active: bool):
        if active == self.tone_on:
            return
        self.tone_on = active
        if self.audio is None:
            return
        if active:
            self.logger.debug("Playing audio")
            self.audio.start_tone()
        else:
            self.logger.debug("Audio paused")
            self.audio.stop_tone()
