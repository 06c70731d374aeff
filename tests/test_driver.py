"""Tests for the host-side cycle driver."""

import io

import pytest
from chip8vm import (
    CycleDriver, EmulatorConfig, RomTooLarge, StackUnderflow, MemoryOutOfBounds,
    MAX_ROM_SIZE, PROGRAM_START,
)
from chip8vm.logging import MachineLogger
from conftest import program


class FakeRenderer:
    def __init__(self):
        self.frames = []

    def draw(self, display):
        self.frames.append(display)


class FakeKeyboard:
    def __init__(self, keys=None, quit_after=None):
        self.keys = keys or [False] * 16
        self.quit_after = quit_after
        self.polls = 0

    @property
    def quit_requested(self):
        return self.quit_after is not None and self.polls >= self.quit_after

    def poll(self):
        self.polls += 1
        return list(self.keys)


class FakeAudio:
    def __init__(self):
        self.events = []

    def start_tone(self):
        self.events.append("start")

    def stop_tone(self):
        self.events.append("stop")


class FakeClock:
    def __init__(self):
        self.now = 0.0
        self.sleeps = []

    def __call__(self):
        return self.now

    def sleep(self, seconds):
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.fixture
def log_stream():
    return io.StringIO()


@pytest.fixture
def make_driver(log_stream):
    def _make(level="WARNING", **kwargs):
        options = {"cycles_per_second": 600, "timer_hz": 60}
        collaborators = {k: kwargs.pop(k) for k in ("renderer", "input_source", "audio") if k in kwargs}
        options.update(kwargs)
        config = EmulatorConfig(log_level=level, **options)
        logger = MachineLogger(log_level=level, stream=log_stream, show_timestamps=False)
        return CycleDriver(config, logger=logger, **collaborators)
    return _make


class TestBoot:

    def test_boot_loads_program(self, make_driver):
        driver = make_driver()

        state = driver.boot(program(0x6005, 0x700A))

        assert state.pc == PROGRAM_START
        assert state.memory[PROGRAM_START] == 0x60
        assert driver.running
        assert not driver.halted

    def test_rom_too_large_is_raised_before_execution(self, make_driver):
        driver = make_driver()
        before = driver.state

        with pytest.raises(RomTooLarge) as excinfo:
            driver.boot(bytes(MAX_ROM_SIZE + 1))

        assert excinfo.value.classification == "fatal, pre-execution"
        assert driver.state is before
        assert driver.frames == 0

    def test_boot_rom_reads_file(self, make_driver, tmp_path):
        rom = tmp_path / "prog.ch8"
        rom.write_bytes(program(0x6005, 0x700A))
        driver = make_driver(level="INFO", rom_path=str(rom))

        driver.boot_rom()

        assert driver.state.memory[PROGRAM_START + 1] == 0x05

    def test_boot_rom_missing_file(self, make_driver, tmp_path):
        driver = make_driver()
        with pytest.raises(OSError):
            driver.boot_rom(str(tmp_path / "missing.ch8"))

    def test_boot_logs_configuration(self, make_driver, log_stream):
        driver = make_driver(level="INFO")

        driver.boot(program(0x1200))

        output = log_stream.getvalue()
        assert "Booting with 2 byte rom" in output
        assert "cycles_per_second: 600" in output


class TestRun:

    def test_run_frames_and_render(self, make_driver):
        renderer = FakeRenderer()
        driver = make_driver(renderer=renderer)
        driver.boot(program(0x6005, 0x700A, 0x1204))

        state = driver.run(max_frames=3, paced=False)

        assert state.V[0] == 15
        assert driver.frames == 3
        assert len(renderer.frames) == 3

    def test_cycles_per_frame(self, make_driver):
        # V0 += 1 forever: one increment per cycle
        driver = make_driver(cycles_per_second=120, timer_hz=60)
        driver.boot(program(0x7001, 0x1200))

        driver.run_frame()

        assert driver.state.V[0] == 1

    def test_step_runs_one_instruction(self, make_driver):
        driver = make_driver()
        driver.boot(program(0x6005, 0x700A))

        driver.step()
        assert driver.state.V[0] == 5
        driver.step()
        assert driver.state.V[0] == 15

    def test_fault_stops_run_and_is_logged(self, make_driver, log_stream):
        driver = make_driver()
        driver.boot(program(0x00EE))

        with pytest.raises(StackUnderflow, match="stack underflow"):
            driver.run(max_frames=5, paced=False)

        assert driver.halted
        assert driver.frames == 0
        assert "Halting (fatal): stack underflow" in log_stream.getvalue()

    def test_fault_from_step(self, make_driver):
        driver = make_driver()
        # I = 0xFFE; BCD V0 needs three bytes
        driver.boot(program(0xAFFE, 0xF033))

        driver.step()
        with pytest.raises(MemoryOutOfBounds):
            driver.step()

    def test_quit_request_stops_run(self, make_driver, log_stream):
        keyboard = FakeKeyboard(quit_after=2)
        driver = make_driver(level="INFO", input_source=keyboard)
        driver.boot(program(0x1200))

        driver.run(paced=False)

        assert driver.frames == 2
        assert "Stopped after 2 frames" in log_stream.getvalue()

    def test_paced_run_sleeps_each_frame(self, log_stream):
        clock = FakeClock()
        config = EmulatorConfig(cycles_per_second=600, timer_hz=60, log_level="WARNING")
        logger = MachineLogger(log_level="WARNING", stream=log_stream)
        driver = CycleDriver(config, logger=logger, clock=clock, sleep=clock.sleep)
        driver.boot(program(0x1200))

        driver.run(max_frames=3)

        assert len(clock.sleeps) == 3
        assert all(s == pytest.approx(1 / 60) for s in clock.sleeps)

    def test_reset_keeps_program(self, make_driver):
        driver = make_driver()
        driver.boot(program(0x6005, 0x700A, 0x1204))
        driver.run(max_frames=2, paced=False)

        state = driver.reset()

        assert state.pc == PROGRAM_START
        assert state.V[0] == 0
        assert driver.frames == 0
        driver.run(max_frames=1, paced=False)
        assert driver.state.V[0] == 15


class TestKeypad:

    def test_set_keypad_requires_sixteen_keys(self, make_driver):
        driver = make_driver()
        with pytest.raises(ValueError, match="16"):
            driver.set_keypad([True] * 15)

    def test_key_wait_resolves_from_input_source(self, make_driver):
        keyboard = FakeKeyboard()
        driver = make_driver(input_source=keyboard)
        # V3 = key; V4 = 1; spin
        driver.boot(program(0xF30A, 0x6401, 0x1204))

        driver.run_frame()
        assert driver.waiting_for_key
        assert driver.state.V[4] == 0

        keyboard.keys[7] = True
        driver.run_frame()

        assert not driver.waiting_for_key
        assert driver.state.V[3] == 7
        assert driver.state.V[4] == 1

    def test_key_skip_sees_snapshot(self, make_driver):
        driver = make_driver()
        # V0 = 2; SKP V0; V1 = 1; V2 = 1
        driver.boot(program(0x6002, 0xE09E, 0x6101, 0x6201))
        keys = [False] * 16
        keys[2] = True
        driver.set_keypad(keys)

        for _ in range(3):
            driver.step()

        assert driver.state.V[1] == 0
        assert driver.state.V[2] == 1


class TestAudio:

    def test_tone_follows_sound_timer(self, make_driver):
        audio = FakeAudio()
        driver = make_driver(audio=audio)
        # V0 = 3; ST = V0; spin
        driver.boot(program(0x6003, 0xF018, 0x1204))

        driver.run_frame()
        assert audio.events == ["start"]
        assert driver.state.sound_timer == 2

        driver.run(max_frames=5, paced=False)
        assert audio.events == ["start", "stop"]
        assert driver.state.sound_timer == 0

    def test_tone_stops_on_fault(self, make_driver):
        audio = FakeAudio()
        driver = make_driver(audio=audio)
        # V0 = 9; ST = V0; count V1 to 15 over several frames; RET with an empty stack
        driver.boot(program(0x6009, 0xF018, 0x7101, 0x310F, 0x1204, 0x00EE))

        with pytest.raises(StackUnderflow):
            driver.run(max_frames=10, paced=False)

        assert driver.frames == 4
        assert audio.events == ["start", "stop"]

    def test_no_audio_sink(self, make_driver):
        driver = make_driver()
        driver.boot(program(0x6003, 0xF018, 0x1204))
        driver.run(max_frames=4, paced=False)
        assert driver.state.sound_timer == 0


class TestTrace:

    def test_trace_logs_each_instruction(self, make_driver, log_stream):
        driver = make_driver(level="DEBUG", trace=True, cycles_per_second=120)
        driver.boot(program(0x6005, 0x700A))

        driver.run_frame()

        output = log_stream.getvalue()
        assert "0x200: 6005 LD_IMM V0, 0x05" in output
        assert "0x202: 700A ADD_IMM V0, 0x0A" in output
        assert "V0=0F" in output

    def test_no_trace_without_flag(self, make_driver, log_stream):
        driver = make_driver(level="DEBUG", cycles_per_second=120)
        driver.boot(program(0x6005, 0x700A))

        driver.run_frame()

        assert "LD_IMM" not in log_stream.getvalue()
