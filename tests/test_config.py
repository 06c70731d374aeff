"""Tests for session configuration."""

import pytest
from chip8vm import EmulatorConfig


def test_defaults():
    config = EmulatorConfig()
    assert config.cycles_per_second == 700
    assert config.timer_hz == 60
    assert config.cycles_per_frame == 11


def test_cycles_per_frame_is_at_least_one():
    assert EmulatorConfig(cycles_per_second=30, timer_hz=60).cycles_per_frame == 1
    assert EmulatorConfig(cycles_per_second=600, timer_hz=60).cycles_per_frame == 10


@pytest.mark.parametrize("field", ["cycles_per_second", "timer_hz", "scale"])
def test_rejects_non_positive(field):
    with pytest.raises(ValueError, match=field):
        EmulatorConfig(**{field: 0})


def test_as_dict():
    config = EmulatorConfig(rom_path="pong.ch8", seed=3)
    values = config.as_dict()
    assert values["rom_path"] == "pong.ch8"
    assert values["seed"] == 3
