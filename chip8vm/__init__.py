"""CHIP-8 virtual machine."""

from chip8vm.state import EmulatorState, StackState, create_state, reset
from chip8vm.emulator import execute, fetch, step, tick_timers, run_cycles, run_frame, load_rom
from chip8vm.memory import load_program, read_byte, write_byte
from chip8vm.decode import DecodedInstruction, Opcode, decode, classify, disassemble
from chip8vm.errors import (
    Chip8Error, RomTooLarge, StackOverflow, StackUnderflow, MemoryOutOfBounds, EndOfMemory,
    raise_for_status,
)
from chip8vm.constants import (
    MEMORY_SIZE, PROGRAM_START, MAX_ROM_SIZE, FONT_START, SCREEN_WIDTH, SCREEN_HEIGHT,
    STATUS_RUNNING, STATUS_WAITING_FOR_KEY, STATUS_STACK_OVERFLOW, STATUS_STACK_UNDERFLOW,
    STATUS_MEMORY_OUT_OF_BOUNDS, STATUS_END_OF_MEMORY,
)
from chip8vm.config import EmulatorConfig
from chip8vm.driver import CycleDriver
from chip8vm.rendering import chip8_display_to_rgb, create_color_scheme, display_to_text

__all__ = [
    "EmulatorState",
    "StackState",
    "create_state",
    "reset",
    "fetch",
    "execute",
    "step",
    "tick_timers",
    "run_cycles",
    "run_frame",
    "load_rom",
    "load_program",
    "read_byte",
    "write_byte",
    "DecodedInstruction",
    "Opcode",
    "decode",
    "classify",
    "disassemble",
    "Chip8Error",
    "RomTooLarge",
    "StackOverflow",
    "StackUnderflow",
    "MemoryOutOfBounds",
    "EndOfMemory",
    "raise_for_status",
    "MEMORY_SIZE",
    "PROGRAM_START",
    "MAX_ROM_SIZE",
    "FONT_START",
    "SCREEN_WIDTH",
    "SCREEN_HEIGHT",
    "STATUS_RUNNING",
    "STATUS_WAITING_FOR_KEY",
    "STATUS_STACK_OVERFLOW",
    "STATUS_STACK_UNDERFLOW",
    "STATUS_MEMORY_OUT_OF_BOUNDS",
    "STATUS_END_OF_MEMORY",
    "EmulatorConfig",
    "CycleDriver",
    "chip8_display_to_rgb",
    "create_color_scheme",
    "display_to_text",
]
