"""CHIP-8 memory access with bound checks."""

import jax
import jax.numpy as jnp

from chip8vm.constants import MEMORY_SIZE, PROGRAM_START, MAX_ROM_SIZE, STATUS_MEMORY_OUT_OF_BOUNDS
from chip8vm.errors import RomTooLarge
from chip8vm.state import EmulatorState, fault


def in_bounds(address, length=1) -> jnp.ndarray:
    """True when ``length`` bytes starting at ``address`` lie inside memory."""
    address = jnp.asarray(address, dtype=jnp.int32)
    return (address >= 0) & (address + length <= MEMORY_SIZE)


def read_byte(state: EmulatorState, address) -> tuple[EmulatorState, jnp.ndarray]:
    """Read one byte; an out-of-range address faults and reads as zero."""
    ok = in_bounds(address)
    value = jnp.where(ok, state.memory[jnp.clip(address, 0, MEMORY_SIZE - 1)], 0).astype(jnp.uint8)
    state = jax.lax.cond(ok, lambda s: s, lambda s: fault(s, STATUS_MEMORY_OUT_OF_BOUNDS), state)
    return state, value


def write_byte(state: EmulatorState, address, value) -> EmulatorState:
    """Write one byte; an out-of-range address faults and leaves memory untouched."""
    return jax.lax.cond(
        in_bounds(address),
        lambda s: s.replace(memory=s.memory.at[address].set(jnp.asarray(value).astype(jnp.uint8))),
        lambda s: fault(s, STATUS_MEMORY_OUT_OF_BOUNDS),
        state
    )


def load_program(state: EmulatorState, program: bytes) -> EmulatorState:
    """Copy a program image into memory starting at 0x200.

    Raises:
        RomTooLarge: if the image is larger than the program area.
    """
    if len(program) > MAX_ROM_SIZE:
        raise RomTooLarge(len(program))
    if not program:
        return state
    rom_array = jnp.array(list(program), dtype=jnp.uint8)
    new_memory = state.memory.at[PROGRAM_START:PROGRAM_START + len(program)].set(rom_array)
    return state.replace(memory=new_memory)
