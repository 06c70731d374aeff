"""CHIP-8 miscellaneous instructions (Fxxx)."""

import jax
import jax.lax
import jax.numpy as jnp
from chip8vm.state import EmulatorState, fault
from chip8vm.decode import DecodedInstruction
from chip8vm.constants import (
    FONT_START, FONT_GLYPH_SIZE, NUM_REGISTERS, STATUS_WAITING_FOR_KEY, STATUS_MEMORY_OUT_OF_BOUNDS,
)
from chip8vm.memory import in_bounds
from chip8vm.instructions.system import no_op


def execute_get_delay_timer(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX07 - Set VX to delay timer value."""
    return state.replace(V=state.V.at[instruction.x].set(state.delay_timer))


def execute_wait_for_key(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX0A - Suspend execution until a key is pressed.

    The cycle driver resolves the wait on a later tick and stores the key in VX.
    """
    return state.replace(
        status=jnp.asarray(STATUS_WAITING_FOR_KEY, dtype=jnp.uint8),
        wait_register=jnp.asarray(instruction.x).astype(jnp.uint8),
    )


def execute_set_delay_timer(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX15 - Set delay timer to VX."""
    return state.replace(delay_timer=state.V[instruction.x])


def execute_set_sound_timer(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX18 - Set sound timer to VX."""
    return state.replace(sound_timer=state.V[instruction.x])


def execute_add_to_index(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX1E - Add VX to I. Wraps at 16 bits, VF untouched."""
    return state.replace(I=state.I + state.V[instruction.x].astype(jnp.uint16))


def execute_font_character(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX29 - Set I to location of sprite for digit VX."""
    font_address = FONT_START + state.V[instruction.x].astype(jnp.uint16) * FONT_GLYPH_SIZE
    return state.replace(I=font_address.astype(jnp.uint16))


def execute_bcd_conversion(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX33 - Store BCD representation of VX at I, I+1, I+2."""
    value = state.V[instruction.x]

    def _store(state):
        digits = jnp.array([
            value // 100,
            (value // 10) % 10,
            value % 10
        ], dtype=jnp.uint8)
        indices = jnp.arange(3) + state.I.astype(jnp.int32)
        return state.replace(memory=state.memory.at[indices].set(digits))

    return jax.lax.cond(
        in_bounds(state.I, 3),
        _store,
        lambda state: fault(state, STATUS_MEMORY_OUT_OF_BOUNDS),
        state
    )


def execute_store_registers(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX55 - Store V0 through VX in memory starting at I. I is unchanged."""
    def _store(state):
        register_mask = jnp.arange(NUM_REGISTERS) <= instruction.x
        base_indices = state.I.astype(jnp.int32) + jnp.arange(NUM_REGISTERS)
        current_memory_values = state.memory.at[base_indices].get(mode="fill", fill_value=0)
        new_memory_values = jnp.where(register_mask, state.V, current_memory_values)
        return state.replace(memory=state.memory.at[base_indices].set(new_memory_values, mode="drop"))

    return jax.lax.cond(
        in_bounds(state.I, jnp.asarray(instruction.x, dtype=jnp.int32) + 1),
        _store,
        lambda state: fault(state, STATUS_MEMORY_OUT_OF_BOUNDS),
        state
    )


def execute_load_registers(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX65 - Load V0 through VX from memory starting at I. I is unchanged."""
    def _load(state):
        register_mask = jnp.arange(NUM_REGISTERS) <= instruction.x
        base_indices = state.I.astype(jnp.int32) + jnp.arange(NUM_REGISTERS)
        memory_values = state.memory.at[base_indices].get(mode="fill", fill_value=0)
        return state.replace(V=jnp.where(register_mask, memory_values, state.V))

    return jax.lax.cond(
        in_bounds(state.I, jnp.asarray(instruction.x, dtype=jnp.int32) + 1),
        _load,
        lambda state: fault(state, STATUS_MEMORY_OUT_OF_BOUNDS),
        state
    )


MISC_CODES = jnp.array([0x07, 0x0A, 0x15, 0x18, 0x1E, 0x29, 0x33, 0x55, 0x65])


def execute_misc_instruction(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """Dispatch FX instructions on the low byte; unknown codes are no-ops."""
    matches = MISC_CODES == instruction.nn
    switch_index = jnp.where(jnp.any(matches), jnp.argmax(matches), len(MISC_CODES))

    return jax.lax.switch(
        switch_index,
        [
            execute_get_delay_timer,
            execute_wait_for_key,
            execute_set_delay_timer,
            execute_set_sound_timer,
            execute_add_to_index,
            execute_font_character,
            execute_bcd_conversion,
            execute_store_registers,
            execute_load_registers,
            no_op,
        ],
        state, instruction
    )
