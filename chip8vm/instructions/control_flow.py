"""CHIP-8 control flow instructions."""

import jax
import jax.lax
import jax.numpy as jnp
from chip8vm.state import EmulatorState, fault
from chip8vm.decode import DecodedInstruction
from chip8vm.constants import STATUS_STACK_OVERFLOW, STATUS_MEMORY_OUT_OF_BOUNDS
from chip8vm.memory import in_bounds
from chip8vm.stack import push, is_full


def execute_jump(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """1NNN - Jump to address NNN."""
    return state.replace(pc=jnp.asarray(instruction.nnn, dtype=jnp.uint16))


def execute_call(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """2NNN - Call subroutine at NNN."""
    def _call(state):
        state = state.replace(stack=push(state.stack, state.pc))
        return execute_jump(state, instruction)

    return jax.lax.cond(
        is_full(state.stack),
        lambda state: fault(state, STATUS_STACK_OVERFLOW),
        _call,
        state
    )


def make_skip_instruction(condition_fn):
    """Factory for skip instructions."""
    def skip_instruction(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
        condition = condition_fn(state, instruction)
        return jax.lax.cond(
            condition,
            lambda s: s.replace(pc=s.pc + 2),
            lambda s: s,
            state
        )
    return skip_instruction


execute_skip_if_equal_immediate = make_skip_instruction(
    lambda state, inst: state.V[inst.x] == inst.nn
)

execute_skip_if_not_equal_immediate = make_skip_instruction(
    lambda state, inst: state.V[inst.x] != inst.nn
)

# 5XY1..5XYF and 9XY1..9XYF are not instructions and fall through as no-ops.
execute_skip_if_equal_register = make_skip_instruction(
    lambda state, inst: (state.V[inst.x] == state.V[inst.y]) & (inst.n == 0)
)

execute_skip_if_not_equal_register = make_skip_instruction(
    lambda state, inst: (state.V[inst.x] != state.V[inst.y]) & (inst.n == 0)
)


def execute_jump_with_offset(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """BNNN - Jump to address NNN + V0. A target past the end of memory faults."""
    jump_address = jnp.asarray(instruction.nnn, dtype=jnp.uint16) + state.V[0].astype(jnp.uint16)

    return jax.lax.cond(
        in_bounds(jump_address),
        lambda state: state.replace(pc=jump_address),
        lambda state: fault(state, STATUS_MEMORY_OUT_OF_BOUNDS),
        state
    )


def execute_skip_if_key(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """EX9E/EXA1 - Skip if key pressed/not pressed."""
    key_index = state.V[instruction.x] & 0xF
    key_pressed = state.keypad[key_index]
    is_pressed_test = instruction.nn == 0x9E
    is_not_pressed_test = instruction.nn == 0xA1
    condition = (is_pressed_test & key_pressed) | (is_not_pressed_test & ~key_pressed)

    return jax.lax.cond(
        condition,
        lambda state: state.replace(pc=state.pc + 2),
        lambda state: state,
        state
    )
