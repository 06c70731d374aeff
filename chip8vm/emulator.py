"""Main CHIP-8 execution engine: fetch, dispatch and the per-tick step."""

from functools import partial

import jax
import jax.lax
import jax.numpy as jnp
from chip8vm.state import EmulatorState, fault, is_faulted
from chip8vm.decode import decode
from chip8vm.constants import (
    MEMORY_SIZE, STATUS_RUNNING, STATUS_WAITING_FOR_KEY, STATUS_END_OF_MEMORY,
)
from chip8vm.memory import load_program
from chip8vm.instructions.system import execute_system_instruction
from chip8vm.instructions.control_flow import (
    execute_jump, execute_call, execute_skip_if_equal_immediate,
    execute_skip_if_not_equal_immediate, execute_skip_if_equal_register,
    execute_skip_if_not_equal_register, execute_jump_with_offset, execute_skip_if_key
)
from chip8vm.instructions.alu import execute_alu_operation
from chip8vm.instructions.memory import execute_set, execute_add, execute_set_index, execute_random
from chip8vm.instructions.display import execute_display
from chip8vm.instructions.misc import execute_misc_instruction


def execute(state: EmulatorState, instruction: int) -> EmulatorState:
    """Execute single CHIP-8 instruction."""
    decoded_instruction = decode(instruction)

    return jax.lax.switch(
        decoded_instruction.opcode,
        [
            execute_system_instruction,
            execute_jump,
            execute_call,
            execute_skip_if_equal_immediate,
            execute_skip_if_not_equal_immediate,
            execute_skip_if_equal_register,
            execute_set,
            execute_add,
            execute_alu_operation,
            execute_skip_if_not_equal_register,
            execute_set_index,
            execute_jump_with_offset,
            execute_random,
            execute_display,
            execute_skip_if_key,
            execute_misc_instruction,
        ],
        state, decoded_instruction
    )


def _pack_u16(high: jnp.uint8, low: jnp.uint8) -> jnp.uint16:
    """Pack two bytes into uint16."""
    return (high.astype(jnp.uint16) << 8) | low.astype(jnp.uint16)


def fetch(state: EmulatorState) -> tuple[EmulatorState, jnp.uint16]:
    """Fetch next instruction from memory and advance PC by 2.

    A PC with no room left to advance halts the machine with END_OF_MEMORY.
    """
    address = jnp.minimum(state.pc.astype(jnp.int32), MEMORY_SIZE - 2)
    instruction = _pack_u16(state.memory[address], state.memory[address + 1])
    state = jax.lax.cond(
        state.pc.astype(jnp.int32) + 2 >= MEMORY_SIZE,
        lambda s: fault(s, STATUS_END_OF_MEMORY),
        lambda s: s.replace(pc=s.pc + 2),
        state
    )
    return state, instruction


def _run(state: EmulatorState) -> EmulatorState:
    state, instruction = fetch(state)
    return jax.lax.cond(
        is_faulted(state),
        lambda s: s,
        lambda s: execute(s, instruction),
        state
    )


def _await_key(state: EmulatorState) -> EmulatorState:
    def key_pressed_action(state):
        pressed_key = jnp.argmax(state.keypad).astype(jnp.uint8)
        return state.replace(
            V=state.V.at[state.wait_register].set(pressed_key),
            status=jnp.asarray(STATUS_RUNNING, dtype=jnp.uint8),
        )

    return jax.lax.cond(jnp.any(state.keypad), key_pressed_action, lambda s: s, state)


def _halted(state: EmulatorState) -> EmulatorState:
    return state


def step(state: EmulatorState) -> EmulatorState:
    """Advance the machine by one driver tick.

    Running: fetch, decode and execute one instruction. Waiting for key: poll
    the keypad snapshot, storing the lowest pressed key and resuming if any.
    Faulted: no change.
    """
    index = jnp.minimum(state.status, STATUS_WAITING_FOR_KEY + 1)
    return jax.lax.switch(index, [_run, _await_key, _halted], state)


def tick_timers(state: EmulatorState) -> EmulatorState:
    """Decrement the delay and sound timers once, stopping at zero."""
    return state.replace(
        delay_timer=jnp.where(state.delay_timer > 0, state.delay_timer - 1, 0).astype(jnp.uint8),
        sound_timer=jnp.where(state.sound_timer > 0, state.sound_timer - 1, 0).astype(jnp.uint8),
    )


def run_instruction(state, _):
    return step(state), None


@partial(jax.jit, static_argnums=1)
def run_cycles(state: EmulatorState, n: int) -> EmulatorState:
    """Run ``n`` driver ticks without touching the timers."""
    state, _ = jax.lax.scan(run_instruction, state, length=n)
    return state


@partial(jax.jit, static_argnums=1)
def run_frame(state: EmulatorState, cycles_per_frame: int) -> EmulatorState:
    """Run one timer period: ``cycles_per_frame`` ticks, then one timer decrement."""
    state, _ = jax.lax.scan(run_instruction, state, length=cycles_per_frame)
    return tick_timers(state)


def load_rom(state: EmulatorState, filename: str) -> EmulatorState:
    """Load ROM data into CHIP-8 memory starting at 0x200."""
    with open(filename, 'rb') as f:
        rom_data = f.read()
    return load_program(state, rom_data)
