"""CHIP-8 machine state structures."""

import jax
import jax.numpy as jnp
from flax.struct import dataclass, field, PyTreeNode

from chip8vm.constants import (
    MEMORY_SIZE, PROGRAM_START, FONT_START, FONT_DATA, SCREEN_WIDTH, SCREEN_HEIGHT,
    STACK_SIZE, NUM_REGISTERS, NUM_KEYS, STATUS_RUNNING, FIRST_FAULT_STATUS,
)


@dataclass(frozen=True)
class StackState:
    """Call stack for subroutine return addresses."""
    data: jnp.ndarray = field(default_factory=lambda: jnp.zeros(STACK_SIZE, dtype=jnp.uint16))
    pointer: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.uint8))


class EmulatorState(PyTreeNode):
    """Complete CHIP-8 machine state.

    The state is immutable: every instruction handler returns a new state built
    with ``replace``. ``status`` tracks the cycle driver (running, waiting for a
    key, or halted on a fault) and ``wait_register`` holds the destination
    register of a pending FX0A.
    """
    rng: jax.Array
    memory: jnp.ndarray = field(default_factory=lambda: jnp.zeros(MEMORY_SIZE, dtype=jnp.uint8))
    pc: jnp.ndarray = field(default_factory=lambda: jnp.asarray(PROGRAM_START, dtype=jnp.uint16))
    display: jnp.ndarray = field(default_factory=lambda: jnp.zeros((SCREEN_WIDTH, SCREEN_HEIGHT), dtype=jnp.bool_))
    stack: StackState = field(default_factory=lambda: StackState())
    delay_timer: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.uint8))
    sound_timer: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.uint8))
    keypad: jnp.ndarray = field(default_factory=lambda: jnp.zeros(NUM_KEYS, dtype=jnp.bool_))
    V: jnp.ndarray = field(default_factory=lambda: jnp.zeros(NUM_REGISTERS, dtype=jnp.uint8))
    I: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.uint16))
    status: jnp.ndarray = field(default_factory=lambda: jnp.asarray(STATUS_RUNNING, dtype=jnp.uint8))
    wait_register: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.uint8))


def _with_font(memory: jnp.ndarray) -> jnp.ndarray:
    return memory.at[FONT_START:FONT_START + len(FONT_DATA)].set(FONT_DATA)


def create_state(rng: jax.Array = jax.random.PRNGKey(0)) -> EmulatorState:
    """Create boot-time state with the font table loaded."""
    state = EmulatorState(rng)
    return state.replace(memory=_with_font(state.memory))


def reset(state: EmulatorState) -> EmulatorState:
    """Return every field to its boot-time value without reloading the program.

    Memory from ``PROGRAM_START`` upward is kept as is; the reserved region is
    cleared and the font table rewritten. The rng key is carried over.
    """
    fresh = create_state(state.rng)
    memory = fresh.memory.at[PROGRAM_START:].set(state.memory[PROGRAM_START:])
    return fresh.replace(memory=memory)


def fault(state: EmulatorState, status: int) -> EmulatorState:
    """Halt the machine with the given fault status."""
    return state.replace(status=jnp.asarray(status, dtype=jnp.uint8))


def is_faulted(state: EmulatorState) -> jnp.ndarray:
    """True once the machine has halted on a fatal condition."""
    return state.status >= FIRST_FAULT_STATUS
