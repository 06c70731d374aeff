"""CHIP-8 ALU operations (8xxx).

Each operation takes (VX, VY) and returns (result, flag, writes_flag). VX is
written first and VF second, so a flag-setting operation on VF leaves the flag.
"""

import jax
import jax.lax
import jax.numpy as jnp
from chip8vm.state import EmulatorState
from chip8vm.decode import DecodedInstruction


def _flag(value) -> tuple:
    return jnp.asarray(value).astype(jnp.uint8), jnp.asarray(True)


def _no_flag() -> tuple:
    return jnp.zeros((), dtype=jnp.uint8), jnp.asarray(False)


def alu_set(vx: jnp.ndarray, vy: jnp.ndarray) -> tuple:
    """8XY0 - Set: VX = VY."""
    return (vy, *_no_flag())


def alu_or(vx: jnp.ndarray, vy: jnp.ndarray) -> tuple:
    """8XY1 - Binary OR: VX |= VY."""
    return (vx | vy, *_no_flag())


def alu_and(vx: jnp.ndarray, vy: jnp.ndarray) -> tuple:
    """8XY2 - Binary AND: VX &= VY."""
    return (vx & vy, *_no_flag())


def alu_xor(vx: jnp.ndarray, vy: jnp.ndarray) -> tuple:
    """8XY3 - Logical XOR: VX ^= VY."""
    return (vx ^ vy, *_no_flag())


def alu_add(vx: jnp.ndarray, vy: jnp.ndarray) -> tuple:
    """8XY4 - Add: VX += VY, VF = carry."""
    result = vx.astype(jnp.int32) + vy.astype(jnp.int32)
    return ((result & 0xFF).astype(jnp.uint8), *_flag(result > 255))


def alu_sub_xy(vx: jnp.ndarray, vy: jnp.ndarray) -> tuple:
    """8XY5 - Subtract: VX -= VY, VF = NOT borrow."""
    return (vx - vy, *_flag(vx >= vy))


def alu_shift_right(vx: jnp.ndarray, vy: jnp.ndarray) -> tuple:
    """8XY6 - Shift right: VF = LSB of VX, VX >>= 1."""
    return (vx >> 1, *_flag(vx & 1))


def alu_sub_yx(vx: jnp.ndarray, vy: jnp.ndarray) -> tuple:
    """8XY7 - Subtract: VX = VY - VX, VF = NOT borrow."""
    return (vy - vx, *_flag(vy >= vx))


def alu_shift_left(vx: jnp.ndarray, vy: jnp.ndarray) -> tuple:
    """8XYE - Shift left: VF = MSB of VX, VX <<= 1."""
    return (vx << 1, *_flag(vx >> 7))


# Valid low nibbles: 0-7 and E. Everything else is a no-op.
VALID_OPS = jnp.array([1, 1, 1, 1, 1, 1, 1, 1, 0, 0, 0, 0, 0, 0, 1, 0], dtype=bool)


def execute_alu_operation(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """8XYN - ALU operations dispatcher."""
    vx = state.V[instruction.x]
    vy = state.V[instruction.y]

    def _apply(state):
        result, vf, writes_flag = jax.lax.switch(
            # Map only valid operations: 0,1,2,3,4,5,6,7,14 -> 0,1,2,3,4,5,6,7,8
            jnp.where(instruction.n == 14, 8, instruction.n),
            [alu_set, alu_or, alu_and, alu_xor, alu_add,
             alu_sub_xy, alu_shift_right, alu_sub_yx, alu_shift_left],
            vx, vy
        )
        new_V = state.V.at[instruction.x].set(result)
        new_V = jnp.where(writes_flag, new_V.at[15].set(vf), new_V)
        return state.replace(V=new_V)

    return jax.lax.cond(VALID_OPS[instruction.n], _apply, lambda state: state, state)
