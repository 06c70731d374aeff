"""CHIP-8 sprite drawing (DXYN)."""

import jax
import jax.numpy as jnp
from chip8vm.state import EmulatorState, fault
from chip8vm.decode import DecodedInstruction
from chip8vm.constants import SCREEN_WIDTH, SCREEN_HEIGHT, MEMORY_SIZE, STATUS_MEMORY_OUT_OF_BOUNDS
from chip8vm.memory import in_bounds

# Pre-computed coordinate grids for display operations
xx, yy = jnp.meshgrid(jnp.arange(SCREEN_WIDTH), jnp.arange(SCREEN_HEIGHT), indexing='ij')


def sprite_mask(memory: jnp.ndarray, index, origin_x, origin_y, height) -> jnp.ndarray:
    """Project an 8-wide sprite of ``height`` rows onto a screen-sized mask.

    Row r, column c of the sprite lands on ((x + c) mod 64, (y + r) mod 32);
    columns are read most significant bit first.
    """
    origin_x = jnp.asarray(origin_x, dtype=jnp.int32) % SCREEN_WIDTH
    origin_y = jnp.asarray(origin_y, dtype=jnp.int32) % SCREEN_HEIGHT
    col_offset = (xx - origin_x) % SCREEN_WIDTH
    row_offset = (yy - origin_y) % SCREEN_HEIGHT
    covered = (col_offset < 8) & (row_offset < height)

    address = jnp.clip(jnp.asarray(index, dtype=jnp.int32) + row_offset, 0, MEMORY_SIZE - 1)
    sprite_bytes = memory[address].astype(jnp.int32)
    return (((sprite_bytes >> (7 - jnp.minimum(col_offset, 7))) & 1) == 1) & covered


def blit(display: jnp.ndarray, sprite: jnp.ndarray) -> tuple[jnp.ndarray, jnp.ndarray]:
    """XOR a sprite mask onto the display, returning (display, collision)."""
    collision = jnp.any(display & sprite)
    return display ^ sprite, collision


def execute_display(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """DXYN - Draw sprite at (VX, VY) with height N. VF = collision."""
    def _draw(state):
        sprite = sprite_mask(state.memory, state.I, state.V[instruction.x], state.V[instruction.y], instruction.n)
        display, collision = blit(state.display, sprite)
        return state.replace(display=display, V=state.V.at[15].set(collision.astype(jnp.uint8)))

    return jax.lax.cond(
        in_bounds(state.I, instruction.n),
        _draw,
        lambda state: fault(state, STATUS_MEMORY_OUT_OF_BOUNDS),
        state
    )
