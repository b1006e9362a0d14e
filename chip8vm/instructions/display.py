"""CHIP-8 display operations."""

import jax.numpy as jnp
from chip8vm.state import MachineState
from chip8vm.decode import DecodedInstruction
from chip8vm.constants import (
    SCREEN_WIDTH, SCREEN_HEIGHT, MEMORY_SIZE, SPRITE_WIDTH, MAX_SPRITE_HEIGHT, FLAG_REGISTER,
)

# Row and column offsets covering the largest possible sprite.
rows = jnp.arange(MAX_SPRITE_HEIGHT)
cols = jnp.arange(SPRITE_WIDTH)


def sprite_layer(state: MachineState, instruction: DecodedInstruction) -> jnp.ndarray:
    """Rasterize the DXYN sprite into a screen-sized 0/1 layer.

    The sprite wraps around both screen edges, and the sprite rows are read
    from ``memory[I + r]`` with the address wrapping at the end of memory.
    """
    x0 = jnp.astype(state.V[instruction.x], jnp.int32) % SCREEN_WIDTH
    y0 = jnp.astype(state.V[instruction.y], jnp.int32) % SCREEN_HEIGHT

    addresses = (jnp.astype(state.I, jnp.int32) + rows) % MEMORY_SIZE
    sprite_bytes = jnp.astype(state.memory[addresses], jnp.int32)

    # Most significant bit is the leftmost pixel.
    bits = (sprite_bytes[:, None] >> (7 - cols)[None, :]) & 1
    bits = bits * (rows < instruction.n)[:, None]

    screen_y = (y0 + rows) % SCREEN_HEIGHT
    screen_x = (x0 + cols) % SCREEN_WIDTH
    layer = jnp.zeros((SCREEN_HEIGHT, SCREEN_WIDTH), dtype=jnp.uint8)
    return layer.at[screen_y[:, None], screen_x[None, :]].add(jnp.astype(bits, jnp.uint8))


def execute_draw_sprite(state: MachineState, instruction: DecodedInstruction) -> MachineState:
    """DXYN - XOR an 8xN sprite from memory[I] onto the screen at (VX, VY).

    The core instruction set leaves VF alone. The extended instruction set sets
    VF to 1 if any lit pixel was switched off, else 0.
    """
    layer = sprite_layer(state, instruction)
    display = state.display ^ layer

    if not state.config.extended:
        return state.replace(display=display)

    collision = jnp.astype(jnp.any(state.display & layer), jnp.uint8)
    return state.replace(display=display, V=state.V.at[FLAG_REGISTER].set(collision))
