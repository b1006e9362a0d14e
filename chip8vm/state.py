"""CHIP-8 machine state structures."""

from typing import Optional

import jax
import jax.numpy as jnp
import numpy as np
from flax.struct import dataclass, PyTreeNode, field

from chip8vm.config import MachineConfig
from chip8vm.constants import (
    MEMORY_SIZE, PROGRAM_START, MAX_PROGRAM_SIZE, FONT_START, FONT_DATA,
    SCREEN_WIDTH, SCREEN_HEIGHT, SCREEN_SIZE, NUM_REGISTERS, NUM_KEYS, STACK_SIZE,
)


@dataclass(frozen=True)
class StackState:
    """Return-address stack used by call/return."""
    data: jnp.ndarray
    pointer: jnp.ndarray


class MachineState(PyTreeNode):
    """Complete CHIP-8 machine state.

    The display is indexed ``display[y, x]``; flattening it row-major gives the
    2048-byte screen buffer handed to renderers.
    """
    rng: jax.Array
    memory: jnp.ndarray
    V: jnp.ndarray
    I: jnp.ndarray
    pc: jnp.ndarray
    display: jnp.ndarray
    stack: StackState
    delay_timer: jnp.ndarray
    sound_timer: jnp.ndarray
    keypad: jnp.ndarray
    config: MachineConfig = field(pytree_node=False, default=MachineConfig())


def create_state(config: Optional[MachineConfig] = None, rng: Optional[jax.Array] = None) -> MachineState:
    """Create a freshly reset machine with the font loaded below 0x200."""
    if config is None:
        config = MachineConfig()
    if rng is None:
        rng = jax.random.PRNGKey(0)

    memory = jnp.zeros(MEMORY_SIZE, dtype=jnp.uint8)
    memory = memory.at[FONT_START:FONT_START + len(FONT_DATA)].set(FONT_DATA)

    return MachineState(
        rng=rng,
        memory=memory,
        V=jnp.zeros(NUM_REGISTERS, dtype=jnp.uint8),
        I=jnp.zeros((), dtype=jnp.uint16),
        pc=jnp.asarray(PROGRAM_START, dtype=jnp.uint16),
        display=jnp.zeros((SCREEN_HEIGHT, SCREEN_WIDTH), dtype=jnp.uint8),
        stack=StackState(
            data=jnp.zeros(STACK_SIZE, dtype=jnp.uint16),
            pointer=jnp.zeros((), dtype=jnp.int32),
        ),
        delay_timer=jnp.zeros((), dtype=jnp.uint8),
        sound_timer=jnp.zeros((), dtype=jnp.uint8),
        keypad=jnp.zeros(NUM_KEYS, dtype=jnp.bool_),
        config=config,
    )


def reset(state: MachineState) -> MachineState:
    """Return a reset copy of ``state``, keeping its config and RNG key."""
    return create_state(state.config, state.rng)


def load_program(state: MachineState, program: bytes, size: Optional[int] = None) -> MachineState:
    """Reset the machine and copy ``program[:size]`` into memory at 0x200.

    Raises:
        ValueError: If ``size`` is negative, exceeds the program buffer, or the
            program does not fit between 0x200 and the end of memory
    """
    if size is None:
        size = len(program)
    if size < 0 or size > len(program):
        raise ValueError(f"Invalid program size {size} for a buffer of {len(program)} bytes")
    if size > MAX_PROGRAM_SIZE:
        raise ValueError(
            f"Program of {size} bytes does not fit in memory "
            f"(at most {MAX_PROGRAM_SIZE} bytes fit from 0x{PROGRAM_START:03X})"
        )

    state = reset(state)
    if size == 0:
        return state

    program_array = jnp.asarray(np.frombuffer(bytes(program[:size]), dtype=np.uint8))
    memory = state.memory.at[PROGRAM_START:PROGRAM_START + size].set(program_array)
    return state.replace(memory=memory)


def clear_screen(state: MachineState) -> MachineState:
    """Zero the whole framebuffer."""
    return state.replace(display=jnp.zeros_like(state.display))


def set_key(state: MachineState, key: int, pressed: bool) -> MachineState:
    """Mark keypad ``key`` (0x0-0xF) as pressed or released."""
    if not 0 <= key < NUM_KEYS:
        raise ValueError(f"Unknown key {key!r}. Keys are 0x0-0x{NUM_KEYS - 1:X}")
    return state.replace(keypad=state.keypad.at[key].set(pressed))


def tick_timers(state: MachineState) -> MachineState:
    """Decrement the delay and sound timers by one, stopping at zero."""
    return state.replace(
        delay_timer=jnp.where(state.delay_timer > 0, state.delay_timer - 1, 0).astype(jnp.uint8),
        sound_timer=jnp.where(state.sound_timer > 0, state.sound_timer - 1, 0).astype(jnp.uint8),
    )


def get_screen(state: MachineState) -> np.ndarray:
    """Framebuffer as a read-only flat array of 2048 bytes (0 or 1), row-major."""
    screen = np.asarray(state.display).reshape(SCREEN_SIZE)
    screen.flags.writeable = False
    return screen
