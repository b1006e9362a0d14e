"""Test configuration and fixtures for CHIP-8 interpreter tests."""

import numpy as np
import pytest
import jax.numpy as jnp
from chip8vm import create_state, load_program, MachineConfig, InstructionSet


@pytest.fixture
def fresh_state():
    """Provide a fresh core-profile state for each test."""
    return create_state()


@pytest.fixture
def extended_state():
    """Provide a fresh state running the full instruction set in modern mode."""
    return create_state(MachineConfig(instruction_set=InstructionSet.EXTENDED))


@pytest.fixture
def legacy_state():
    """Provide a fresh state running the full instruction set with COSMAC VIP quirks."""
    return create_state(MachineConfig(instruction_set=InstructionSet.EXTENDED, modern_mode=False))


def setup_sprite_in_memory(state, address, sprite_bytes):
    """Helper to put sprite data in memory."""
    return state.replace(
        memory=state.memory.at[address:address + len(sprite_bytes)].set(
            jnp.array(sprite_bytes, dtype=jnp.uint8)
        )
    )


def program_bytes(*words):
    """Pack 16-bit instruction words big-endian."""
    return b"".join(word.to_bytes(2, "big") for word in words)


def load_words(state, *words):
    """Load a program made of the given instruction words."""
    return load_program(state, program_bytes(*words))


def snapshot(state):
    """Host copies of everything an instruction could touch, pc excluded."""
    return {
        "V": np.asarray(state.V).copy(),
        "I": int(state.I),
        "display": np.asarray(state.display).copy(),
        "memory": np.asarray(state.memory).copy(),
        "delay_timer": int(state.delay_timer),
        "sound_timer": int(state.sound_timer),
        "stack": np.asarray(state.stack.data).copy(),
        "stack_pointer": int(state.stack.pointer),
    }


def assert_same_snapshot(before, after):
    assert before.keys() == after.keys()
    for key in before:
        np.testing.assert_array_equal(before[key], after[key], err_msg=key)
