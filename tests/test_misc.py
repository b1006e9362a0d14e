"""Tests for miscellaneous instructions (Fxxx), extended instruction set only."""

import numpy as np
import pytest
import jax.numpy as jnp
from chip8vm import execute, step, set_key, tick_timers, FONT_START
from conftest import load_words


class TestTimers:
    """Test timer-related instructions."""

    def test_timer_instructions(self, extended_state):
        state = execute(extended_state, 0x6030)  # V0 = 48
        state = execute(state, 0xF015)  # delay timer = V0
        assert state.delay_timer == 48

        state = execute(state, 0x6120)  # V1 = 32
        state = execute(state, 0xF118)  # sound timer = V1
        assert state.sound_timer == 32

        state = execute(state, 0xF207)  # V2 = delay timer
        assert state.V[2] == 48

    def test_timers_count_down(self, extended_state):
        state = execute(extended_state, 0x6002)
        state = execute(state, 0xF018)
        state = tick_timers(state)
        assert state.sound_timer == 1
        state = tick_timers(tick_timers(state))
        assert state.sound_timer == 0


class TestWaitForKey:
    """FX0A - block until a key is pressed."""

    def test_waits_without_key(self, extended_state):
        state = load_words(extended_state, 0xF30A)
        state, _ = step(state)
        assert state.pc == 0x200
        state, _ = step(state)
        assert state.pc == 0x200

    def test_stores_pressed_key(self, extended_state):
        state = set_key(load_words(extended_state, 0xF30A), 0xB, True)
        state, _ = step(state)
        assert state.pc == 0x202
        assert state.V[3] == 0xB


class TestIndex:
    """FX1E and FX29."""

    def test_add_to_index(self, extended_state):
        state = execute(extended_state, 0xA100)
        state = execute(state, 0x6220)
        state = execute(state, 0xF21E)
        assert state.I == 0x120

    def test_add_to_index_wraps(self, extended_state):
        state = execute(extended_state, 0xAFFF)
        state = execute(state, 0x6202)
        state = execute(state, 0xF21E)
        assert state.I == 0x001

    @pytest.mark.parametrize("digit", [0x0, 0x7, 0xF])
    def test_font_character(self, extended_state, digit):
        state = execute(extended_state, 0x6000 | digit)
        state = execute(state, 0xF029)
        assert state.I == FONT_START + digit * 5

    def test_font_sprite_draws_digit(self, extended_state):
        state = execute(extended_state, 0x6000)  # digit 0
        state = execute(state, 0xF029)
        state = execute(state, 0xD005)  # V0 = V0 = 0, height 5
        np.testing.assert_array_equal(state.display[0, :4], [1, 1, 1, 1])
        np.testing.assert_array_equal(state.display[1, :4], [1, 0, 0, 1])


class TestBCD:
    """FX33 - BCD conversion."""

    @pytest.mark.parametrize("value, digits", [(156, [1, 5, 6]), (0, [0, 0, 0]), (255, [2, 5, 5]), (7, [0, 0, 7])])
    def test_bcd(self, extended_state, value, digits):
        state = execute(extended_state, 0x6000 | value)
        state = execute(state, 0xA300)
        state = execute(state, 0xF033)
        np.testing.assert_array_equal(state.memory[0x300:0x303], digits)


class TestRegisterMemory:
    """FX55 and FX65."""

    def test_store_registers_modern(self, extended_state):
        state = extended_state.replace(V=jnp.arange(1, 17, dtype=jnp.uint8))
        state = execute(state, 0xA400)
        state = execute(state, 0xF355)
        np.testing.assert_array_equal(state.memory[0x400:0x405], [1, 2, 3, 4, 0])
        assert state.I == 0x400

    def test_store_registers_legacy(self, legacy_state):
        state = legacy_state.replace(V=jnp.arange(1, 17, dtype=jnp.uint8))
        state = execute(state, 0xA400)
        state = execute(state, 0xF355)
        np.testing.assert_array_equal(state.memory[0x400:0x405], [1, 2, 3, 4, 0])
        assert state.I == 0x404

    def test_load_registers(self, extended_state):
        state = extended_state.replace(
            memory=extended_state.memory.at[0x500:0x503].set(jnp.array([9, 8, 7], dtype=jnp.uint8)),
            V=extended_state.V.at[3].set(0x33),
        )
        state = execute(state, 0xA500)
        state = execute(state, 0xF265)
        np.testing.assert_array_equal(state.V[:4], [9, 8, 7, 0x33])
        assert state.I == 0x500

    def test_load_registers_legacy(self, legacy_state):
        state = execute(legacy_state, 0xA500)
        state = execute(state, 0xF265)
        assert state.I == 0x503

    def test_store_then_load_roundtrip(self, extended_state):
        original = jnp.array([0x12, 0x34, 0x56] + [0] * 13, dtype=jnp.uint8)
        state = extended_state.replace(V=original)
        state = execute(state, 0xA600)
        state = execute(state, 0xF255)
        state = state.replace(V=jnp.zeros(16, dtype=jnp.uint8))
        state = execute(state, 0xF265)
        np.testing.assert_array_equal(state.V, original)


class TestUnassignedLowByte:
    """FXNN with a low byte outside the known set leaves the machine alone."""

    @pytest.mark.parametrize("word", [0xF099, 0xF300, 0xFF66])
    def test_no_effect(self, extended_state, word):
        state = execute(extended_state, 0x6342)
        after = execute(state, word)
        np.testing.assert_array_equal(after.V, state.V)
        np.testing.assert_array_equal(after.memory, state.memory)
        assert after.I == state.I
        assert after.pc == state.pc
        assert after.delay_timer == state.delay_timer
        assert after.sound_timer == state.sound_timer
