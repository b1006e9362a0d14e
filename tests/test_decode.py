"""Tests for instruction decoding."""

import pytest
from chip8vm import decode, Operation


def test_decode_fields():
    decoded = decode(0xD123)
    assert decoded.raw == 0xD123
    assert decoded.opcode == 0xD
    assert decoded.x == 0x1
    assert decoded.y == 0x2
    assert decoded.n == 0x3
    assert decoded.nn == 0x23
    assert decoded.nnn == 0x123


@pytest.mark.parametrize("word, operation", [
    (0x00E0, Operation.CLEAR_SCREEN),
    (0x00EE, Operation.RETURN),
    (0x0123, Operation.UNKNOWN),
    (0x0000, Operation.UNKNOWN),
    (0x1ABC, Operation.JUMP),
    (0x2123, Operation.CALL),
    (0x3A42, Operation.SKIP_IF_EQUAL),
    (0x4A42, Operation.SKIP_IF_NOT_EQUAL),
    (0x5120, Operation.SKIP_IF_REGISTERS_EQUAL),
    (0x5121, Operation.UNKNOWN),
    (0x6F00, Operation.LOAD_IMMEDIATE),
    (0x7005, Operation.ADD_IMMEDIATE),
    (0x8124, Operation.ALU),
    (0x812E, Operation.ALU),
    (0x8128, Operation.UNKNOWN),
    (0x9120, Operation.SKIP_IF_REGISTERS_NOT_EQUAL),
    (0x9121, Operation.UNKNOWN),
    (0xA210, Operation.LOAD_INDEX),
    (0xB250, Operation.JUMP_WITH_OFFSET),
    (0xC0FF, Operation.RANDOM),
    (0xD011, Operation.DRAW_SPRITE),
    (0xE39E, Operation.SKIP_IF_KEY),
    (0xE3A1, Operation.SKIP_IF_KEY),
    (0xE300, Operation.UNKNOWN),
    (0xF00A, Operation.MISC),
    (0xF165, Operation.MISC),
    (0xF199, Operation.MISC),
])
def test_operation_tags(word, operation):
    assert int(decode(word).operation) == operation


def test_family_names():
    assert Operation.SKIP_IF_EQUAL.family == "skip-if-equal"
    assert Operation.DRAW_SPRITE.family == "draw-sprite"
    assert Operation.CALL.family == "call"
