"""CHIP-8 instruction decoding.

Decoding is a pure function of the 16-bit instruction word: it extracts the
operand fields and tags the word with the operation it encodes. Whether an
operation is actually executed depends on the configured instruction set and
is decided by the emulator, not here.
"""

import enum

import jax.numpy as jnp
from chex import dataclass


class Operation(enum.IntEnum):
    """Instruction tags, in dispatch order."""
    CLEAR_SCREEN = 0                 # 00E0
    RETURN = 1                       # 00EE
    JUMP = 2                         # 1NNN
    CALL = 3                         # 2NNN
    SKIP_IF_EQUAL = 4                # 3XNN
    SKIP_IF_NOT_EQUAL = 5            # 4XNN
    SKIP_IF_REGISTERS_EQUAL = 6      # 5XY0
    LOAD_IMMEDIATE = 7               # 6XNN
    ADD_IMMEDIATE = 8                # 7XNN
    ALU = 9                          # 8XYN
    SKIP_IF_REGISTERS_NOT_EQUAL = 10 # 9XY0
    LOAD_INDEX = 11                  # ANNN
    JUMP_WITH_OFFSET = 12            # BNNN
    RANDOM = 13                      # CXNN
    DRAW_SPRITE = 14                 # DXYN
    SKIP_IF_KEY = 15                 # EX9E / EXA1
    MISC = 16                        # FXNN, any low byte
    UNKNOWN = 17

    @property
    def family(self) -> str:
        """Human-readable family name, e.g. ``skip-if-equal``."""
        return self.name.lower().replace("_", "-")


# 8XYN sub-operations that exist: 0-7 and E.
ALU_VARIANTS = jnp.array([1, 1, 1, 1, 1, 1, 1, 1, 0, 0, 0, 0, 0, 0, 1, 0], dtype=jnp.bool_)


@dataclass(frozen=True)
class DecodedInstruction:
    """Decoded CHIP-8 instruction with extracted operands."""
    raw: int
    opcode: int     # First nibble
    x: int          # Second nibble (VX register)
    y: int          # Third nibble (VY register)
    n: int          # Fourth nibble (4-bit immediate)
    nn: int         # Last byte (8-bit immediate)
    nnn: int        # Last 12 bits (12-bit address)
    operation: int  # Operation tag


def classify(word: jnp.ndarray) -> jnp.ndarray:
    """Tag a 16-bit instruction word with its Operation."""
    opcode = word >> 12
    n = word & 0x000F
    nn = word & 0x00FF

    conditions = [
        word == 0x00E0,
        word == 0x00EE,
        opcode == 0x1,
        opcode == 0x2,
        opcode == 0x3,
        opcode == 0x4,
        (opcode == 0x5) & (n == 0),
        opcode == 0x6,
        opcode == 0x7,
        (opcode == 0x8) & ALU_VARIANTS[n],
        (opcode == 0x9) & (n == 0),
        opcode == 0xA,
        opcode == 0xB,
        opcode == 0xC,
        opcode == 0xD,
        (opcode == 0xE) & ((nn == 0x9E) | (nn == 0xA1)),
        opcode == 0xF,
    ]
    tags = [jnp.int32(int(operation)) for operation in Operation if operation is not Operation.UNKNOWN]
    return jnp.select(conditions, tags, default=jnp.int32(int(Operation.UNKNOWN)))


def decode(instruction: int) -> DecodedInstruction:
    """Decode 16-bit instruction into components."""
    word = jnp.asarray(instruction).astype(jnp.uint16)
    return DecodedInstruction(
        raw=word,
        opcode=(word & 0xF000) >> 12,
        x=(word & 0x0F00) >> 8,
        y=(word & 0x00F0) >> 4,
        n=word & 0x000F,
        nn=word & 0x00FF,
        nnn=word & 0x0FFF,
        operation=classify(word),
    )
