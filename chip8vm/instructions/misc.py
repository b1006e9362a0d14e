"""FXNN instructions: timers, keypad wait, index arithmetic and register blocks.

Every F-prefixed word decodes as a misc instruction. Only the low bytes in
MISC_INSTRUCTIONS do anything; the rest fall through to a no-op and the
emulator counts them as unsupported.
"""

import jax
import jax.lax
import jax.numpy as jnp
from chip8vm.state import MachineState
from chip8vm.decode import DecodedInstruction
from chip8vm.constants import FONT_START, FONT_CHAR_SIZE, MEMORY_SIZE, NUM_REGISTERS, ADDRESS_MASK
from chip8vm.instructions.system import no_op


def execute_get_delay_timer(state: MachineState, instruction: DecodedInstruction) -> MachineState:
    """FX07 - Copy the delay timer into VX."""
    return state.replace(V=state.V.at[instruction.x].set(state.delay_timer))


def execute_wait_for_key(state: MachineState, instruction: DecodedInstruction) -> MachineState:
    """FX0A - Block until a key is held, then put its index in VX.

    While no key is held, pc is moved back onto this instruction so the next
    cycle fetches it again. With several keys held the lowest index wins.
    """
    def store_key(state):
        key = jnp.astype(jnp.argmax(state.keypad), jnp.uint8)
        return state.replace(V=state.V.at[instruction.x].set(key))

    def refetch(state):
        return state.replace(pc=state.pc - 2)

    return jax.lax.cond(jnp.any(state.keypad), store_key, refetch, state)


def execute_set_delay_timer(state: MachineState, instruction: DecodedInstruction) -> MachineState:
    """FX15"""
    return state.replace(delay_timer=state.V[instruction.x])


def execute_set_sound_timer(state: MachineState, instruction: DecodedInstruction) -> MachineState:
    """FX18 - The host plays a tone while this timer is non-zero."""
    return state.replace(sound_timer=state.V[instruction.x])


def execute_add_to_index(state: MachineState, instruction: DecodedInstruction) -> MachineState:
    """FX1E - I += VX, kept inside the 12-bit address space. VF is left alone."""
    offset = jnp.astype(state.V[instruction.x], jnp.uint16)
    return state.replace(I=(state.I + offset) & ADDRESS_MASK)


def execute_font_character(state: MachineState, instruction: DecodedInstruction) -> MachineState:
    """FX29 - Select the built-in glyph for the low nibble of VX."""
    glyph = jnp.astype(state.V[instruction.x] & 0xF, jnp.uint16)
    return state.replace(I=FONT_START + glyph * FONT_CHAR_SIZE)


def execute_bcd_conversion(state: MachineState, instruction: DecodedInstruction) -> MachineState:
    """FX33 - Write the hundreds, tens and ones digits of VX to memory at I."""
    value = state.V[instruction.x]
    digits = jnp.array([value // 100, (value // 10) % 10, value % 10], dtype=jnp.uint8)
    addresses = (jnp.astype(state.I, jnp.int32) + jnp.arange(3)) % MEMORY_SIZE
    return state.replace(memory=state.memory.at[addresses].set(digits))


def _register_block(state: MachineState, instruction: DecodedInstruction):
    # V0..VX are selected; the memory window starts at I and wraps around.
    selected = jnp.arange(NUM_REGISTERS) <= instruction.x
    addresses = (jnp.astype(state.I, jnp.int32) + jnp.arange(NUM_REGISTERS)) % MEMORY_SIZE
    return selected, addresses


def _advance_index(state: MachineState, instruction: DecodedInstruction) -> MachineState:
    # COSMAC VIP leaves I pointing just past the block.
    if state.config.modern_mode:
        return state
    return state.replace(I=state.I + instruction.x + 1)


def execute_store_registers(state: MachineState, instruction: DecodedInstruction) -> MachineState:
    """FX55 - Dump V0..VX to memory."""
    selected, addresses = _register_block(state, instruction)
    values = jnp.where(selected, state.V, state.memory[addresses])
    state = state.replace(memory=state.memory.at[addresses].set(values))
    return _advance_index(state, instruction)


def execute_load_registers(state: MachineState, instruction: DecodedInstruction) -> MachineState:
    """FX65 - Fill V0..VX from memory."""
    selected, addresses = _register_block(state, instruction)
    state = state.replace(V=jnp.where(selected, state.memory[addresses], state.V))
    return _advance_index(state, instruction)


MISC_INSTRUCTIONS = {
    0x07: execute_get_delay_timer,
    0x0A: execute_wait_for_key,
    0x15: execute_set_delay_timer,
    0x18: execute_set_sound_timer,
    0x1E: execute_add_to_index,
    0x29: execute_font_character,
    0x33: execute_bcd_conversion,
    0x55: execute_store_registers,
    0x65: execute_load_registers,
}

MISC_CODES = jnp.array(list(MISC_INSTRUCTIONS))


def is_misc_implemented(instruction: DecodedInstruction) -> jnp.ndarray:
    """True when the low byte of an FXNN word names one of MISC_INSTRUCTIONS."""
    return jnp.any(MISC_CODES == instruction.nn)


def execute_misc_instruction(state: MachineState, instruction: DecodedInstruction) -> MachineState:
    """Route FXNN to its handler by low byte. Unassigned low bytes are a no-op."""
    matches = MISC_CODES == instruction.nn
    index = jnp.where(jnp.any(matches), jnp.argmax(matches), len(MISC_INSTRUCTIONS))
    branches = [*MISC_INSTRUCTIONS.values(), no_op]
    return jax.lax.switch(index, branches, state, instruction)
