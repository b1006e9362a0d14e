"""Jumps, subroutine calls and conditional skips."""

import jax
import jax.lax
import jax.numpy as jnp
from chip8vm.constants import ADDRESS_MASK
from chip8vm.state import MachineState
from chip8vm.decode import DecodedInstruction
from chip8vm.stack import push


def execute_jump(state: MachineState, instruction: DecodedInstruction) -> MachineState:
    """1NNN - pc := NNN."""
    return state.replace(pc=jnp.astype(instruction.nnn, jnp.uint16))


def execute_call(state: MachineState, instruction: DecodedInstruction) -> MachineState:
    """2NNN - Save the return address, then continue at NNN."""
    # pc was already advanced by fetch, so it is the return address.
    state = state.replace(stack=push(state.stack, state.pc))
    return execute_jump(state, instruction)


def make_skip_instruction(condition_fn):
    """Return a handler that steps over the following word when ``condition_fn(state, instruction)`` holds."""
    def skip_instruction(state: MachineState, instruction: DecodedInstruction) -> MachineState:
        return jax.lax.cond(
            condition_fn(state, instruction),
            lambda s: s.replace(pc=s.pc + 2),
            lambda s: s,
            state
        )
    return skip_instruction


execute_skip_if_equal = make_skip_instruction(
    lambda state, inst: state.V[inst.x] == inst.nn
)

execute_skip_if_not_equal = make_skip_instruction(
    lambda state, inst: state.V[inst.x] != inst.nn
)

execute_skip_if_registers_equal = make_skip_instruction(
    lambda state, inst: state.V[inst.x] == state.V[inst.y]
)

execute_skip_if_registers_not_equal = make_skip_instruction(
    lambda state, inst: state.V[inst.x] != state.V[inst.y]
)

# EX9E: key VX held. EXA1: key VX released.
execute_skip_if_key = make_skip_instruction(
    lambda state, inst: state.keypad[state.V[inst.x] & 0xF] ^ (inst.nn == 0xA1)
)


def execute_jump_with_offset(state: MachineState, instruction: DecodedInstruction) -> MachineState:
    """BNNN / BXNN - Indexed jump.

    Legacy machines add V0 to NNN. In modern mode the high nibble of NNN also
    picks the register, so the target is XNN + VX. The result stays inside
    the 12-bit address space.
    """
    register = instruction.x if state.config.modern_mode else 0
    offset = jnp.astype(state.V[register], jnp.uint16)
    return state.replace(pc=(instruction.nnn + offset) & ADDRESS_MASK)
