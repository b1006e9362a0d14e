"""Main CHIP-8 interpreter engine.

One cycle is fetch, decode, execute. Instructions outside the configured
instruction set are executed as no-ops and flagged UNSUPPORTED; the engine
itself never raises and never stops early. The compiled functions only return
data. Reporting unsupported cycles is left to the host, which reads them from
a CycleTrace.
"""

import enum
from functools import partial

import jax
import jax.lax
import jax.numpy as jnp
import numpy as np
from flax.struct import dataclass
from chip8vm.config import MachineConfig
from chip8vm.constants import ADDRESS_MASK
from chip8vm.state import MachineState
from chip8vm.decode import DecodedInstruction, Operation, decode
from chip8vm.instructions.system import no_op, execute_clear_screen, execute_return
from chip8vm.instructions.control_flow import (
    execute_jump, execute_call, execute_skip_if_equal, execute_skip_if_not_equal,
    execute_skip_if_registers_equal, execute_skip_if_registers_not_equal,
    execute_jump_with_offset, execute_skip_if_key,
)
from chip8vm.instructions.alu import execute_alu_operation
from chip8vm.instructions.memory import (
    execute_load_immediate, execute_add_immediate, execute_load_index, execute_random,
)
from chip8vm.instructions.display import execute_draw_sprite
from chip8vm.instructions.misc import execute_misc_instruction, is_misc_implemented


class Outcome(enum.IntEnum):
    """Result of a single cycle."""
    EXECUTED = 0
    UNSUPPORTED = 1


HANDLERS = {
    Operation.CLEAR_SCREEN: execute_clear_screen,
    Operation.RETURN: execute_return,
    Operation.JUMP: execute_jump,
    Operation.CALL: execute_call,
    Operation.SKIP_IF_EQUAL: execute_skip_if_equal,
    Operation.SKIP_IF_NOT_EQUAL: execute_skip_if_not_equal,
    Operation.SKIP_IF_REGISTERS_EQUAL: execute_skip_if_registers_equal,
    Operation.LOAD_IMMEDIATE: execute_load_immediate,
    Operation.ADD_IMMEDIATE: execute_add_immediate,
    Operation.ALU: execute_alu_operation,
    Operation.SKIP_IF_REGISTERS_NOT_EQUAL: execute_skip_if_registers_not_equal,
    Operation.LOAD_INDEX: execute_load_index,
    Operation.JUMP_WITH_OFFSET: execute_jump_with_offset,
    Operation.RANDOM: execute_random,
    Operation.DRAW_SPRITE: execute_draw_sprite,
    Operation.SKIP_IF_KEY: execute_skip_if_key,
    Operation.MISC: execute_misc_instruction,
    Operation.UNKNOWN: no_op,
}

CORE_OPERATIONS = frozenset({
    Operation.CLEAR_SCREEN,
    Operation.JUMP,
    Operation.SKIP_IF_EQUAL,
    Operation.LOAD_IMMEDIATE,
    Operation.ADD_IMMEDIATE,
    Operation.LOAD_INDEX,
    Operation.DRAW_SPRITE,
})

EXTENDED_OPERATIONS = frozenset(Operation) - {Operation.UNKNOWN}


def supported_operations(config: MachineConfig) -> frozenset:
    """Operations the interpreter executes under ``config``."""
    return EXTENDED_OPERATIONS if config.extended else CORE_OPERATIONS


def _dispatch(state: MachineState, instruction: DecodedInstruction) -> tuple[MachineState, jnp.ndarray]:
    supported = supported_operations(state.config)
    branches = [HANDLERS[operation] if operation in supported else no_op for operation in Operation]
    is_supported = jnp.array([operation in supported for operation in Operation])

    # FXNN words with an unassigned low byte run as a no-op in every profile.
    executed = is_supported[instruction.operation] & (
        (instruction.operation != int(Operation.MISC)) | is_misc_implemented(instruction)
    )

    state = jax.lax.switch(instruction.operation, branches, state, instruction)
    outcome = jnp.where(executed, int(Outcome.EXECUTED), int(Outcome.UNSUPPORTED))
    return state, jnp.astype(outcome, jnp.uint8)


@jax.jit
def execute(state: MachineState, instruction: int) -> MachineState:
    """Execute a single CHIP-8 instruction word without fetching it.

    The program counter is not advanced for the instruction itself; jumps and
    skips still modify it.
    """
    state, _ = _dispatch(state, decode(instruction))
    return state


def _pack_u16(high: jnp.ndarray, low: jnp.ndarray) -> jnp.ndarray:
    """Pack two bytes into uint16."""
    return (jnp.astype(high, jnp.uint16) << 8) | jnp.astype(low, jnp.uint16)


def fetch(state: MachineState) -> tuple[MachineState, jnp.ndarray]:
    """Fetch the big-endian instruction word at pc and advance pc by 2.

    Addresses wrap at the end of memory.
    """
    instruction = _pack_u16(
        state.memory[state.pc & ADDRESS_MASK],
        state.memory[(state.pc + 1) & ADDRESS_MASK],
    )
    return state.replace(pc=state.pc + 2), instruction


@dataclass
class CycleTrace:
    """What one cycle fetched and how it ended.

    Batched runs stack one entry per cycle along the leading axis.
    """
    address: jnp.ndarray      # pc the word was fetched from
    instruction: jnp.ndarray  # raw 16-bit word
    operation: jnp.ndarray    # Operation tag
    outcome: jnp.ndarray      # Outcome

    def unsupported(self):
        """Yield (address, instruction, Operation) for each unsupported cycle, in order."""
        outcomes = np.atleast_1d(np.asarray(self.outcome))
        addresses = np.atleast_1d(np.asarray(self.address))
        instructions = np.atleast_1d(np.asarray(self.instruction))
        operations = np.atleast_1d(np.asarray(self.operation))
        for i in np.flatnonzero(outcomes == int(Outcome.UNSUPPORTED)):
            yield int(addresses[i]), int(instructions[i]), Operation(int(operations[i]))


def _cycle(state: MachineState) -> tuple[MachineState, CycleTrace]:
    address = state.pc
    state, instruction = fetch(state)
    decoded = decode(instruction)
    state, outcome = _dispatch(state, decoded)
    return state, CycleTrace(
        address=address,
        instruction=instruction,
        operation=decoded.operation,
        outcome=outcome,
    )


@jax.jit
def step(state: MachineState) -> tuple[MachineState, jnp.ndarray]:
    """Run one fetch-decode-execute cycle.

    Returns:
        Tuple of the new state and the cycle's Outcome as a uint8 scalar
    """
    state, trace = _cycle(state)
    return state, trace.outcome


@partial(jax.jit, static_argnames="n")
def trace_cycles(state: MachineState, n: int) -> tuple[MachineState, CycleTrace]:
    """Run exactly ``n`` cycles and record each one.

    Returns:
        Tuple of the final state and a CycleTrace whose fields have shape (n,)
    """
    def cycle(state, _):
        return _cycle(state)

    return jax.lax.scan(cycle, state, length=n)


@partial(jax.jit, static_argnames="n")
def run_cycles(state: MachineState, n: int) -> tuple[MachineState, jnp.ndarray]:
    """Run exactly ``n`` cycles, continuing past unsupported instructions.

    Returns:
        Tuple of the final state and a uint8 array with the ``n`` cycle outcomes
    """
    state, trace = trace_cycles(state, n)
    return state, trace.outcome
