"""CHIP-8 ALU operations (8xxx).

Every operation takes the current VX and VY and returns ``(result, flag)``
where ``flag`` is the new VF, or ``None`` when VF must be left untouched.
"""

import jax.lax
import jax.numpy as jnp
from chip8vm.constants import FLAG_REGISTER
from chip8vm.state import MachineState
from chip8vm.decode import DecodedInstruction


def alu_set(vx, vy):
    """8XY0 - Set: VX = VY."""
    return vy, None


def alu_or(vx, vy):
    """8XY1 - Binary OR: VX |= VY."""
    return vx | vy, None


def alu_and(vx, vy):
    """8XY2 - Binary AND: VX &= VY."""
    return vx & vy, None


def alu_xor(vx, vy):
    """8XY3 - Logical XOR: VX ^= VY."""
    return vx ^ vy, None


def alu_add(vx, vy):
    """8XY4 - Add: VX += VY, VF = carry."""
    total = jnp.astype(vx, jnp.uint16) + vy
    return jnp.astype(total & 0xFF, jnp.uint8), jnp.astype(total > 0xFF, jnp.uint8)


def alu_sub_xy(vx, vy):
    """8XY5 - Subtract: VX -= VY, VF = not borrow."""
    return vx - vy, jnp.astype(vx >= vy, jnp.uint8)


def alu_shift_right(vx, vy):
    """8XY6 - Shift right: VX >>= 1, VF = shifted-out bit."""
    return vx >> 1, vx & 1


def alu_sub_yx(vx, vy):
    """8XY7 - Subtract: VX = VY - VX, VF = not borrow."""
    return vy - vx, jnp.astype(vy >= vx, jnp.uint8)


def alu_shift_left(vx, vy):
    """8XYE - Shift left: VX <<= 1, VF = shifted-out bit."""
    return vx << 1, vx >> 7


def execute_alu_operation(state: MachineState, instruction: DecodedInstruction) -> MachineState:
    """8XYN - ALU operations dispatcher.

    Only the defined variants (0-7, E) reach this function; decoding tags the
    others as unknown.
    """
    vx = state.V[instruction.x]
    vy = state.V[instruction.y]
    modern = state.config.modern_mode

    def apply(operation, is_logic=False, is_shift=False):
        def branch(vx, vy):
            if is_shift and not modern:
                vx = vy
            result, flag = operation(vx, vy)
            writes_flag = flag is not None
            if flag is None and is_logic and not modern:
                # The COSMAC VIP clobbers VF on logic ops.
                flag, writes_flag = 0, True
            elif flag is None:
                flag = 0
            return jnp.asarray(result, jnp.uint8), jnp.asarray(flag, jnp.uint8), jnp.asarray(writes_flag)
        return branch

    branches = [
        apply(alu_set),
        apply(alu_or, is_logic=True),
        apply(alu_and, is_logic=True),
        apply(alu_xor, is_logic=True),
        apply(alu_add),
        apply(alu_sub_xy),
        apply(alu_shift_right, is_shift=True),
        apply(alu_sub_yx),
        apply(alu_shift_left, is_shift=True),
    ]
    # 8XYE is the ninth branch.
    index = jnp.where(instruction.n == 0xE, 8, instruction.n).astype(jnp.int32)
    result, flag, writes_flag = jax.lax.switch(index, branches, vx, vy)

    # VF is written last so that 8FYN stores the flag, not the result.
    new_V = state.V.at[instruction.x].set(result)
    new_V = new_V.at[FLAG_REGISTER].set(jnp.where(writes_flag, flag, new_V[FLAG_REGISTER]))
    return state.replace(V=new_V)
