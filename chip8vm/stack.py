"""CHIP-8 call stack operations.

The pointer wraps modulo the stack depth, so overflowing or underflowing the
stack overwrites or re-reads old entries instead of faulting.
"""

import jax.numpy as jnp
from chip8vm.constants import ADDRESS_MASK, STACK_SIZE
from chip8vm.state import StackState


def push(stack: StackState, address: jnp.ndarray) -> StackState:
    """Push return address onto stack."""
    slot = stack.pointer % STACK_SIZE
    new_data = stack.data.at[slot].set(jnp.astype(address & ADDRESS_MASK, jnp.uint16))
    return stack.replace(data=new_data, pointer=(stack.pointer + 1) % STACK_SIZE)


def pop(stack: StackState) -> tuple[StackState, jnp.ndarray]:
    """Pop return address from stack."""
    new_pointer = (stack.pointer - 1) % STACK_SIZE
    address = stack.data[new_pointer]
    return stack.replace(data=stack.data.at[new_pointer].set(0), pointer=new_pointer), address
