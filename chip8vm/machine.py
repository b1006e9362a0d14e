"""Host-facing CHIP-8 machine.

Chip8 owns one MachineState and exposes the operations a front end needs:
load a program, run a batch of cycles per frame, read the screen, feed key
events and tick the 60 Hz timers. Rendering, audio and pacing stay with the
caller.
"""

from typing import NamedTuple, Optional, Sequence

import jax
import numpy as np

from chip8vm import state as machine_state
from chip8vm.config import MachineConfig
from chip8vm.constants import SCREEN_WIDTH, SCREEN_HEIGHT
from chip8vm.diagnostics import (
    ConsoleDiagnostics, ConsoleLogger, DiagnosticsCallback, UnsupportedInstruction,
)
from chip8vm.emulator import CycleTrace, Outcome, trace_cycles
from chip8vm.state import MachineState


class RunSummary(NamedTuple):
    """Outcome counts of one run_cycles call."""
    executed: int
    unsupported: int

    @property
    def cycles(self) -> int:
        return self.executed + self.unsupported


class Chip8:
    """A CHIP-8 machine with its own state, usable side by side with others.

    Args:
        config: Machine configuration; defaults to the core instruction set
        callbacks: Diagnostics callbacks for unsupported instructions. Defaults
            to a single ConsoleDiagnostics; pass an empty list to disable
            reporting entirely
        rng: JAX random key for the random-number instruction
        logger: Logger for lifecycle messages
    """

    screen_width = SCREEN_WIDTH
    screen_height = SCREEN_HEIGHT

    def __init__(
        self,
        config: Optional[MachineConfig] = None,
        callbacks: Optional[Sequence[DiagnosticsCallback]] = None,
        rng: Optional[jax.Array] = None,
        logger: Optional[ConsoleLogger] = None,
    ):
        self.config = config or MachineConfig()
        self.logger = logger or ConsoleLogger()
        if callbacks is None:
            callbacks = [ConsoleDiagnostics(self.logger)]
        self.callbacks = list(callbacks)
        self.state: MachineState = machine_state.create_state(self.config, rng)

    def _report(self, trace: CycleTrace):
        if not self.callbacks:
            return
        for address, opcode, operation in trace.unsupported():
            event = UnsupportedInstruction(address=address, opcode=opcode, operation=operation)
            for callback in self.callbacks:
                callback.on_unsupported(event)

    def _notify_reset(self):
        for callback in self.callbacks:
            callback.on_reset()

    def reset(self):
        """Zero registers, index, screen, timers and stack; pc back to 0x200."""
        self.state = machine_state.reset(self.state)
        self._notify_reset()
        self.logger.debug("Machine reset")

    def load_program(self, program: bytes, size: Optional[int] = None):
        """Reset the machine and copy ``program[:size]`` to 0x200.

        Raises:
            ValueError: If the program does not fit in memory or ``size`` is invalid
        """
        self.state = machine_state.load_program(self.state, program, size)
        self._notify_reset()
        self.logger.debug(f"Loaded program ({len(program) if size is None else size} bytes)")

    def load_rom(self, path: str):
        """Read a raw CHIP-8 ROM file and load it."""
        with open(path, 'rb') as f:
            rom_data = f.read()
        self.load_program(rom_data)
        self.logger.info(f"Loaded ROM {path} ({len(rom_data)} bytes)")

    def run_cycle(self) -> Outcome:
        """Execute exactly one instruction."""
        self.state, trace = trace_cycles(self.state, 1)
        self._report(trace)
        return Outcome(int(trace.outcome[0]))

    def run_cycles(self, n: int) -> RunSummary:
        """Execute exactly ``n`` instructions, whatever they are."""
        if n < 0:
            raise ValueError(f"Cycle count must be non-negative, got {n}")
        if n == 0:
            return RunSummary(executed=0, unsupported=0)

        self.state, trace = trace_cycles(self.state, n)
        self._report(trace)
        unsupported = int(np.count_nonzero(np.asarray(trace.outcome) == Outcome.UNSUPPORTED))
        return RunSummary(executed=n - unsupported, unsupported=unsupported)

    def get_screen(self) -> np.ndarray:
        """Read-only 64x32 framebuffer, flattened row-major, one 0/1 byte per pixel."""
        return machine_state.get_screen(self.state)

    def key_down(self, key: int):
        self.state = machine_state.set_key(self.state, key, True)

    def key_up(self, key: int):
        self.state = machine_state.set_key(self.state, key, False)

    def tick_timers(self):
        """Advance the delay and sound timers by one 60 Hz tick."""
        self.state = machine_state.tick_timers(self.state)

    @property
    def sound_timer(self) -> int:
        """Current sound timer; a tone should play while it is non-zero."""
        return int(self.state.sound_timer)

    @property
    def delay_timer(self) -> int:
        """Current delay timer, as read by FX07."""
        return int(self.state.delay_timer)
