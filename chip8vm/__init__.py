"""CHIP-8 interpreter package."""

from chip8vm.config import InstructionSet, MachineConfig, load_config
from chip8vm.state import (
    MachineState, create_state, reset, load_program, clear_screen, set_key, tick_timers, get_screen,
)
from chip8vm.emulator import (
    CycleTrace, Outcome, execute, fetch, step, run_cycles, trace_cycles, supported_operations,
)
from chip8vm.decode import DecodedInstruction, Operation, decode
from chip8vm.diagnostics import (
    ConsoleLogger, DiagnosticsCallback, ConsoleDiagnostics, CountingDiagnostics, UnsupportedInstruction,
)
from chip8vm.machine import Chip8, RunSummary
from chip8vm.constants import *

__all__ = [
    "InstructionSet",
    "MachineConfig",
    "load_config",
    "MachineState",
    "create_state",
    "reset",
    "load_program",
    "clear_screen",
    "set_key",
    "tick_timers",
    "get_screen",
    "Outcome",
    "execute",
    "fetch",
    "step",
    "run_cycles",
    "trace_cycles",
    "CycleTrace",
    "supported_operations",
    "DecodedInstruction",
    "Operation",
    "decode",
    "ConsoleLogger",
    "DiagnosticsCallback",
    "ConsoleDiagnostics",
    "CountingDiagnostics",
    "UnsupportedInstruction",
    "Chip8",
    "RunSummary",
    "PROGRAM_START",
    "FONT_START",
    "MEMORY_SIZE",
    "SCREEN_WIDTH",
    "SCREEN_HEIGHT",
    "SCREEN_SIZE",
]
