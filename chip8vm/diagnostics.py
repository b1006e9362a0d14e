"""Console diagnostics for the interpreter.

The host reads unsupported cycles from the trace the interpreter returns and
forwards each one to a list of DiagnosticsCallback objects. Reporting is
advisory and never changes what the interpreter does.
"""

import dataclasses
import sys
import time
from collections import Counter
from typing import Dict, Optional

from chip8vm.decode import Operation


class ConsoleLogger:
    """Leveled console logger with optional colors and elapsed-time stamps."""

    level_order = {
        "DEBUG": 0,
        "INFO": 1,
        "WARNING": 2,
        "ERROR": 3,
        "CRITICAL": 4,
    }

    def __init__(
        self,
        name: str = "chip8vm",
        log_level: str = "INFO",
        use_colors: bool = True,
        show_timestamps: bool = True,
        stream=None,
    ):
        if log_level.upper() not in self.level_order:
            raise ValueError(
                f"Unknown log level '{log_level}'. Available: {list(self.level_order)}"
            )
        self.name = name
        self.log_level = log_level.upper()
        self.stream = stream if stream is not None else sys.stdout
        self.use_colors = use_colors and hasattr(self.stream, "isatty") and self.stream.isatty()
        self.show_timestamps = show_timestamps
        self.start_time = time.time()

        self.colors = {
            "DEBUG": "\033[36m",
            "INFO": "\033[32m",
            "WARNING": "\033[33m",
            "ERROR": "\033[31m",
            "CRITICAL": "\033[35m",
            "RESET": "\033[0m",
        }

    def _should_log(self, level: str) -> bool:
        # Unrecognized levels rank with INFO.
        return self.level_order.get(level, 1) >= self.level_order[self.log_level]

    def _format_message(self, level: str, message: str) -> str:
        timestamp = f"[{time.time() - self.start_time:8.2f}s]" if self.show_timestamps else ""
        level_str = f"[{level:>8s}]"
        if self.use_colors:
            level_str = f"{self.colors.get(level, '')}{level_str}{self.colors['RESET']}"
        return f"{timestamp}{level_str}[{self.name}] {message}"

    def log(self, level: str, message: str):
        """Log a message at the specified level."""
        level = level.upper()
        if self._should_log(level):
            print(self._format_message(level, message), file=self.stream, flush=True)

    def debug(self, message: str):
        self.log("DEBUG", message)

    def info(self, message: str):
        self.log("INFO", message)

    def warning(self, message: str):
        self.log("WARNING", message)

    def error(self, message: str):
        self.log("ERROR", message)

    def critical(self, message: str):
        self.log("CRITICAL", message)


@dataclasses.dataclass(frozen=True)
class UnsupportedInstruction:
    """An instruction the interpreter skipped.

    Attributes:
        address: Address the instruction was fetched from
        opcode: Raw 16-bit instruction word
        operation: Decoded operation tag (UNKNOWN for encodings with no meaning)
    """
    address: int
    opcode: int
    operation: Operation

    @property
    def family(self) -> str:
        return self.operation.family

    def __str__(self) -> str:
        if self.operation is Operation.UNKNOWN:
            return f"unknown opcode 0x{self.opcode:04X} at 0x{self.address:04X}"
        return f"unsupported {self.family} (0x{self.opcode:04X}) at 0x{self.address:04X}"


class DiagnosticsCallback:
    """Base class for diagnostics callbacks."""

    def on_unsupported(self, event: UnsupportedInstruction):
        """Called for every unsupported instruction."""
        pass

    def on_reset(self):
        """Called when the machine is reset or a new program is loaded."""
        pass


class ConsoleDiagnostics(DiagnosticsCallback):
    """Write unsupported instructions to the console as warnings.

    With ``deduplicate`` set, each distinct opcode is reported only once per
    loaded program.
    """

    def __init__(self, logger: Optional[ConsoleLogger] = None, deduplicate: bool = False):
        self.logger = logger or ConsoleLogger()
        self.deduplicate = deduplicate
        self._seen = set()

    def on_unsupported(self, event: UnsupportedInstruction):
        if self.deduplicate:
            if event.opcode in self._seen:
                return
            self._seen.add(event.opcode)
        self.logger.warning(str(event))

    def on_reset(self):
        self._seen.clear()


class CountingDiagnostics(DiagnosticsCallback):
    """Count unsupported instructions per operation family and per opcode."""

    def __init__(self):
        self.by_family = Counter()
        self.by_opcode = Counter()

    @property
    def total(self) -> int:
        return sum(self.by_family.values())

    def on_unsupported(self, event: UnsupportedInstruction):
        self.by_family[event.family] += 1
        self.by_opcode[event.opcode] += 1

    def on_reset(self):
        self.by_family.clear()
        self.by_opcode.clear()

    def get_statistics(self) -> Dict[str, int]:
        """Counts per family, most frequent first."""
        return dict(self.by_family.most_common())
