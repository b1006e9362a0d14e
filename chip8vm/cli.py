"""Headless CHIP-8 runner.

Runs a ROM for a number of frames without any window or audio and prints
the final screen, which is handy for checking ROMs against the interpreter.

    chip8vm roms/ibm_logo.ch8 --frames 120 instruction_set=EXTENDED
"""

import argparse
import sys

import numpy as np
from omegaconf.errors import OmegaConfBaseException
from tqdm import tqdm

from chip8vm.config import load_config
from chip8vm.diagnostics import ConsoleDiagnostics, ConsoleLogger, CountingDiagnostics
from chip8vm.machine import Chip8


def screen_to_text(screen: np.ndarray, width: int, on: str = "#", off: str = ".") -> str:
    """Render a flat 0/1 screen buffer as lines of text."""
    rows = np.asarray(screen).reshape(-1, width)
    return "\n".join("".join(on if pixel else off for pixel in row) for row in rows)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="chip8vm", description="Run a CHIP-8 ROM headlessly.")
    parser.add_argument("rom", help="Path to a raw CHIP-8 ROM")
    parser.add_argument("--frames", type=int, default=60, help="Number of 60 Hz frames to run")
    parser.add_argument("--cycles-per-frame", type=int, default=10,
                        help="Instructions executed per frame")
    parser.add_argument("--config", default=None, help="YAML machine configuration")
    parser.add_argument("--log-level", default="INFO")
    parser.add_argument("--report-all", action="store_true",
                        help="Log every unsupported instruction instead of once per opcode")
    parser.add_argument("--no-progress", action="store_true", help="Disable the progress bar")
    parser.add_argument("overrides", nargs="*", help="Config overrides as key=value")
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_intermixed_args(argv)
    logger = ConsoleLogger(log_level=args.log_level)

    try:
        config = load_config(args.config, args.overrides)
    except (OmegaConfBaseException, OSError) as e:
        logger.error(f"Invalid configuration: {e}")
        return 2

    counter = CountingDiagnostics()
    machine = Chip8(
        config,
        callbacks=[ConsoleDiagnostics(logger, deduplicate=not args.report_all), counter],
        logger=logger,
    )

    try:
        machine.load_rom(args.rom)
    except (OSError, ValueError) as e:
        logger.error(f"Cannot load ROM: {e}")
        return 1

    executed = 0
    for _ in tqdm(range(args.frames), desc="Frames", unit="frame", disable=args.no_progress):
        summary = machine.run_cycles(args.cycles_per_frame)
        machine.tick_timers()
        executed += summary.executed

    print(screen_to_text(machine.get_screen(), machine.screen_width))
    logger.info(f"Executed {executed} instructions, skipped {counter.total} unsupported")
    for family, count in counter.get_statistics().items():
        logger.info(f"  {family}: {count}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
