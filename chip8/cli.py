#!/usr/bin/env python3
"""Headless command-line runner for CHIP-8 programs."""

from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import List, Optional

from .config import MachineConfig, Quirks
from .constants import MAX_PROGRAM_SIZE
from .emulator import Chip8Emulator
from .errors import Chip8Error, ProgramTooLarge

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FATAL = 1
EXIT_LOAD_FAILURE = 2


def load_rom(path: Path) -> bytes:
    """Read a program image, rejecting files that cannot fit in RAM."""

    data = path.read_bytes()
    if len(data) > MAX_PROGRAM_SIZE:
        raise ProgramTooLarge(len(data), MAX_PROGRAM_SIZE)
    return data


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Run a CHIP-8 program headlessly")
    parser.add_argument("rom", type=Path, help="Program image to load at 0x200")
    parser.add_argument(
        "--steps",
        type=int,
        default=None,
        help="Number of cycles to run (default: until interrupted)",
    )
    parser.add_argument("--ips", type=int, default=None, help="Instructions per second")
    parser.add_argument("--seed", type=int, default=None, help="Seed for RND")
    parser.add_argument(
        "--quirks",
        choices=["chip-48", "cosmac-vip", "superchip"],
        default=None,
        help="Compatibility preset",
    )
    parser.add_argument(
        "--timer-thread",
        action="store_true",
        help="Tick timers from a background thread",
    )
    parser.add_argument("--config", type=Path, help="JSON machine configuration")
    parser.add_argument(
        "--save-png", type=Path, help="Save the final framebuffer as a PNG"
    )
    parser.add_argument(
        "--no-realtime",
        action="store_true",
        help="Run as fast as possible instead of pacing to --ips",
    )
    parser.add_argument(
        "-v", "--verbose", action="count", default=0, help="Increase log verbosity"
    )
    return parser


def _build_config(args: argparse.Namespace) -> MachineConfig:
    base = MachineConfig.load(args.config) if args.config else None
    config = MachineConfig.from_env(base)
    overrides = {}
    if args.ips is not None:
        overrides["instructions_per_second"] = args.ips
    if args.seed is not None:
        overrides["seed"] = args.seed
    if args.quirks is not None:
        overrides["quirks"] = Quirks.for_model(args.quirks)
    if args.timer_thread:
        overrides["timer_thread"] = True
    return replace(config, **overrides) if overrides else config


def _configure_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG
    logging.basicConfig(
        level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    _configure_logging(args.verbose)

    try:
        config = _build_config(args)
        program = load_rom(args.rom)
    except (OSError, ValueError, Chip8Error) as exc:
        logger.error("Failed to load %s: %s", args.rom, exc)
        return EXIT_LOAD_FAILURE

    status = EXIT_OK
    with Chip8Emulator(config) as emulator:
        emulator.load_program(program)
        try:
            executed = emulator.run(args.steps, realtime=not args.no_realtime)
            logger.info("Executed %d instructions", executed)
        except KeyboardInterrupt:
            logger.info("Interrupted after %d instructions", emulator.instruction_count)
        except Chip8Error as exc:
            # Already logged by the emulator at ERROR.
            print(f"chip8: {exc}", file=sys.stderr)
            status = EXIT_FATAL

        if args.save_png:
            from .display.renderer import DisplayRenderer

            path = DisplayRenderer().save(emulator.framebuffer, args.save_png)
            logger.info("Saved framebuffer to %s", path)

    return status


if __name__ == "__main__":
    sys.exit(main())
