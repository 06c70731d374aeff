"""Command line entry point."""

import argparse
import sys
from typing import Optional

from chip8vm.config import EmulatorConfig
from chip8vm.constants import DEFAULT_CYCLES_PER_SECOND, TIMER_HZ
from chip8vm.driver import CycleDriver
from chip8vm.errors import Chip8Error, FATAL
from chip8vm.logging import MachineLogger
from chip8vm.rendering import display_to_text, create_color_scheme


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="chip8vm",
        description="Run a CHIP-8 program"
    )
    parser.add_argument(
        "rom",
        nargs="?",
        help="Path of the rom file",
    )
    parser.add_argument(
        "--path",
        type=str,
        default=None,
        help="Path of the rom file (alternative to the positional argument)",
    )
    parser.add_argument(
        "--speed",
        type=int,
        default=DEFAULT_CYCLES_PER_SECOND,
        help=f"Instructions per second (default: {DEFAULT_CYCLES_PER_SECOND})",
    )
    parser.add_argument(
        "--timer-hz",
        type=int,
        default=TIMER_HZ,
        help=f"Timer and frame rate (default: {TIMER_HZ})",
    )
    parser.add_argument(
        "--scale",
        type=int,
        default=12,
        help="Display scale (default: 12)",
    )
    parser.add_argument(
        "--colors",
        type=str,
        default="white",
        help="Color scheme: white, classic, amber, blue, retro (default: white)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=0,
        help="Seed for the random number instruction (default: 0)",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default="INFO",
        help="DEBUG, INFO, WARNING, ERROR or CRITICAL (default: INFO)",
    )
    parser.add_argument(
        "--trace",
        action="store_true",
        help="Log every executed instruction (needs --log-level DEBUG)",
    )
    parser.add_argument(
        "--headless",
        type=int,
        metavar="FRAMES",
        default=None,
        help="Run FRAMES frames without a window and print the screen",
    )
    return parser


def config_from_args(args: argparse.Namespace) -> EmulatorConfig:
    return EmulatorConfig(
        rom_path=args.path or args.rom,
        cycles_per_second=args.speed,
        timer_hz=args.timer_hz,
        scale=args.scale,
        color_scheme=args.colors,
        seed=args.seed,
        log_level=args.log_level,
        trace=args.trace,
    )


def run_headless(config: EmulatorConfig, frames: int, logger: MachineLogger) -> CycleDriver:
    driver = CycleDriver(config, logger=logger)
    driver.boot_rom()
    driver.run(max_frames=frames, paced=False)
    print(display_to_text(driver.state.display))
    return driver


def run_window(config: EmulatorConfig, logger: MachineLogger) -> Optional[CycleDriver]:
    """Run in a pygame window. Returns None if no window could be opened."""
    from chip8vm import frontend

    try:
        renderer = frontend.PygameRenderer(config.scale, config.color_scheme)
    except frontend.pygame.error as e:
        logger.error(f"Could not open a window: {e}")
        frontend.close()
        return None
    keyboard = frontend.PygameKeyboard()
    try:
        audio = frontend.PygameBeeper()
    except frontend.pygame.error as e:
        logger.warning(f"Audio unavailable, running silent: {e}")
        audio = None

    driver = CycleDriver(config, renderer=renderer, input_source=keyboard, audio=audio, logger=logger)
    try:
        driver.boot_rom()
        driver.run()
    finally:
        frontend.close()
    return driver


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if not (args.path or args.rom):
        parser.error("a rom path is required")

    try:
        config = config_from_args(args)
        create_color_scheme(config.color_scheme)
        logger = MachineLogger(log_level=config.log_level)
    except ValueError as e:
        parser.error(str(e))

    try:
        if args.headless is not None:
            run_headless(config, args.headless, logger)
        elif run_window(config, logger) is None:
            return 1
    except OSError as e:
        logger.error(f"Could not read rom: {e}")
        return 2
    except Chip8Error as e:
        # RomTooLarge is raised before the driver loop and has not been logged yet.
        if e.classification != FATAL:
            logger.log_fault(e)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
