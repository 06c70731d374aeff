"""Console logging for the CHIP-8 emulator.

A small level-filtered logger with optional ANSI colours and elapsed-time
stamps, plus a machine-specific subclass used by the cycle driver.
"""

import time
import sys
from typing import Any, Dict

LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

ANSI_COLORS = {
    "DEBUG": "\033[36m",
    "INFO": "\033[32m",
    "WARNING": "\033[33m",
    "ERROR": "\033[31m",
    "CRITICAL": "\033[35m",
}
ANSI_RESET = "\033[0m"


class ConsoleLogger:
    """Console logger with level filtering and formatting.

    Colours are only used when ``stream`` is a terminal.
    """

    def __init__(
        self,
        name: str = "chip8vm",
        log_level: str = "INFO",
        use_colors: bool = True,
        show_timestamps: bool = True,
        stream=None,
    ):
        self.name = name
        self.log_level = log_level.upper()
        if self.log_level not in LEVELS:
            raise ValueError(f"Unknown log level '{log_level}'. Available: {list(LEVELS)}")
        self.threshold = LEVELS.index(self.log_level)
        self.stream = stream if stream is not None else sys.stdout
        self.use_colors = use_colors and getattr(self.stream, "isatty", lambda: False)()
        self.show_timestamps = show_timestamps
        self.start_time = time.time()

    def is_enabled_for(self, level: str) -> bool:
        level = level.upper()
        return level in LEVELS and LEVELS.index(level) >= self.threshold

    def _format_message(self, level: str, message: str) -> str:
        """Prefix message with elapsed time, level and logger name."""
        level_str = f"[{level:>8s}]"
        if self.use_colors:
            level_str = f"{ANSI_COLORS[level]}{level_str}{ANSI_RESET}"
        timestamp = f"[{time.time() - self.start_time:8.2f}s]" if self.show_timestamps else ""
        return f"{timestamp}{level_str}[{self.name}] {message}"

    def log(self, level: str, message: str):
        """Log a message at the specified level."""
        if self.is_enabled_for(level):
            print(self._format_message(level.upper(), message), file=self.stream, flush=True)

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


class MachineLogger(ConsoleLogger):
    """Logger for boot, trace and fault events of a running machine."""

    def log_boot(self, config: Dict[str, Any], rom_size: int):
        """Log boot configuration and ROM size."""
        self.info("=" * 60)
        self.info(f"Booting with {rom_size} byte rom:")
        for key, value in config.items():
            self.info(f"  {key}: {value}")
        self.info("=" * 60)

    def log_instruction(self, pc: int, text: str):
        """Log one fetched instruction."""
        self.debug(f"0x{pc:03X}: {text}")

    def log_registers(self, state):
        """Log register file, index, pc and timers at debug level."""
        if not self.is_enabled_for("DEBUG"):
            return
        registers = " ".join(f"V{i:X}={int(v):02X}" for i, v in enumerate(state.V))
        self.debug(
            f"PC=0x{int(state.pc):03X} I=0x{int(state.I):03X} "
            f"DT={int(state.delay_timer)} ST={int(state.sound_timer)} | {registers}"
        )

    def log_fault(self, error: Exception):
        """Log a terminal machine fault."""
        classification = getattr(error, "classification", "fatal")
        self.error(f"Halting ({classification}): {error}")

    def log_shutdown(self, frames: int):
        elapsed = time.time() - self.start_time
        self.info(f"Stopped after {frames} frames ({elapsed:.1f}s)")
