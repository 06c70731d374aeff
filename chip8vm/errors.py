"""Fatal CHIP-8 machine conditions surfaced to the host."""

from typing import Optional

from chip8vm.constants import (
    MAX_ROM_SIZE, STATUS_STACK_OVERFLOW, STATUS_STACK_UNDERFLOW,
    STATUS_MEMORY_OUT_OF_BOUNDS, STATUS_END_OF_MEMORY, FIRST_FAULT_STATUS,
)

FATAL = "fatal"
FATAL_PRE_EXECUTION = "fatal, pre-execution"


class Chip8Error(Exception):
    """Base class for conditions that stop the cycle driver.

    Attributes:
        classification: How the condition is classified ("fatal" or
            "fatal, pre-execution").
        pc: Program counter at the time of the fault, if known.
    """
    classification = FATAL
    default_message = "machine fault"

    def __init__(self, message: Optional[str] = None, pc: Optional[int] = None):
        self.pc = pc
        if message is None:
            message = self.default_message
        if pc is not None:
            message = f"{message} (pc=0x{pc:03X})"
        super().__init__(message)


class RomTooLarge(Chip8Error):
    """Program image does not fit between 0x200 and the end of memory."""
    classification = FATAL_PRE_EXECUTION
    default_message = f"rom is too large to fit into memory (max {MAX_ROM_SIZE} bytes)"

    def __init__(self, size: int):
        self.size = size
        super().__init__(
            f"rom is too large to fit into memory: {size} bytes, max {MAX_ROM_SIZE}"
        )


class StackOverflow(Chip8Error):
    default_message = "stack overflow"


class StackUnderflow(Chip8Error):
    default_message = "stack underflow"


class MemoryOutOfBounds(Chip8Error):
    default_message = "memory access out of bounds"


class EndOfMemory(Chip8Error):
    default_message = "reached end of memory"


FAULTS = {
    STATUS_STACK_OVERFLOW: StackOverflow,
    STATUS_STACK_UNDERFLOW: StackUnderflow,
    STATUS_MEMORY_OUT_OF_BOUNDS: MemoryOutOfBounds,
    STATUS_END_OF_MEMORY: EndOfMemory,
}


def raise_for_status(state) -> None:
    """Raise the exception matching a faulted state; do nothing otherwise."""
    status = int(state.status)
    if status < FIRST_FAULT_STATUS:
        return
    raise FAULTS[status](pc=int(state.pc))
