"""Chicken error types and execution faults."""

from typing import Any, List, Optional


class ChickenError(Exception):
    """Base class for all Chicken errors."""

    def __init__(self, message: str = "", name: str = "Error"):
        self.message = message
        self.name = name
        super().__init__(f"{name}: {message}" if message else name)


class ChickenFault(ChickenError):
    """A terminal condition that stops the VM.

    The VM fills in ``pc`` and ``memory`` before surfacing the fault so
    callers can report where execution stopped.
    """

    def __init__(self, message: str = "", name: str = "Fault"):
        super().__init__(message, name)
        self.pc: Optional[int] = None
        self.memory: List[Any] = []


class NonStringExit(ChickenFault):
    """Exit executed with something other than text on top of the stack."""

    def __init__(self, message: str = ""):
        super().__init__(message, "NonStringExit")


class InvalidAddress(ChickenFault):
    """Load operand points outside memory."""

    def __init__(self, message: str = ""):
        super().__init__(message, "InvalidAddress")


class InvalidJump(ChickenFault):
    """Jump target lies outside the program."""

    def __init__(self, message: str = ""):
        super().__init__(message, "InvalidJump")


class InvalidOpcode(ChickenFault):
    """The cell under the program counter is not an instruction."""

    def __init__(self, message: str = ""):
        super().__init__(message, "InvalidOpcode")


class MemoryLimitError(ChickenFault):
    """Raised when memory limit is exceeded."""

    def __init__(self, message: str = "Memory limit exceeded"):
        super().__init__(message, "MemoryLimitError")


class TimeLimitError(ChickenFault):
    """Raised when execution time limit is exceeded."""

    def __init__(self, message: str = "Execution timeout"):
        super().__init__(message, "TimeLimitError")
