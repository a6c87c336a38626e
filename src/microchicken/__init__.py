"""
micro-chicken - A Pure Python Chicken Interpreter

Runs programs written in Chicken, the esoteric language where the number
of times the word "chicken" appears on a line is that line's instruction.
Values follow the JavaScript-like coercion rules Chicken has always had,
quirks included.
"""

__version__ = "0.1.0"

from .config import Config
from .context import Context
from .errors import (
    ChickenError,
    ChickenFault,
    InvalidAddress,
    InvalidJump,
    InvalidOpcode,
    MemoryLimitError,
    NonStringExit,
    TimeLimitError,
)
from .lexer import load_file, to_chicken, tokenize
from .values import SELF_REFERENCE, UNDEFINED
from .vm import VM, StepResult, StepStatus

__all__ = [
    "Config",
    "Context",
    "ChickenError",
    "ChickenFault",
    "InvalidAddress",
    "InvalidJump",
    "InvalidOpcode",
    "MemoryLimitError",
    "NonStringExit",
    "TimeLimitError",
    "VM",
    "StepResult",
    "StepStatus",
    "load_file",
    "to_chicken",
    "tokenize",
    "SELF_REFERENCE",
    "UNDEFINED",
]
