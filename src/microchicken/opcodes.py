"""Chicken instruction set."""

from enum import IntEnum
from typing import Any, Optional


class OpCode(IntEnum):
    """Instruction codes, i.e. the number of chickens on a line."""

    EXIT = 0        # axe: pop and finish with the popped text
    CHICKEN = 1     # push "chicken"
    ADD = 2         # second + top (concatenates if either is text)
    SUBTRACT = 3    # fox: top - second
    MULTIPLY = 4    # rooster: top * second
    COMPARE = 5     # loose equality of the top two values
    LOAD = 6        # pick: double wide, next cell is the address
    STORE = 7       # peck: pop address, pop value
    JUMP = 8        # fr: pop offset, pop condition
    CHAR = 9        # bbq: number to character (or HTML entity)


# Opcodes at or above this value push (opcode - PUSH_BASE)
PUSH_BASE = 10

NAMES = {
    OpCode.EXIT: "axe/exit",
    OpCode.CHICKEN: "chicken",
    OpCode.ADD: "add",
    OpCode.SUBTRACT: "fox/subtract",
    OpCode.MULTIPLY: "rooster/multiply",
    OpCode.COMPARE: "compare",
    OpCode.LOAD: "pick/load",
    OpCode.STORE: "peck/store",
    OpCode.JUMP: "fr/jump",
    OpCode.CHAR: "bbq/chr",
}


def describe(opcode: Optional[int], operand: Any = None) -> str:
    """Human readable description of an opcode, for the debugger."""
    if opcode is None or opcode < 0:
        return "unknown"
    if opcode >= PUSH_BASE:
        return f"literal {opcode - PUSH_BASE}"
    name = NAMES[OpCode(opcode)]
    if opcode == OpCode.LOAD:
        return f"{name} from {operand!r}"
    return name
