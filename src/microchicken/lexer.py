"""Chicken source loader.

A Chicken program is one instruction per line, and the instruction is the
number of times the word ``chicken`` appears on that line.
"""

from pathlib import Path
from typing import Iterable, List, Union

KEYWORD = "chicken"


class Lexer:
    """Turns Chicken source text into a stream of opcodes."""

    def __init__(self, source: str):
        self.source = source

    def lines(self) -> List[str]:
        """Split the source into lines, keeping empty ones."""
        if self.source == "":
            return []
        return self.source.split("\n")

    def opcodes(self) -> List[int]:
        """Count the keyword on every line.

        Occurrences are counted as plain, non-overlapping substrings, so
        ``chickenchicken`` is two chickens and ``Chicken`` is none.
        """
        return [line.count(KEYWORD) for line in self.lines()]


def tokenize(source: str) -> List[int]:
    """Return the opcode stream for a Chicken program."""
    return Lexer(source).opcodes()


def load_file(path: Union[str, Path]) -> List[int]:
    """Read and tokenize a Chicken source file."""
    source = Path(path).read_text(encoding="utf-8")
    return tokenize(source)


def to_chicken(opcodes: Iterable[int]) -> str:
    """Encode an opcode stream as Chicken source."""
    lines = []
    for opcode in opcodes:
        if opcode < 0:
            raise ValueError(f"Opcode must be non-negative, got {opcode}")
        lines.append(" ".join([KEYWORD] * opcode))
    return "\n".join(lines)
