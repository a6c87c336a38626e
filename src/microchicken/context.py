"""Chicken execution context."""

from pathlib import Path
from typing import Any, Optional, Sequence, Union

from .config import Config
from .lexer import load_file, tokenize
from .vm import VM


class Context:
    """Runs Chicken programs with a fixed set of options."""

    def __init__(
        self,
        normal_char: bool = False,
        time_limit: Optional[float] = None,
        memory_limit: Optional[int] = None,
    ):
        """Create a new Chicken context.

        Args:
            normal_char: Char produces characters instead of HTML entities
            time_limit: Maximum execution time in seconds
            memory_limit: Maximum number of memory cells
        """
        self.config = Config(
            normal_char=normal_char,
            time_limit=time_limit,
            memory_limit=memory_limit,
        )

    def load(self, source: str, input: Any = "") -> VM:
        """Build a VM for a program without running it."""
        return self.load_opcodes(tokenize(source), input)

    def load_opcodes(self, opcodes: Sequence[int], input: Any = "") -> VM:
        """Build a VM for an already tokenized program."""
        return VM(opcodes, self.config.replace(input=input))

    def eval(self, source: str, input: Any = "") -> str:
        """Run Chicken source and return the text it exits with.

        Raises:
            ChickenFault: If execution stops on a fault
        """
        return self.load(source, input).run()

    def run_opcodes(self, opcodes: Sequence[int], input: Any = "") -> str:
        """Run a raw opcode stream and return its output."""
        return self.load_opcodes(opcodes, input).run()

    def run_file(self, path: Union[str, Path], input: Any = "") -> str:
        """Run a Chicken source file and return its output."""
        return self.load_opcodes(load_file(path), input).run()
