"""Run options for the Chicken VM."""

from dataclasses import dataclass, replace
from typing import Any, Optional


@dataclass(frozen=True)
class Config:
    """Immutable options for a single program run.

    Attributes:
        normal_char: make Char produce real characters instead of
            HTML numeric character references
        input: the text placed at memory address 1
        time_limit: maximum execution time in seconds
        memory_limit: maximum number of memory cells
    """

    normal_char: bool = False
    input: Any = ""
    time_limit: Optional[float] = None
    memory_limit: Optional[int] = None

    def __post_init__(self) -> None:
        if self.time_limit is not None and self.time_limit <= 0:
            raise ValueError("time_limit must be positive")
        if self.memory_limit is not None and self.memory_limit <= 0:
            raise ValueError("memory_limit must be positive")

    def replace(self, **changes: Any) -> "Config":
        """Return a copy with some options changed."""
        return replace(self, **changes)
