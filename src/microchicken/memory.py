"""Initial memory layout for a Chicken program.

Memory is a single list of values made of three segments::

    [ self, input | opcode, ..., opcode, 0 | stack ... ]
      header        program image          working stack

Segment boundaries are not stored; they follow from the program length.
"""

from typing import List, Sequence

from .config import Config
from .values import SELF_REFERENCE, ChickenValue

# Address 0 holds the self reference, address 1 the input
HEADER_SIZE = 2


def stack_base(program_length: int) -> int:
    """Address of the first stack cell, just past the implicit exit."""
    return HEADER_SIZE + program_length + 1


def build_memory(
    opcodes: Sequence[int], config: Config = Config()
) -> List[ChickenValue]:
    """Lay out the header, the program and an implicit trailing exit."""
    memory: List[ChickenValue] = [SELF_REFERENCE, config.input]
    memory.extend(float(op) for op in opcodes)
    # Falling off the end of the program runs this exit
    memory.append(0.0)
    return memory
