"""Virtual machine for executing Chicken programs."""

import logging
import math
import time
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence

from .config import Config
from .errors import (
    ChickenFault,
    InvalidAddress,
    InvalidJump,
    InvalidOpcode,
    MemoryLimitError,
    NonStringExit,
    TimeLimitError,
)
from .memory import HEADER_SIZE, build_memory, stack_base
from .opcodes import PUSH_BASE, OpCode, describe
from .values import (
    SELF_REFERENCE,
    UNDEFINED,
    ChickenValue,
    display,
    is_number,
    loose_equals,
    to_boolean,
    to_integer,
    to_number,
    to_string,
    type_name,
)

logger = logging.getLogger(__name__)

# Highest Unicode code point
MAX_CODE_POINT = 0x10FFFF


class StepStatus(Enum):
    """Where the VM is after a step."""

    RUNNING = "running"
    HALTED = "halted"
    FAULTED = "faulted"


@dataclass(frozen=True)
class StepResult:
    """Outcome of a single step (or of a whole run)."""

    status: StepStatus
    output: Optional[str] = None
    fault: Optional[ChickenFault] = None

    @property
    def running(self) -> bool:
        return self.status is StepStatus.RUNNING

    @property
    def halted(self) -> bool:
        return self.status is StepStatus.HALTED

    @property
    def faulted(self) -> bool:
        return self.status is StepStatus.FAULTED


RUNNING = StepResult(StepStatus.RUNNING)


class VM:
    """Chicken virtual machine.

    The VM owns a single memory list. ``pc`` indexes the program image,
    which starts right after the two header cells. Drive it either with
    ``step()`` (one instruction per call) or ``run()``.
    """

    def __init__(self, opcodes: Sequence[int], config: Config = Config()):
        self.config = config
        self.program_length = len(opcodes)
        self.memory: List[ChickenValue] = build_memory(opcodes, config)
        self.pc = 0
        self.instruction_count = 0
        self.start_time: Optional[float] = None
        self.result: Optional[StepResult] = None

    @property
    def halted(self) -> bool:
        """True once the VM has halted or faulted."""
        return self.result is not None

    @property
    def stack(self) -> List[ChickenValue]:
        """Copy of the working stack, bottom first."""
        return self.memory[stack_base(self.program_length):]

    def current_opcode(self) -> Optional[int]:
        """The instruction under the program counter, if it is one."""
        cell = self._cell(HEADER_SIZE + self.pc)
        if not is_number(cell) or not float(cell).is_integer() or cell < 0:
            return None
        return int(cell)

    def describe_current(self) -> str:
        """Debugger description of the next instruction."""
        operand = None
        if self.current_opcode() == OpCode.LOAD:
            operand = self._cell(HEADER_SIZE + self.pc + 1)
        return describe(self.current_opcode(), operand)

    def step(self) -> StepResult:
        """Execute one instruction."""
        if self.result is not None:
            return self.result
        if self.start_time is None:
            self.start_time = time.time()

        pc = self.pc
        try:
            self._check_limits()
            op = self._fetch()
            if logger.isEnabledFor(logging.DEBUG):
                logger.debug(
                    "pc=%d %s stack=[%s]",
                    self.pc,
                    self.describe_current(),
                    ", ".join(display(v) for v in self.stack),
                )
            output = self._execute_opcode(op)
        except ChickenFault as fault:
            fault.pc = pc
            fault.memory = list(self.memory)
            logger.info("Faulted at pc %d: %s", pc, fault)
            self.result = StepResult(StepStatus.FAULTED, fault=fault)
            return self.result

        if output is not None:
            logger.info("Halted after %d instructions", self.instruction_count)
            self.result = StepResult(StepStatus.HALTED, output=output)
            return self.result
        return RUNNING

    def run_to_completion(self) -> StepResult:
        """Step until the VM halts or faults."""
        result = self.step()
        while result.running:
            result = self.step()
        return result

    def run(self) -> str:
        """Run the program and return its output.

        Raises:
            ChickenFault: if execution stops on a fault
        """
        result = self.run_to_completion()
        if result.faulted:
            raise result.fault
        return result.output

    def _check_limits(self) -> None:
        """Check memory and time limits."""
        self.instruction_count += 1

        # Check time limit every 1000 instructions
        if self.config.time_limit and self.instruction_count % 1000 == 0:
            if time.time() - self.start_time > self.config.time_limit:
                raise TimeLimitError("Execution timeout")

        if self.config.memory_limit and len(self.memory) > self.config.memory_limit:
            raise MemoryLimitError(
                f"Memory limit exceeded ({len(self.memory)} cells)"
            )

    def _cell(self, address: int) -> ChickenValue:
        if 0 <= address < len(self.memory):
            return self.memory[address]
        return UNDEFINED

    def _fetch(self) -> int:
        op = self.current_opcode()
        if op is None:
            cell = self._cell(HEADER_SIZE + self.pc)
            raise InvalidOpcode(f"{display(cell)} is not an instruction")
        return op

    def _push(self, value: ChickenValue) -> None:
        self.memory.append(value)

    def _pop(self) -> ChickenValue:
        """Pop the working stack; an empty stack gives undefined."""
        if len(self.memory) > stack_base(self.program_length):
            return self.memory.pop()
        return UNDEFINED

    def _execute_opcode(self, op: int) -> Optional[str]:
        """Execute a single opcode. Returns the output when the program exits."""
        if op >= PUSH_BASE:
            self._push(float(op - PUSH_BASE))

        elif op == OpCode.EXIT:
            value = self._pop()
            if not isinstance(value, str):
                raise NonStringExit(
                    f"Exit expects a string, got {type_name(value)} {display(value)}"
                )
            return value

        elif op == OpCode.CHICKEN:
            self._push("chicken")

        elif op == OpCode.ADD:
            top = self._pop()
            second = self._pop()
            if isinstance(top, str) or isinstance(second, str):
                self._push(to_string(second) + to_string(top))
            else:
                self._push(to_number(second) + to_number(top))

        elif op == OpCode.SUBTRACT:
            top = self._pop()
            second = self._pop()
            self._push(to_number(top) - to_number(second))

        elif op == OpCode.MULTIPLY:
            top = self._pop()
            second = self._pop()
            self._push(to_number(top) * to_number(second))

        elif op == OpCode.COMPARE:
            top = self._pop()
            second = self._pop()
            self._push(loose_equals(top, second))

        elif op == OpCode.LOAD:
            self._load()
            return None

        elif op == OpCode.STORE:
            index = to_integer(self._pop())
            value = self._pop()
            # Writes never grow memory
            if index is not None and 0 <= index < len(self.memory):
                self.memory[index] = value

        elif op == OpCode.JUMP:
            self._jump()
            return None

        elif op == OpCode.CHAR:
            self._push(self._char(to_number(self._pop())))

        self.pc += 1
        return None

    def _load(self) -> None:
        """Double wide load; the next program cell is the base address."""
        operand = self._cell(HEADER_SIZE + self.pc + 1)
        self.pc += 2

        address = to_integer(operand)
        if address is None or not 0 <= address < len(self.memory):
            raise InvalidAddress(f"Cannot load from address {display(operand)}")

        index = to_integer(self._pop())
        # An address naming the popped index cell reads as undefined
        target = self._cell(address)
        if target is SELF_REFERENCE:
            if index is not None and 0 <= index < len(self.memory):
                self._push(self.memory[index])
            else:
                self._push(UNDEFINED)
        elif isinstance(target, str):
            if index is not None and 0 <= index < len(target):
                self._push(target[index])
            else:
                self._push(UNDEFINED)
        else:
            self._push(UNDEFINED)

    def _jump(self) -> None:
        """Relative jump from the next instruction, taken if the condition is truthy."""
        offset = self._pop()
        condition = self._pop()
        if not to_boolean(condition):
            self.pc += 1
            return

        delta = to_integer(offset)
        if delta is None:
            raise InvalidJump(f"Invalid relative address {display(offset)}")
        target = self.pc + 1 + delta
        # Landing on the implicit exit is allowed
        if not 0 <= target <= self.program_length:
            raise InvalidJump(f"Jump to {target} is outside the program")
        self.pc = target

    def _char(self, n: float) -> ChickenValue:
        if self.config.normal_char:
            code = to_integer(n)
            if code is None or not 0 <= code <= MAX_CODE_POINT:
                return UNDEFINED
            # Lone surrogates are not characters
            if 0xD800 <= code <= 0xDFFF:
                return UNDEFINED
            return chr(code)

        if math.isnan(n) or math.isinf(n):
            return f"&#{to_string(n)};"
        return f"&#{to_string(float(int(n)))};"
