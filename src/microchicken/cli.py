"""micro-chicken command line entry point and step debugger."""

import argparse
import html
import logging
import sys
from typing import List, Optional, TextIO

from . import __version__
from .config import Config
from .errors import ChickenFault
from .lexer import load_file
from .values import display
from .vm import VM, StepResult


def _make_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="microchicken", description="Run Chicken programs")
    p.add_argument("-f", "--file", required=True, help="file to load chicken code from")
    p.add_argument("-i", "--input", default="", help="input to be provided to the program")
    p.add_argument("-d", "--debug", action="store_true", help="step through the program and view the stack")
    p.add_argument("-n", "--normal-char", action="store_true", help="make Char produce characters instead of HTML entities")
    p.add_argument("--raw", action="store_true", help="print output without decoding HTML entities")
    p.add_argument("--timeout", type=float, default=None, help="execution timeout in seconds")
    p.add_argument("--max-memory", type=int, default=None, help="maximum number of memory cells")
    p.add_argument("-v", "--verbose", action="store_true", help="log every executed instruction")
    p.add_argument("--version", action="version", version=f"microchicken {__version__}")
    return p


def _dump(memory: list) -> str:
    return "[" + ", ".join(display(v) for v in memory) + "]"


def format_fault(fault: ChickenFault) -> str:
    """Render a fault the way the CLI reports it."""
    lines = [f"error: {fault}"]
    if fault.pc is not None:
        lines.append(f"    program counter: {fault.pc}")
    lines.append(f"    memory dump: {_dump(fault.memory)}")
    return "\n".join(lines)


def debug_run(vm: VM, out: TextIO, stdin: TextIO) -> StepResult:
    """Single step a VM, printing its state and waiting for Enter between steps."""
    wait = True

    def pause() -> None:
        nonlocal wait
        if wait:
            print("press enter to step, ctrl+c to exit", file=out)
            out.flush()
            # EOF means nobody is there to press Enter, so run to the end
            if not stdin.readline():
                wait = False

    print("no opcode", file=out)
    print(f"program counter {vm.pc}", file=out)
    print(f"memory {_dump(vm.memory)}", file=out)
    pause()

    while True:
        print(f"program counter {vm.pc}", file=out)
        print(f"opcode {vm.describe_current()}", file=out)
        result = vm.step()
        if not result.running:
            return result
        print(f"program counter now {vm.pc}", file=out)
        print(f"memory now {_dump(vm.memory)}", file=out)
        pause()


def main(argv: Optional[List[str]] = None, stdin: Optional[TextIO] = None) -> int:
    args = _make_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        opcodes = load_file(args.file)
    except (OSError, UnicodeDecodeError) as e:
        print(f"error reading file {args.file!r}: {e}", file=sys.stderr)
        return 1

    try:
        config = Config(
            normal_char=args.normal_char,
            input=args.input,
            time_limit=args.timeout,
            memory_limit=args.max_memory,
        )
    except ValueError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    vm = VM(opcodes, config)
    if args.debug:
        result = debug_run(vm, sys.stdout, stdin or sys.stdin)
    else:
        result = vm.run_to_completion()

    if result.faulted:
        print(format_fault(result.fault), file=sys.stderr)
        return 1

    output = result.output if args.raw else html.unescape(result.output)
    print(output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
