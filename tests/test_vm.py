"""Tests for the Chicken VM."""

import logging

import pytest

from microchicken import (
    Config,
    Context,
    InvalidAddress,
    InvalidJump,
    InvalidOpcode,
    MemoryLimitError,
    NonStringExit,
    TimeLimitError,
    VM,
    StepStatus,
)
from microchicken.values import SELF_REFERENCE, UNDEFINED, is_nan


def run(opcodes, **options):
    """Run an opcode stream and return its output."""
    return VM(opcodes, Config(**options)).run()


def stack_after(opcodes, steps, **options):
    """Execute a number of steps and return the working stack."""
    vm = VM(opcodes, Config(**options))
    for _ in range(steps):
        assert vm.step().running
    return vm.stack


class TestMemoryLayout:
    """Initial memory."""

    def test_header_program_and_implicit_exit(self):
        vm = VM([12, 1], Config(input="x"))
        assert vm.memory == [SELF_REFERENCE, "x", 12.0, 1.0, 0.0]
        assert vm.stack == []
        assert vm.pc == 0

    def test_default_input_is_empty_text(self):
        assert VM([]).memory == [SELF_REFERENCE, "", 0.0]


class TestExit:
    """Opcode 0."""

    def test_quine(self):
        assert run([1]) == "chicken"

    def test_explicit_exit(self):
        assert run([1, 0, 15]) == "chicken"

    def test_number_on_exit_faults(self):
        with pytest.raises(NonStringExit):
            run([15])

    def test_empty_program_faults(self):
        """The implicit exit pops an empty stack, which is undefined."""
        with pytest.raises(NonStringExit):
            run([])

    def test_fault_records_pc_and_memory(self):
        with pytest.raises(NonStringExit) as excinfo:
            run([15])
        fault = excinfo.value
        assert fault.name == "NonStringExit"
        assert fault.pc == 1
        assert fault.memory == [SELF_REFERENCE, "", 15.0, 0.0]


class TestArithmetic:
    """Add, subtract and multiply."""

    def test_chicken_plus_number_concatenates(self):
        assert run([1, 15, 2, 0]) == "chicken5"

    def test_concatenation_puts_second_first(self):
        assert run([15, 1, 2]) == "5chicken"

    def test_numeric_add(self):
        assert stack_after([12, 13, 2], 3) == [5.0]

    def test_add_on_empty_stack_uses_undefined(self):
        assert run([1, 2]) == "undefinedchicken"

    def test_add_without_text_is_numeric(self):
        [result] = stack_after([2], 1)
        assert is_nan(result)

    def test_subtract_is_top_minus_second(self):
        assert stack_after([13, 18, 3], 3) == [5.0]
        assert stack_after([11, 10, 3], 3) == [-1.0]

    def test_subtract_text_is_nan(self):
        [result] = stack_after([1, 13, 3], 3)
        assert is_nan(result)

    def test_subtract_numeric_text(self):
        assert stack_after([11, 6, 0, 12, 3], 4, input="10") == [-8.0]

    def test_multiply(self):
        assert stack_after([13, 14, 4], 3) == [12.0]

    def test_results_are_floats(self):
        [result] = stack_after([13, 14, 4], 3)
        assert isinstance(result, float)


class TestCompare:
    """Opcode 5."""

    def test_equal_numbers(self):
        assert stack_after([15, 15, 5], 3) == [True]

    def test_different_numbers(self):
        assert stack_after([15, 16, 5], 3) == [False]

    def test_chicken_equals_chicken(self):
        assert stack_after([1, 1, 5], 3) == [True]

    def test_number_equals_numeric_input(self):
        assert stack_after([11, 6, 0, 17, 5], 4, input="7") == [True]

    def test_non_ascii_digit_input_is_not_a_number(self):
        """Arabic-Indic three does not compare equal to 3."""
        assert stack_after([10, 6, 1, 13, 5], 4, input="\u0663") == [False]

    def test_boolean_equals_one(self):
        # (5 == 5) == 1
        assert stack_after([15, 15, 5, 11, 5], 5) == [True]


class TestLoad:
    """Opcode 6, the double wide load."""

    def test_cat(self):
        assert run([11, 6, 0], input="Chicken Power") == "Chicken Power"

    def test_load_consumes_operand(self):
        vm = VM([11, 6, 0], Config(input="x"))
        vm.step()
        vm.step()
        assert vm.pc == 3

    def test_character_of_input(self):
        assert run([11, 6, 1], input="xyz") == "y"

    def test_index_past_end_of_text(self):
        assert stack_after([19, 6, 1], 2, input="xyz") == [UNDEFINED]

    def test_negative_index(self):
        assert stack_after([11, 10, 3, 6, 1], 4, input="xyz") == [UNDEFINED]

    def test_self_reference_reads_memory(self):
        assert stack_after([12, 6, 0], 2) == [12.0]

    def test_self_reference_reads_itself(self):
        assert stack_after([10, 6, 0], 2) == [SELF_REFERENCE]

    def test_self_reference_out_of_range(self):
        assert stack_after([60, 6, 0], 2) == [UNDEFINED]

    def test_non_numeric_index(self):
        assert stack_after([1, 6, 0], 2) == [UNDEFINED]

    def test_number_target_gives_undefined(self):
        assert stack_after([12, 6, 2], 2) == [UNDEFINED]

    def test_address_outside_memory_faults(self):
        with pytest.raises(InvalidAddress) as excinfo:
            run([10, 6, 99])
        assert excinfo.value.pc == 1

    def test_address_fault_keeps_index_on_stack(self):
        """A bad address faults before the index is popped."""
        with pytest.raises(InvalidAddress) as excinfo:
            run([10, 6, 99])
        assert excinfo.value.memory == [SELF_REFERENCE, "", 10.0, 6.0, 99.0, 0.0, 0.0]


class TestStore:
    """Opcode 7."""

    def test_store_over_input(self):
        assert run([1, 11, 7, 11, 6, 0], input="x") == "chicken"

    def test_out_of_bounds_store_is_ignored(self):
        vm = VM([1, 60, 7])
        for _ in range(3):
            vm.step()
        assert len(vm.memory) == 6
        assert vm.memory[:2] == [SELF_REFERENCE, ""]
        assert vm.stack == []

    def test_out_of_bounds_store_leaves_memory_alone(self):
        assert run([1, 60, 7, 11, 6, 0], input="in") == "in"

    def test_negative_index_is_ignored(self):
        vm = VM([1, 11, 10, 3, 7])
        for _ in range(5):
            vm.step()
        assert vm.memory == [SELF_REFERENCE, "", 1.0, 11.0, 10.0, 3.0, 7.0, 0.0]

    def test_self_modifying_program(self):
        """Overwrite a push 5 with a chicken before it runs."""
        assert run([11, 15, 7, 15]) == "chicken"

    def test_storing_text_over_code_faults_when_run(self):
        with pytest.raises(InvalidOpcode):
            run([1, 15, 7, 10])


class TestJump:
    """Opcode 8."""

    def test_taken_jump_skips(self):
        assert run([1, 11, 11, 8, 15, 0]) == "chicken"

    def test_untaken_jump_falls_through(self):
        assert run([1, 10, 11, 8, 15, 2, 0]) == "chicken5"

    def test_jump_to_implicit_exit(self):
        assert run([1, 11, 11, 8, 15]) == "chicken"

    def test_jump_past_program_faults(self):
        with pytest.raises(InvalidJump):
            run([11, 19, 8])

    def test_negative_target_faults(self):
        with pytest.raises(InvalidJump):
            run([11, 20, 10, 3, 8])

    def test_nan_offset_faults_when_taken(self):
        with pytest.raises(InvalidJump):
            run([11, 1, 8])

    def test_nan_offset_ignored_when_not_taken(self):
        assert run([1, 10, 1, 8]) == "chicken"

    def test_countdown_loop(self, programs_dir):
        ctx = Context()
        assert ctx.run_file(programs_dir / "countdown.chicken", input="5") == "chicken54321"


class TestChar:
    """Opcode 9."""

    def test_html_entity(self):
        assert run([59, 9, 0]) == "&#49;"

    def test_normal_char(self):
        assert run([59, 9, 0], normal_char=True) == "1"

    def test_entity_from_text(self):
        assert run([11, 6, 0, 9], input="72") == "&#72;"

    def test_normal_char_from_text(self):
        assert run([11, 6, 0, 9], input="72", normal_char=True) == "H"

    def test_nan_entity(self):
        assert run([1, 9]) == "&#NaN;"

    def test_normal_char_nan_is_undefined(self):
        assert stack_after([1, 9], 2, normal_char=True) == [UNDEFINED]

    def test_normal_char_negative_is_undefined(self):
        assert stack_after([11, 10, 3, 9], 4, normal_char=True) == [UNDEFINED]

    def test_entity_truncates(self):
        assert run([11, 6, 0, 9], input="65.9") == "&#65;"


class TestPush:
    """Opcodes of ten and above."""

    def test_push(self):
        assert stack_after([10, 11, 110], 3) == [0.0, 1.0, 100.0]


class TestStepping:
    """The step interface used by the debugger."""

    def test_step_then_halt(self):
        vm = VM([1])
        result = vm.step()
        assert result.status is StepStatus.RUNNING
        assert vm.pc == 1
        assert vm.stack == ["chicken"]

        result = vm.step()
        assert result.halted
        assert result.output == "chicken"
        assert vm.halted

    def test_step_after_halt_is_idempotent(self):
        vm = VM([1])
        vm.run()
        count = vm.instruction_count
        assert vm.step().output == "chicken"
        assert vm.instruction_count == count

    def test_step_reports_fault(self):
        vm = VM([15])
        vm.step()
        result = vm.step()
        assert result.faulted
        assert result.fault.name == "NonStringExit"
        assert vm.step() is result

    def test_run_to_completion(self):
        result = VM([1, 15, 2, 0]).run_to_completion()
        assert result.halted
        assert result.output == "chicken5"

    def test_describe_current(self):
        vm = VM([10, 6, 1])
        assert vm.describe_current() == "literal 0"
        vm.step()
        assert vm.describe_current() == "pick/load from 1.0"


class TestLimits:
    """Time and memory limits."""

    def test_time_limit(self):
        with pytest.raises(TimeLimitError):
            run([11, 15, 10, 3, 8], time_limit=0.05)

    def test_memory_limit(self):
        with pytest.raises(MemoryLimitError):
            run([1, 11, 16, 10, 3, 8], memory_limit=100)

    def test_invalid_limits(self):
        with pytest.raises(ValueError):
            Config(time_limit=0)
        with pytest.raises(ValueError):
            Config(memory_limit=-1)


class TestContext:
    """High level API."""

    def test_eval(self):
        assert Context().eval("chicken") == "chicken"

    def test_eval_with_input(self):
        ctx = Context()
        source = "\n".join([" ".join(["chicken"] * 11), " ".join(["chicken"] * 6), ""])
        assert ctx.eval(source, input="hello") == "hello"

    def test_normal_char_option(self):
        assert Context(normal_char=True).run_opcodes([59, 9, 0]) == "1"

    def test_load_returns_unstarted_vm(self):
        vm = Context().load("chicken")
        assert vm.pc == 0
        assert not vm.halted


class TestLogging:
    """Instruction tracing goes through the logging module."""

    def test_debug_trace(self, caplog):
        caplog.set_level(logging.DEBUG, logger="microchicken.vm")
        VM([1, 15, 2, 0]).run()
        messages = [r.getMessage() for r in caplog.records]
        assert "pc=0 chicken stack=[]" in messages
        assert "pc=2 add stack=['chicken', 5]" in messages
        assert "Halted after 4 instructions" in messages

    def test_fault_logged(self, caplog):
        caplog.set_level(logging.INFO, logger="microchicken.vm")
        VM([15]).run_to_completion()
        assert any("NonStringExit" in r.getMessage() for r in caplog.records)
