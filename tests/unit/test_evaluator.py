import pytest

from hub_search.search.evaluator import EvalOutcome, Evaluator, RejectReason, render
from hub_search.search.operators import Operator
from hub_search.search.shapes import LEAF, Join, compile_shape

ADD, SUB, MUL, DIV = Operator.ADD, Operator.SUB, Operator.MUL, Operator.DIV
PAIR = Join(LEAF, LEAF)
LEFT3 = Join(Join(LEAF, LEAF), LEAF)
RIGHT3 = Join(LEAF, Join(LEAF, LEAF))


def test_leaf_evaluates_to_value():
    outcome = Evaluator().evaluate(LEAF, (7,), ())
    assert outcome == EvalOutcome.ok(7)
    assert outcome.accepted


def test_exact_division_accepted():
    assert Evaluator().evaluate(PAIR, (6, 2), (DIV,)).value == 3


def test_inexact_division_rejected():
    outcome = Evaluator().evaluate(PAIR, (3, 2), (DIV,))
    assert not outcome.accepted
    assert outcome.reason is RejectReason.DIVISION_FAILURE
    assert outcome.value is None


def test_division_by_zero_rejected():
    # (1-1) is zero on the right of the division
    outcome = Evaluator().evaluate(RIGHT3, (5, 1, 1), (DIV, SUB))
    assert outcome.reason is RejectReason.DIVISION_FAILURE


def test_non_positive_final_result_rejected():
    assert Evaluator().evaluate(PAIR, (2, 2), (SUB,)).reason is RejectReason.NON_POSITIVE
    assert Evaluator().evaluate(PAIR, (1, 3), (SUB,)).reason is RejectReason.NON_POSITIVE


def test_negative_intermediate_is_allowed():
    # (1-3) is negative, but ((1-3)+5) = 3
    assert Evaluator().evaluate(LEFT3, (1, 3, 5), (SUB, ADD)).value == 3


def test_operator_slots_follow_infix_order():
    # LEFT3 renders as ((a o0 b) o1 c); RIGHT3 as (a o0 (b o1 c))
    assert Evaluator().evaluate(LEFT3, (2, 3, 4), (ADD, MUL)).value == 20
    assert Evaluator().evaluate(RIGHT3, (2, 3, 4), (ADD, MUL)).value == 14
    assert render(LEFT3, (2, 3, 4), (ADD, MUL)) == "((2+3)*4)"
    assert render(RIGHT3, (2, 3, 4), (ADD, MUL)) == "(2+(3*4))"


def test_overflow_rejected_at_configured_width():
    small = Evaluator(int_bits=8)
    assert small.max_value == 127
    assert small.min_value == -128
    assert small.evaluate(PAIR, (100, 27), (ADD,)).value == 127
    assert small.evaluate(PAIR, (100, 28), (ADD,)).reason is RejectReason.OVERFLOW
    assert small.evaluate(LEAF, (200,), ()).reason is RejectReason.OVERFLOW


def test_intermediate_overflow_rejected_even_if_final_fits():
    small = Evaluator(int_bits=8)
    # (20*10) overflows before the division brings it back into range
    outcome = small.evaluate(LEFT3, (20, 10, 10), (MUL, DIV))
    assert outcome.reason is RejectReason.OVERFLOW


def test_default_width_is_32_bits():
    ev = Evaluator()
    assert ev.max_value == 2**31 - 1
    assert ev.evaluate(PAIR, (65536, 32768), (MUL,)).reason is RejectReason.OVERFLOW
    assert ev.evaluate(PAIR, (65536, 32767), (MUL,)).value == 65536 * 32767


def test_accepts_compiled_programs():
    program = compile_shape(LEFT3)
    assert Evaluator().evaluate(program, (8, 4, 3), (DIV, MUL)).value == 6
    assert render(program, (8, 4, 3), (DIV, MUL)) == "((8/4)*3)"


def test_render_leaf_has_no_parentheses():
    assert render(LEAF, (11,), ()) == "11"
    assert render(PAIR, (11, 1), (ADD,)) == "(11+1)"


def test_invalid_width():
    with pytest.raises(ValueError):
        Evaluator(int_bits=1)
