from fractions import Fraction

import pytest

from hub_search.search.evaluator import RejectReason
from hub_search.search.expression_lang import evaluate_exact, evaluate_game, parse_expression
from hub_search.search.operators import Operator
from hub_search.search.shapes import LEAF, Join


def test_parse_recovers_shape_and_assignment():
    parsed = parse_expression("((2*6)-1)")
    assert parsed.shape == Join(Join(LEAF, LEAF), LEAF)
    assert parsed.leaves == (2, 6, 1)
    assert parsed.operators == (Operator.MUL, Operator.SUB)
    assert parsed.size == 3


def test_parse_single_literal():
    parsed = parse_expression("11")
    assert parsed.shape == LEAF
    assert parsed.leaves == (11,)
    assert parsed.operators == ()


def test_exact_evaluation_uses_ordinary_arithmetic():
    assert evaluate_exact("(3/2)") == Fraction(3, 2)
    assert evaluate_exact("((1-3)*2)") == -4
    assert evaluate_exact("(11+1)") == 12


def test_game_evaluation_applies_hub_rules():
    assert evaluate_game("(6/2)").value == 3
    assert evaluate_game("(3/2)").reason is RejectReason.DIVISION_FAILURE
    assert evaluate_game("(2-2)").reason is RejectReason.NON_POSITIVE
    assert evaluate_game("(200*200)", int_bits=16).reason is RejectReason.OVERFLOW


def test_unparenthesised_input_follows_precedence():
    parsed = parse_expression("2+3*4")
    assert parsed.shape == Join(LEAF, Join(LEAF, LEAF))
    assert parsed.evaluate_game().value == 14


@pytest.mark.parametrize("text", ["", "(1+", "2**3", "1.5+1", "-1", "x+1", "(1%2)", "abs(3)"])
def test_rejects_unsupported_input(text):
    with pytest.raises(ValueError):
        parse_expression(text)


def test_exact_division_by_zero_raises():
    with pytest.raises(ZeroDivisionError):
        evaluate_exact("(1/(1-1))")


@pytest.mark.parametrize("terms", [1500, 5000])
def test_deep_chains_raise_value_error(terms):
    with pytest.raises(ValueError, match="too deeply nested"):
        parse_expression("+".join(["1"] * terms))
