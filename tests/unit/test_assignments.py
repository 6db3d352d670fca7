import itertools

import pytest

from hub_search.search.assignments import AssignmentEnumerator, AssignmentSpace
from hub_search.search.operators import Operator, OperatorSet


def test_count_is_cross_product():
    ops = OperatorSet.parse("+,-,*")
    space = AssignmentSpace(size=3, max_number=4, operators=ops)
    assert space.count == 4**3 * 3**2
    assert len(space) == space.count
    assert sum(1 for _ in space) == space.count


def test_every_combination_visited_once():
    ops = OperatorSet.parse("+,/")
    space = AssignmentSpace(size=3, max_number=3, operators=ops)
    seen = list(space)
    assert len(set(seen)) == len(seen)
    expected = {
        (leaves, opset)
        for opset in itertools.product(ops, repeat=2)
        for leaves in itertools.product(range(1, 4), repeat=3)
    }
    assert set(seen) == expected


def test_order_has_operators_outermost_and_first_leaf_fastest():
    ops = OperatorSet.parse("+,*")
    space = AssignmentSpace(size=2, max_number=2, operators=ops)
    assert list(space) == [
        ((1, 1), (Operator.ADD,)),
        ((2, 1), (Operator.ADD,)),
        ((1, 2), (Operator.ADD,)),
        ((2, 2), (Operator.ADD,)),
        ((1, 1), (Operator.MUL,)),
        ((2, 1), (Operator.MUL,)),
        ((1, 2), (Operator.MUL,)),
        ((2, 2), (Operator.MUL,)),
    ]


def test_first_operator_slot_varies_fastest():
    space = AssignmentSpace(size=3, max_number=1, operators=OperatorSet.parse("+,-"))
    assert [ops for _, ops in space] == [
        (Operator.ADD, Operator.ADD),
        (Operator.SUB, Operator.ADD),
        (Operator.ADD, Operator.SUB),
        (Operator.SUB, Operator.SUB),
    ]


def test_space_is_restartable():
    space = AssignmentSpace(size=2, max_number=3, operators=OperatorSet.parse("-"))
    assert list(space) == list(space)


def test_size_one_has_no_operators():
    space = AssignmentSpace(size=1, max_number=3, operators=OperatorSet.parse(None))
    assert list(space) == [((1,), ()), ((2,), ()), ((3,), ())]


def test_ranges_partition_the_space():
    space = AssignmentSpace(size=3, max_number=3, operators=OperatorSet.parse("+,-,*,/"))
    full = list(space)
    pieces = []
    for start in range(0, space.count, 7):
        pieces.extend(space.iter_range(start, start + 7))
    assert pieces == full
    assert list(space.iter_range(5, 5)) == []
    assert list(space.iter_range(space.count - 1, space.count + 10)) == full[-1:]


def test_decode_matches_iteration():
    space = AssignmentSpace(size=3, max_number=2, operators=OperatorSet.parse("+,*"))
    full = list(space)
    assert [space.decode(i) for i in range(space.count)] == full
    with pytest.raises(IndexError):
        space.decode(space.count)


def test_huge_space_does_not_materialize():
    space = AssignmentSpace(size=12, max_number=50, operators=OperatorSet.parse(None))
    first = next(iter(space))
    assert first == ((1,) * 12, (Operator.ADD,) * 11)
    last = space.decode(space.count - 1)
    assert last == ((50,) * 12, (Operator.DIV,) * 11)


def test_enumerator_validation():
    with pytest.raises(ValueError):
        AssignmentEnumerator(0, OperatorSet.parse("+"))
    with pytest.raises(ValueError):
        AssignmentSpace(size=0, max_number=3, operators=OperatorSet.parse("+"))
    enum = AssignmentEnumerator(11, OperatorSet.parse("+,*"))
    assert enum.count(2) == 11 * 11 * 2
