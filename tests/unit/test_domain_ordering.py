"""Tests for step ordering helpers."""

import pytest
from hypothesis import given
from hypothesis import strategies as st

from tablesetup.domain import models as dm
from tablesetup.domain.ordering import (
    changed_steps,
    has_unique_orders,
    index_of,
    is_dense_order,
    next_step_order,
    renumber,
    reorder,
    sort_steps,
)


def _steps(*orders: int) -> list[dm.Step]:
    return [
        dm.Step(id=dm.StepID(f"s{index}"), order=order, text=f"step {index}")
        for index, order in enumerate(orders)
    ]


class TestReorder:
    """Tests for reorder."""

    def test_move_down(self):
        steps = _steps(1, 2, 3, 4)
        result = reorder(steps, 0, 2)
        assert [step.id for step in result] == ["s1", "s2", "s0", "s3"]
        assert [step.order for step in result] == [1, 2, 3, 4]

    def test_move_up(self):
        steps = _steps(1, 2, 3, 4)
        result = reorder(steps, 3, 0)
        assert [step.id for step in result] == ["s3", "s0", "s1", "s2"]

    def test_same_index_renumbers_only(self):
        steps = _steps(2, 5, 9)
        result = reorder(steps, 1, 1)
        assert [step.id for step in result] == ["s0", "s1", "s2"]
        assert [step.order for step in result] == [1, 2, 3]

    def test_input_untouched(self):
        steps = _steps(1, 2, 3)
        reorder(steps, 0, 2)
        assert [step.id for step in steps] == ["s0", "s1", "s2"]
        assert [step.order for step in steps] == [1, 2, 3]

    @pytest.mark.parametrize(("from_index", "to_index"), [(-1, 0), (0, 3), (5, 1)])
    def test_out_of_range_raises(self, from_index, to_index):
        with pytest.raises(IndexError, match="out of range"):
            reorder(_steps(1, 2, 3), from_index, to_index)


class TestHelpers:
    """Tests for the smaller ordering helpers."""

    def test_next_step_order(self):
        assert next_step_order([]) == 1
        assert next_step_order(_steps(3, 7, 2)) == 8

    def test_sort_steps_is_stable(self):
        steps = _steps(2, 1, 2)
        assert [step.id for step in sort_steps(steps)] == ["s1", "s0", "s2"]

    def test_renumber_keeps_unchanged_instances(self):
        steps = _steps(1, 5)
        result = renumber(steps)
        assert result[0] is steps[0]
        assert result[1].order == 2

    def test_changed_steps(self):
        before = _steps(1, 2, 3)
        after = reorder(before, 2, 0)
        assert [step.id for step in changed_steps(before, after)] == ["s2", "s0", "s1"]
        assert changed_steps(before, before) == []

    def test_index_of(self):
        steps = _steps(1, 2)
        assert index_of(steps, dm.StepID("s1")) == 1
        assert index_of(steps, dm.StepID("missing")) == -1

    def test_density_and_uniqueness(self):
        assert is_dense_order(_steps(1, 2, 3))
        assert not is_dense_order(_steps(1, 3))
        assert has_unique_orders(_steps(1, 3))
        assert not has_unique_orders(_steps(2, 2))


@st.composite
def _reorder_inputs(draw):
    orders = draw(st.lists(st.integers(1, 50), min_size=1, max_size=15))
    steps = sort_steps(_steps(*orders))
    from_index = draw(st.integers(0, len(steps) - 1))
    to_index = draw(st.integers(0, len(steps) - 1))
    return steps, from_index, to_index


@given(_reorder_inputs())
def test_reorder_law(data):
    """The moved step lands at order to_index + 1 and orders become 1..n."""
    steps, from_index, to_index = data
    moved_id = steps[from_index].id

    result = reorder(steps, from_index, to_index)

    moved = next(step for step in result if step.id == moved_id)
    assert moved.order == to_index + 1
    assert sorted(step.order for step in result) == list(range(1, len(steps) + 1))
    assert is_dense_order(result)
    assert {step.id for step in result} == {step.id for step in steps}
