"""Step ordering rules.

Steps carry an explicit integer ``order``.  Within one game the persisted
orders must be unique and increase with position.  The helpers below are
pure; writing a new order back to storage lives in
:mod:`tablesetup.services.step_admin`.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import replace

from .models import Step, StepID


def sort_steps(steps: Iterable[Step]) -> list[Step]:
    """Return ``steps`` sorted by ``order`` (stable for ties)."""

    return sorted(steps, key=lambda step: step.order)


def reorder(steps: Sequence[Step], from_index: int, to_index: int) -> list[Step]:
    """Move the step at ``from_index`` to ``to_index`` and renumber 1..n.

    The input sequence is left untouched.  The result is always dense and
    unique regardless of the orders it started with.

    Raises:
        IndexError: If either index is outside ``steps``.
    """

    size = len(steps)
    for name, index in (("from_index", from_index), ("to_index", to_index)):
        if not 0 <= index < size:
            raise IndexError(f"{name} {index} out of range for {size} steps")

    result = list(steps)
    moved = result.pop(from_index)
    result.insert(to_index, moved)
    return renumber(result)


def renumber(steps: Iterable[Step]) -> list[Step]:
    """Assign each step its 1-based position as ``order``."""

    return [
        step if step.order == position else replace(step, order=position)
        for position, step in enumerate(steps, start=1)
    ]


def next_step_order(steps: Iterable[Step]) -> int:
    """Order for a newly created step: one past the current maximum, or 1."""

    orders = [step.order for step in steps]
    return max(orders) + 1 if orders else 1


def changed_steps(previous: Iterable[Step], current: Iterable[Step]) -> list[Step]:
    """Steps in ``current`` whose order differs from (or is missing in) ``previous``."""

    before: dict[StepID, int] = {step.id: step.order for step in previous}
    return [step for step in current if before.get(step.id) != step.order]


def index_of(steps: Sequence[Step], step_id: StepID) -> int:
    """Position of ``step_id`` in ``steps``, or -1."""

    for index, step in enumerate(steps):
        if step.id == step_id:
            return index
    return -1


def is_dense_order(steps: Sequence[Step]) -> bool:
    """Whether orders are exactly 1..n in list order."""

    return [step.order for step in steps] == list(range(1, len(steps) + 1))


def has_unique_orders(steps: Iterable[Step]) -> bool:
    orders = [step.order for step in steps]
    return len(orders) == len(set(orders))
