"""Conditional step resolution.

``resolve_steps`` maps a step catalog and the current selection to the
ordered list of steps that apply.  It is pure: no caching, no mutation of its
inputs and no exceptions.  Conditions that cannot be evaluated count as
"does not match" so a bad row hides a step rather than breaking the page.
"""

from __future__ import annotations

import math
from collections.abc import Callable, Iterable

from .models import Step, StepCondition
from .selection import Selection


Check = Callable[[StepCondition, Selection], bool]


def _player_counts_hold(condition: StepCondition, selection: Selection) -> bool:
    if condition.player_counts is None:
        return True
    return selection.player_count in condition.player_counts


def _no_expansions_hold(condition: StepCondition, selection: Selection) -> bool:
    return not (condition.require_no_expansions and selection.selected_expansions)


def _included_expansions_hold(condition: StepCondition, selection: Selection) -> bool:
    if condition.include_expansions is None:
        return True
    return condition.include_expansions <= selection.selected_expansions


def _excluded_expansions_hold(condition: StepCondition, selection: Selection) -> bool:
    if condition.exclude_expansions is None:
        return True
    return condition.exclude_expansions.isdisjoint(selection.selected_expansions)


def _included_modules_hold(condition: StepCondition, selection: Selection) -> bool:
    if condition.include_modules is None:
        return True
    return condition.include_modules <= selection.selected_modules


def _excluded_modules_hold(condition: StepCondition, selection: Selection) -> bool:
    if condition.exclude_modules is None:
        return True
    return condition.exclude_modules.isdisjoint(selection.selected_modules)


# Evaluation order is fixed; the first failing check short-circuits.
CHECKS: tuple[Check, ...] = (
    _player_counts_hold,
    _no_expansions_hold,
    _included_expansions_hold,
    _excluded_expansions_hold,
    _included_modules_hold,
    _excluded_modules_hold,
)


def condition_matches(condition: StepCondition | None, selection: Selection) -> bool:
    """Evaluate a condition as a conjunction against ``selection``."""

    if condition is None:
        return True
    try:
        return all(check(condition, selection) for check in CHECKS)
    except (TypeError, AttributeError):
        return False


def resolve_steps(catalog: Iterable[Step], selection: Selection) -> list[Step]:
    """Return the steps that apply to ``selection``, sorted by ``order``.

    Steps sharing an ``order`` keep their catalog order.  A step that appears
    more than once in ``catalog`` is returned once.
    """

    unconditional: list[tuple[int, Step]] = []
    passing: list[tuple[int, Step]] = []
    seen: set[object] = set()

    for position, step in enumerate(catalog):
        key = step.id if step.id is not None else id(step)
        if key in seen:
            continue
        seen.add(key)
        if step.condition is None:
            unconditional.append((position, step))
        elif condition_matches(step.condition, selection):
            passing.append((position, step))

    merged = sorted(unconditional + passing, key=lambda item: (_order_key(item[1]), item[0]))
    return [step for _, step in merged]


def _order_key(step: Step) -> float:
    order = step.order
    if isinstance(order, bool) or not isinstance(order, (int, float)):
        return float("inf")
    if not math.isfinite(order):
        return float("inf")
    return order
