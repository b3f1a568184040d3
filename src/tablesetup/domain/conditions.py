"""Construction and (de)serialisation of :class:`StepCondition` values.

Storage keeps conditions as a JSON object keyed by :class:`ConditionField`
values, with empty arrays and ``false`` flags stripped.  Rows are parsed
exactly once, here, so the resolver can rely on well-formed frozensets.
Unreadable entries inside an otherwise usable list are dropped.  A field
that cannot be understood at all makes the condition "never matches", so a
broken row hides its step instead of showing it to every table.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from .enums import ConditionField
from .models import ExpansionID, ModuleID, StepCondition

logger = logging.getLogger(__name__)

# Matches nothing: requires a player count no game can have.
UNSATISFIABLE = StepCondition(player_counts=frozenset({-1}))


def _as_id_set(values: Iterable[object] | None) -> frozenset[Any] | None:
    if not values:
        return None
    cleaned = frozenset(str(value).strip() for value in values if str(value).strip())
    return cleaned or None


def _as_count_set(values: Iterable[object] | None) -> frozenset[int] | None:
    if not values:
        return None
    counts: set[int] = set()
    for value in values:
        if isinstance(value, bool):
            continue
        try:
            counts.add(int(value))
        except (TypeError, ValueError):
            logger.debug("dropping non-numeric player count %r", value)
    return frozenset(counts) or None


def build_condition(
    *,
    player_counts: Iterable[object] | None = None,
    include_expansions: Iterable[object] | None = None,
    exclude_expansions: Iterable[object] | None = None,
    include_modules: Iterable[object] | None = None,
    exclude_modules: Iterable[object] | None = None,
    require_no_expansions: bool = False,
) -> StepCondition | None:
    """Return a normalised condition, or ``None`` when nothing is constrained."""

    condition = StepCondition(
        player_counts=_as_count_set(player_counts),
        include_expansions=_as_id_set(include_expansions),
        exclude_expansions=_as_id_set(exclude_expansions),
        include_modules=_as_id_set(include_modules),
        exclude_modules=_as_id_set(exclude_modules),
        require_no_expansions=bool(require_no_expansions),
    )
    return None if condition.is_empty() else condition


_LIST_FIELDS = (
    (ConditionField.PLAYER_COUNTS, "player_counts"),
    (ConditionField.INCLUDE_EXPANSIONS, "include_expansions"),
    (ConditionField.EXCLUDE_EXPANSIONS, "exclude_expansions"),
    (ConditionField.INCLUDE_MODULES, "include_modules"),
    (ConditionField.EXCLUDE_MODULES, "exclude_modules"),
)


def condition_from_json(payload: Mapping[str, Any] | None) -> StepCondition | None:
    """Parse the JSON ``conditions`` column.

    Empty arrays and ``false`` flags count as absent.  A present field that
    is not a list, holds no usable entry, or (for ``requireNoExpansions``) is
    not a boolean makes the whole condition unsatisfiable.
    """

    if not payload:
        return None
    if not isinstance(payload, Mapping):
        logger.warning("unreadable step condition %r; step will never match", payload)
        return UNSATISFIABLE

    lists: dict[str, list[object] | None] = {}
    for field, attribute in _LIST_FIELDS:
        raw = payload.get(field.value)
        if raw is None:
            lists[attribute] = None
        elif isinstance(raw, (str, bytes, Mapping)) or not isinstance(raw, Iterable):
            logger.warning("condition field %s is not a list: %r", field.value, raw)
            return UNSATISFIABLE
        else:
            lists[attribute] = list(raw)

    flag = payload.get(ConditionField.REQUIRE_NO_EXPANSIONS.value)
    if flag is None:
        flag = False
    elif not isinstance(flag, bool):
        logger.warning(
            "condition flag %s is not a boolean: %r",
            ConditionField.REQUIRE_NO_EXPANSIONS.value,
            flag,
        )
        return UNSATISFIABLE

    condition = build_condition(require_no_expansions=flag, **lists)
    for field, attribute in _LIST_FIELDS:
        if lists[attribute] and (condition is None or getattr(condition, attribute) is None):
            logger.warning(
                "condition field %s has no usable entry: %r", field.value, lists[attribute]
            )
            return UNSATISFIABLE
    return condition


def condition_to_json(condition: StepCondition | None) -> dict[str, Any]:
    """Serialise a condition with empty fields stripped and lists sorted."""

    if condition is None:
        return {}
    payload: dict[str, Any] = {}
    if condition.player_counts:
        payload[ConditionField.PLAYER_COUNTS.value] = sorted(condition.player_counts)
    if condition.require_no_expansions:
        payload[ConditionField.REQUIRE_NO_EXPANSIONS.value] = True
    if condition.include_expansions:
        payload[ConditionField.INCLUDE_EXPANSIONS.value] = sorted(condition.include_expansions)
    if condition.exclude_expansions:
        payload[ConditionField.EXCLUDE_EXPANSIONS.value] = sorted(condition.exclude_expansions)
    if condition.include_modules:
        payload[ConditionField.INCLUDE_MODULES.value] = sorted(condition.include_modules)
    if condition.exclude_modules:
        payload[ConditionField.EXCLUDE_MODULES.value] = sorted(condition.exclude_modules)
    return payload


def strip_reference(condition: StepCondition | None, removed_id: str) -> StepCondition | None:
    """Drop ``removed_id`` from every id list of a condition.

    Used when an expansion or module is deleted so no step keeps pointing at
    a record that no longer exists.
    """

    if condition is None:
        return None

    def _without(values: frozenset[Any] | None) -> frozenset[Any] | None:
        if values is None:
            return None
        return values - {removed_id}

    return build_condition(
        player_counts=condition.player_counts,
        include_expansions=_without(condition.include_expansions),
        exclude_expansions=_without(condition.exclude_expansions),
        include_modules=_without(condition.include_modules),
        exclude_modules=_without(condition.exclude_modules),
        require_no_expansions=condition.require_no_expansions,
    )


def references(condition: StepCondition | None, record_id: ExpansionID | ModuleID) -> bool:
    """Whether ``record_id`` appears anywhere in ``condition``."""

    if condition is None:
        return False
    return any(
        values is not None and record_id in values
        for values in (
            condition.include_expansions,
            condition.exclude_expansions,
            condition.include_modules,
            condition.exclude_modules,
        )
    )
