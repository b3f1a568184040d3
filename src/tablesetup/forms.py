"""Admin form encoding.

The admin step form edits multi-valued condition fields as comma separated
text.  That is purely a form concern: these helpers turn form strings into
a :class:`~tablesetup.domain.models.StepDraft` (raising
:class:`~tablesetup.errors.ValidationError` before anything is written) and
turn a stored step back into form strings for editing.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Sequence

from pydantic import BaseModel

from tablesetup.domain.conditions import build_condition
from tablesetup.domain.models import Step, StepDraft, Visual
from tablesetup.domain.ordering import next_step_order
from tablesetup.errors import ValidationError


def normalize_text(value: str) -> str:
    return value.strip()


def optional_string(value: str | None) -> str | None:
    if value is None:
        return None
    trimmed = value.strip()
    return trimmed or None


def split_csv(value: str) -> list[str]:
    """``"a, b,,c"`` -> ``["a", "b", "c"]``."""

    return [entry.strip() for entry in value.split(",") if entry.strip()]


def split_number_csv(value: str) -> list[int]:
    """Like :func:`split_csv` but keeps only integer entries."""

    numbers: list[int] = []
    for entry in split_csv(value):
        try:
            numbers.append(int(entry))
        except ValueError:
            continue
    return numbers


def join_csv(values: Iterable[str | int] | None) -> str:
    if not values:
        return ""
    return ", ".join(str(value) for value in values)


def parse_required_number(value: str, *, field: str = "order") -> int:
    """Parse a required positive integer form field.

    Raises:
        ValidationError: If the value is blank, not a whole number, or below 1.
    """

    text = value.strip()
    if not text:
        raise ValidationError(f"Step {field} must be a number.", field=field)
    try:
        number = float(text)
    except ValueError as exc:
        raise ValidationError(f"Step {field} must be a number.", field=field) from exc
    if not math.isfinite(number) or not number.is_integer():
        raise ValidationError(f"Step {field} must be a whole number.", field=field)
    if number < 1:
        raise ValidationError(f"Step {field} must be at least 1.", field=field)
    return int(number)


class StepForm(BaseModel):
    """Raw string values of the admin step form."""

    step_order: str = ""
    text: str = ""
    visual_asset: str = ""
    visual_animation: str = ""
    player_counts: str = ""
    include_expansions: str = ""
    exclude_expansions: str = ""
    include_modules: str = ""
    exclude_modules: str = ""
    require_no_expansions: bool = False

    def to_draft(self) -> StepDraft:
        """Validate the form and build a storage payload."""

        order = parse_required_number(self.step_order)
        text = normalize_text(self.text)
        if not text:
            raise ValidationError("Step text is required.", field="text")

        asset = optional_string(self.visual_asset)
        animation = optional_string(self.visual_animation)
        visual = Visual(asset=asset or "", animation=animation or "") if asset or animation else None

        condition = build_condition(
            player_counts=split_number_csv(self.player_counts),
            include_expansions=split_csv(self.include_expansions),
            exclude_expansions=split_csv(self.exclude_expansions),
            include_modules=split_csv(self.include_modules),
            exclude_modules=split_csv(self.exclude_modules),
            require_no_expansions=self.require_no_expansions,
        )
        return StepDraft(order=order, text=text, visual=visual, condition=condition)

    @classmethod
    def from_step(cls, step: Step) -> StepForm:
        """Prefill the form for editing ``step``."""

        condition = step.condition
        visual = step.visual or Visual()

        def _joined(values: Iterable[str | int] | None) -> str:
            return join_csv(sorted(values)) if values else ""

        return cls(
            step_order=str(step.order),
            text=step.text,
            visual_asset=visual.asset,
            visual_animation=visual.animation,
            player_counts=_joined(condition.player_counts if condition else None),
            include_expansions=_joined(condition.include_expansions if condition else None),
            exclude_expansions=_joined(condition.exclude_expansions if condition else None),
            include_modules=_joined(condition.include_modules if condition else None),
            exclude_modules=_joined(condition.exclude_modules if condition else None),
            require_no_expansions=bool(condition and condition.require_no_expansions),
        )


def new_step_form(steps: Sequence[Step]) -> StepForm:
    """Empty form whose order follows the current maximum."""

    return StepForm(step_order=str(next_step_order(steps)))
