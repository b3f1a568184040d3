"""Pure setup-step domain.

This package holds everything that runs without touching storage:

* Dataclasses describing games, expansions, modules and steps (see :mod:`models`).
* Condition parsing and serialisation (see :mod:`conditions`).
* The step resolver (see :mod:`resolver`).
* The selection state with its cascading module cleanup (see :mod:`selection`).
* Ordering helpers used by the admin reorder flow (see :mod:`ordering`).
"""

from . import conditions, enums, models, ordering, resolver, selection
from .ordering import next_step_order, reorder
from .resolver import condition_matches, resolve_steps
from .selection import Selection, SelectionState

__all__ = [
    "Selection",
    "SelectionState",
    "condition_matches",
    "conditions",
    "enums",
    "models",
    "next_step_order",
    "ordering",
    "reorder",
    "resolve_steps",
    "resolver",
    "selection",
]
