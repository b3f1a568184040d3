"""Error taxonomy for the setup tools.

``LoadError`` and ``PersistError`` are recovered by callers resynchronising
from storage; ``ValidationError`` stops malformed admin input before any
write.  Storage adapters raise ``StorageError`` (or ``RecordNotFoundError``)
and services translate those into the first two.
"""

from __future__ import annotations

import json
from collections.abc import Sequence


class SetupError(Exception):
    """Base class for every error raised by this package."""


class StorageError(SetupError):
    """A storage adapter could not complete a read or write."""


class RecordNotFoundError(StorageError):
    """The requested record does not exist."""


class LoadError(SetupError):
    """A catalog fetch failed.

    ``fatal=False`` marks a recovered load, e.g. an unknown game id that was
    replaced by the default game.  Such errors are reported, not raised.
    """

    def __init__(self, message: str, *, game_id: str | None = None, fatal: bool = True) -> None:
        super().__init__(message)
        self.game_id = game_id
        self.fatal = fatal


class PersistError(SetupError):
    """A reorder or CRUD write failed; local state must be reloaded."""

    def __init__(self, message: str, *, failed_step_ids: Sequence[str] = ()) -> None:
        super().__init__(message)
        self.failed_step_ids = list(failed_step_ids)


class ValidationError(SetupError):
    """Admin form input was malformed."""

    def __init__(self, message: str, *, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


GENERIC_MESSAGE = "Something went wrong. Please try again."

# Substring checks applied in order to the lowercased raw message.
_SANITISED_MESSAGES: tuple[tuple[tuple[str, ...], str], ...] = (
    (("duplicate", "unique"), "A record with that identifier already exists."),
    (("permission", "policy", "rls"), "You do not have permission to perform this action."),
    (("not found", "no rows"), "The requested record was not found."),
    (
        ("foreign key", "violates"),
        "This record is referenced by other data and cannot be modified.",
    ),
    (
        ("network", "fetch"),
        "A network error occurred. Please check your connection and try again.",
    ),
)


def _raw_message(error: object) -> str:
    if isinstance(error, BaseException):
        return str(error) or type(error).__name__
    if isinstance(error, str):
        return error
    if isinstance(error, dict):
        parts = [
            value
            for key in ("message", "details", "hint")
            if isinstance(value := error.get(key), str)
        ]
        if parts:
            return " ".join(parts)
        try:
            return json.dumps(error)
        except (TypeError, ValueError):
            return "Unexpected error."
    return "Unexpected error."


def safe_error_message(error: object, *, debug: bool = False) -> str:
    """Text suitable for a user-visible status line.

    In debug mode the raw message is returned.  Otherwise well-known failure
    classes are mapped to fixed wording so storage internals never leak.
    """

    raw = _raw_message(error)
    if debug:
        return raw
    if isinstance(error, ValidationError):
        return raw
    lower = raw.lower()
    for needles, message in _SANITISED_MESSAGES:
        if any(needle in lower for needle in needles):
            return message
    return GENERIC_MESSAGE
