"""Exception types raised while parsing and running a playbook."""

from __future__ import annotations

from typing import Any


class PlaybookError(Exception):
    """Base class for every fatal playbook error."""


class PlaybookSyntaxError(PlaybookError):
    """Raised when a record is malformed (not merely incomplete)."""


class UnknownFieldError(PlaybookError):
    """Raised when a record names a field the action does not have."""

    def __init__(self, action: Any, field: str, value: str, kind: str | None = None) -> None:
        self.action = action
        self.field = field
        self.value = value
        self.kind = kind or action.kind
        # Unknown kinds resolve to noop; name both so the typo stays visible.
        label = repr(self.kind)
        if self.kind.lower() != action.kind:
            label = f"{self.kind!r} ({action.kind})"
        super().__init__(
            f"Invalid field given for {label} action {str(action)!r}: "
            f"{field}={value!r}"
        )


class PlaybookInputError(PlaybookError):
    """Raised when the playbook source cannot be read or decoded."""


class UnknownActionError(PlaybookError):
    """Raised by a strict registry for an unrecognized action kind."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Unknown action {name!r}")


class DurationError(PlaybookError, ValueError):
    """Raised when a timeout field is not a valid duration string."""


class ComparisonError(PlaybookError):
    """Raised by compare when the element text does not match."""


class ActionFailed(PlaybookError):
    """Raised by the runner when an action fails or times out.

    The underlying error is chained as ``__cause__``.
    """

    def __init__(self, step: Any, reason: str) -> None:
        self.step = step
        self.reason = reason
        super().__init__(f"{step.action} failed: {reason}")


class RunCancelled(PlaybookError):
    """Raised when the run is cancelled between two actions."""
