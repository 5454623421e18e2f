"""Domain error taxonomy shared by the store, services and API layers."""

from __future__ import annotations

import enum


class PawLinkError(Exception):
    """Base class for every failure the rescue core reports."""

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message


class AuthorizationError(PawLinkError):
    """Actor role is not allowed to view or act on reports."""


class ValidationError(PawLinkError):
    """Required input is missing or malformed (e.g. pickup date/time)."""

    def __init__(self, message: str = "", field: str | None = None):
        super().__init__(message)
        self.field = field


class NotFoundError(PawLinkError):
    """Target record does not exist (or is not visible to the actor)."""


class StoreErrorKind(str, enum.Enum):
    NOT_FOUND = "not_found"
    CONSTRAINT_VIOLATION = "constraint_violation"
    CONNECTION_FAILURE = "connection_failure"
    TIMEOUT = "timeout"


class StoreError(PawLinkError):
    """Transport, connection or constraint failure in the record store."""

    def __init__(self, message: str = "", kind: StoreErrorKind = StoreErrorKind.CONNECTION_FAILURE):
        super().__init__(message)
        self.kind = kind


class NotificationError(PawLinkError):
    """A notification could not be written. Logged, never surfaced."""


class LifecycleError(PawLinkError):
    """Transition rejected by the report state machine."""


class InvalidTransitionError(LifecycleError):
    """Report is already in a terminal state."""


class TransitionInFlightError(LifecycleError):
    """Another transition on the same report has not completed yet."""
