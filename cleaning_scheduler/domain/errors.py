"""
Error taxonomy for the scheduling core.

Pure computation (deriver, relocation validator) raises ValidationError
synchronously.  Store adapters translate driver failures into StoreError,
which callers treat as retryable.  "Already present" and "not draggable"
are ordinary return values, not exceptions.
"""


class SchedulingError(Exception):
    """Base class for every error raised by the scheduling core."""


class ValidationError(SchedulingError):
    """Malformed input, or a relocation target outside the legal window."""

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


class InvalidLinkError(ValidationError):
    """An availability link token that is malformed, tampered with, or expired."""


class NotFoundError(SchedulingError):
    """A referenced task, cleaner or booking does not exist."""

    def __init__(self, kind: str, key: str):
        super().__init__(f"{kind} not found: {key}")
        self.kind = kind
        self.key = key


class StoreError(SchedulingError):
    """Transient store failure (timeout, unavailable, locked)."""

    retryable = True
