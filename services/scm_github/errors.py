"""
Exception taxonomy for the SCM adapter.

Local errors (identity, webhook, file type) are raised synchronously by the
codec and normalizer. Provider errors are raised from the awaited call once
the invoker gives up on them.
"""


class ScmError(Exception):
    """Base exception for SCM adapter operations."""


class InvalidIdentityFormat(ScmError):
    """Raised when a remote URL or canonical identity cannot be parsed."""

    def __init__(self, value: str) -> None:
        self.value = value
        super().__init__(f"Invalid scmUrl: {value}")


class UnsupportedEvent(ScmError):
    """Raised when a webhook carries an event type we do not understand."""

    def __init__(self, event: str | None) -> None:
        self.event = event
        super().__init__(f"Event {event} not supported")


class InvalidEventPayload(ScmError):
    """Raised when a supported webhook is missing a required field."""

    def __init__(self, event: str, field: str) -> None:
        self.event = event
        self.field = field
        super().__init__(f"Event {event} payload is missing {field}")


class NotAFile(ScmError):
    """Raised when a content lookup resolves to something other than a file."""

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"Path ({path}) does not point to file")


class ProviderError(ScmError):
    """Raised when the provider API call fails.

    ``status_code`` is None for transport-level failures. Those, 5xx and
    429 responses are considered transient.
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)

    @property
    def retryable(self) -> bool:
        if self.status_code is None:
            return True
        return self.status_code >= 500 or self.status_code == 429


class ProviderTimeout(ProviderError):
    """Raised when a single provider attempt exceeds its timeout."""


class BreakerOpen(ScmError):
    """Raised without contacting the provider while the breaker is open."""

    def __init__(self, retry_in: float) -> None:
        self.retry_in = retry_in
        super().__init__(f"Circuit breaker is open, retry in {retry_in:.1f}s")
