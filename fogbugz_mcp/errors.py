"""Exception hierarchy for the FogBugz integration."""

from __future__ import annotations


class FogBugzError(Exception):
    """Base class for all FogBugz integration errors."""


class ConfigurationError(FogBugzError):
    """Raised when the base URL or API token is missing or invalid.

    Fatal at startup and never retried.
    """


class TransportError(FogBugzError):
    """Raised when a request fails at the HTTP level or the service
    envelope carries a non-empty error list.

    Attributes:
        status: HTTP status code, or None for network failures and
            service-level errors returned with a 2xx response
        service_errors: Error messages reported by the service (or the
            raw transport error message when no body was available)
        command: The API command that failed, when known
    """

    def __init__(
        self,
        service_errors: list[str] | None = None,
        status: int | None = None,
        command: str | None = None,
    ):
        self.status = status
        self.service_errors = list(service_errors or [])
        self.command = command
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        detail = ", ".join(self.service_errors) or "Unknown error"
        if self.status is not None:
            return f"FogBugz API Error: {self.status} - {detail}"
        return f"FogBugz API Error: {detail}"


class DependencyOrderError(FogBugzError):
    """Raised when a resource is initialized before the resources it requires,
    or when the declared dependency graph is unusable (unknown name, cycle).

    This is a programming error: it fails immediately and is never retried.
    """


class ValidationWarning(UserWarning):
    """Issued when malformed service records are filtered out."""
