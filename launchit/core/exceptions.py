"""Exception hierarchy shared by services and the API layer."""
from __future__ import annotations


class LaunchitError(Exception):
    """Base class for every error raised by launchit services."""

    status_code = 400

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class GatewayError(LaunchitError):
    """The data service rejected or failed a row operation."""

    status_code = 502


class StorageError(GatewayError):
    """An object upload failed."""


class ProjectAccessError(LaunchitError):
    """The project does not exist or is not owned by the caller."""

    status_code = 404


class InvalidStateError(LaunchitError):
    """A command was issued in a session state that does not accept it."""

    status_code = 409


class AIEnrichmentError(LaunchitError):
    """The enrichment service returned an error that must not be retried."""

    status_code = 502
    retryable = False


class AITransientError(AIEnrichmentError):
    """Network, HTTP or upstream model failure; safe to retry."""

    retryable = True


class AIPartialError(AIEnrichmentError):
    """Text was generated but image derivation failed."""
