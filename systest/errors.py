"""Exception hierarchy and diagnostic event names."""

from enum import Enum

__all__ = [
    "SystemTestError",
    "NullArgumentError",
    "ConfigurationError",
    "RestClientError",
    "Diagnostic",
]


class SystemTestError(Exception):
    """Root exception for all systest errors."""


class NullArgumentError(SystemTestError, ValueError):
    """Raised when a required argument is missing."""


class ConfigurationError(SystemTestError):
    """Raised when a test class or provisioner is configured incorrectly."""

    def __init__(self, message: str, *, field_name: str | None = None) -> None:
        super().__init__(message)
        self.field_name = field_name


class RestClientError(SystemTestError):
    """Represents failures when a proxy talks to the application-under-test."""


class Diagnostic(str, Enum):
    """Event names for non-fatal conditions surfaced through a reporter."""

    AMBIGUOUS_APPLICATION = "ambiguous_application"
    NO_APPLICATION_FOUND = "no_application_found"
    CLIENT_BUILT = "client_built"
    CLIENT_INJECTED = "client_injected"
    DEPLOYMENT_READY = "deployment_ready"
    SCAN_IMPORT_FAILED = "scan_import_failed"
