"""Deployment provisioners that report where the application-under-test runs."""

import logging
from typing import Protocol

import httpx

from systest.errors import ConfigurationError, Diagnostic
from systest.reporting import LoggingReporter, Reporter
from systest.settings import Settings

logger = logging.getLogger(__name__)


class DeploymentProvisioner(Protocol):
    def apply_configuration(self) -> None: ...

    def start_containers(self) -> None: ...

    def get_application_url(self) -> str: ...


class StaticProvisioner:
    """Provisioner for a deployment that is already running at a known URL."""

    def __init__(self, application_url: str, reporter: Reporter | None = None) -> None:
        self._application_url = application_url
        self._reporter = reporter or LoggingReporter(logger)

    @classmethod
    def from_settings(cls, settings: Settings, reporter: Reporter | None = None) -> "StaticProvisioner":
        if not settings.application_url:
            raise ConfigurationError(
                "SYSTEST_APPLICATION_URL is required when no provisioner is given to the test class."
            )
        return cls(settings.application_url, reporter)

    def apply_configuration(self) -> None:
        """Check the configured URL names an http(s) host."""
        try:
            url = httpx.URL(self._application_url)
        except httpx.InvalidURL as exc:
            raise ConfigurationError(f"Invalid application URL: {self._application_url}") from exc
        if url.scheme not in ("http", "https") or not url.host:
            raise ConfigurationError(
                f"Application URL must be an absolute http(s) URL: {self._application_url}"
            )

    def start_containers(self) -> None:
        self._reporter.info(
            Diagnostic.DEPLOYMENT_READY,
            f"Using running deployment at {self._application_url}",
            application_url=self._application_url,
        )

    def get_application_url(self) -> str:
        return self._application_url
