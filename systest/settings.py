"""Environment-driven configuration utilities for system tests."""

import os
from dataclasses import dataclass

from dotenv import load_dotenv


@dataclass(frozen=True, slots=True)
class Settings:
    """Container for harness configuration."""

    application_url: str | None = None
    request_timeout: float = 30.0
    scan_packages: tuple[str, ...] = ()

    @classmethod
    def load(cls) -> "Settings":
        """
        Load configuration from environment variables.

        Python-dotenv is used so a local .env file can point the tests at a
        running deployment without exporting variables globally.
        """
        load_dotenv()

        application_url = os.getenv("SYSTEST_APPLICATION_URL", "").strip() or None

        request_timeout_raw = os.getenv("SYSTEST_REQUEST_TIMEOUT", "").strip() or "30"
        try:
            request_timeout = float(request_timeout_raw)
        except ValueError as exc:
            raise ValueError("SYSTEST_REQUEST_TIMEOUT must be a numeric value.") from exc
        if request_timeout <= 0:
            raise ValueError("SYSTEST_REQUEST_TIMEOUT must be greater than zero.")

        scan_packages_raw = os.getenv("SYSTEST_SCAN_PACKAGES", "")
        scan_packages = tuple(
            package.strip() for package in scan_packages_raw.split(",") if package.strip()
        )

        return cls(
            application_url=application_url,
            request_timeout=request_timeout,
            scan_packages=scan_packages,
        )
