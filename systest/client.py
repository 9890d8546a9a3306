"""Factory that builds REST client proxies for the application-under-test."""

import logging
from collections.abc import Sequence
from typing import TypeVar

import httpx

from systest.errors import Diagnostic, NullArgumentError
from systest.paths import PathResolver
from systest.providers import DEFAULT_PROVIDERS, EntityProvider
from systest.proxy import HttpxProxyRuntime, ProxyRuntime
from systest.reporting import LoggingReporter, Reporter
from systest.settings import Settings

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ClientFactory:
    """Resolves base addresses and binds typed proxies to them."""

    def __init__(
        self,
        resolver: PathResolver,
        runtime: ProxyRuntime,
        reporter: Reporter | None = None,
        providers: Sequence[EntityProvider] = DEFAULT_PROVIDERS,
    ) -> None:
        self._resolver = resolver
        self._runtime = runtime
        self._reporter = reporter or LoggingReporter(logger)
        self._providers = tuple(providers)

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        reporter: Reporter | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> "ClientFactory":
        """Factory that wires the default resolver and httpx runtime from Settings."""
        reporter = reporter or LoggingReporter(logger)
        return cls(
            resolver=PathResolver(reporter=reporter, scan_packages=settings.scan_packages),
            runtime=HttpxProxyRuntime.from_settings(settings, transport=transport),
            reporter=reporter,
        )

    def create(self, client_type: type[T], context_root: str) -> T:
        """Resolve the application path for ``client_type`` and build a proxy for it."""
        base_address = self._resolver.resolve(client_type, context_root)
        return self.build(client_type, base_address)

    def build(self, client_type: type[T], base_address: str) -> T:
        """Build a proxy of ``client_type`` bound to ``base_address``."""
        if client_type is None:
            raise NullArgumentError("Supplied 'client_type' must not be null")
        if base_address is None:
            raise NullArgumentError("Supplied 'base_address' must not be null")

        providers = list(self._providers)
        self._reporter.info(
            Diagnostic.CLIENT_BUILT,
            f"Building rest client for {client_type.__qualname__} with base path: {base_address} "
            f"and providers: {providers}",
            client_type=client_type.__qualname__,
            base_address=base_address,
        )
        return self._runtime.create(base_address, client_type, providers)
