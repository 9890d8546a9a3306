"""
Per-class setup for system tests.

The hook starts the deployment through a provisioner and injects REST clients
into the test class before any of its tests run.
"""

import logging
from typing import Callable

import httpx

from systest.binder import BoundClients, FieldBinder
from systest.client import ClientFactory
from systest.provisioning import DeploymentProvisioner
from systest.reporting import LoggingReporter, Reporter
from systest.settings import Settings

logger = logging.getLogger(__name__)

ProvisionerFactory = Callable[[type], DeploymentProvisioner]


class SystemTestHook:
    """Runs provisioning, resolution, and binding once per test class."""

    def __init__(self, provisioner_factory: ProvisionerFactory, binder: FieldBinder) -> None:
        self._provisioner_factory = provisioner_factory
        self._binder = binder

    def before_test_class(self, test_class: type) -> BoundClients:
        """Provision the deployment and bind its clients into ``test_class``."""
        logger.debug("Preparing system test class", extra={"test_class": test_class.__qualname__})
        provisioner = self._provisioner_factory(test_class)
        provisioner.apply_configuration()
        provisioner.start_containers()
        application_url = provisioner.get_application_url()
        return self._binder.bind(test_class, application_url)


def build_hook(
    settings: Settings,
    provisioner_factory: ProvisionerFactory,
    reporter: Reporter | None = None,
    transport: httpx.BaseTransport | None = None,
) -> SystemTestHook:
    """Factory that wires the default collaborators from Settings."""
    reporter = reporter or LoggingReporter(logger)
    factory = ClientFactory.from_settings(settings, reporter=reporter, transport=transport)
    return SystemTestHook(provisioner_factory, FieldBinder(factory, reporter=reporter))
