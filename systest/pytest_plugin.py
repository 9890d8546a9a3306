"""
pytest integration.

Enable with ``pytest_plugins = ["systest.pytest_plugin"]`` in a conftest and
mark test classes with ``@pytest.mark.system_test``.
"""

import logging
from collections.abc import Iterator

import pytest

from systest.binder import BoundClients
from systest.lifecycle import build_hook
from systest.provisioning import DeploymentProvisioner, StaticProvisioner
from systest.settings import Settings

logger = logging.getLogger(__name__)

MARKER = "system_test"


def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line(
        "markers",
        f"{MARKER}(provisioner=None): provision the application-under-test and "
        "inject REST clients into the class before its tests run",
    )


@pytest.fixture(scope="class", autouse=True)
def system_test_clients(request: pytest.FixtureRequest) -> Iterator[BoundClients | None]:
    """Bind the REST clients of a ``system_test`` class for the lifetime of the class."""
    marker = request.node.get_closest_marker(MARKER)
    if request.cls is None or marker is None:
        yield None
        return

    settings = Settings.load()
    provisioner: DeploymentProvisioner | None = marker.kwargs.get("provisioner")

    def _provisioner_for(test_class: type) -> DeploymentProvisioner:
        if provisioner is not None:
            return provisioner
        return StaticProvisioner.from_settings(settings)

    clients = build_hook(settings, _provisioner_for).before_test_class(request.cls)
    try:
        yield clients
    finally:
        logger.debug("Closing REST clients", extra={"test_class": request.cls.__qualname__})
        clients.close()
