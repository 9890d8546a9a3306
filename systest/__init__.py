"""
REST-client injection for system tests.

Resolve where the application-under-test is served, build typed proxies for
its resources, and inject them into pytest test classes.
"""

from systest.annotations import Application, Inject, application_path
from systest.binder import BoundClients, FieldBinder
from systest.client import ClientFactory
from systest.errors import ConfigurationError, NullArgumentError, RestClientError, SystemTestError
from systest.lifecycle import SystemTestHook, build_hook
from systest.paths import PathResolver, join
from systest.provisioning import DeploymentProvisioner, StaticProvisioner
from systest.proxy import HttpxProxyRuntime, bound_address, close_client
from systest.rest import delete, get, patch, path, post, put
from systest.settings import Settings

__all__ = [
    "Application",
    "BoundClients",
    "ClientFactory",
    "ConfigurationError",
    "DeploymentProvisioner",
    "FieldBinder",
    "HttpxProxyRuntime",
    "Inject",
    "NullArgumentError",
    "PathResolver",
    "RestClientError",
    "Settings",
    "StaticProvisioner",
    "SystemTestError",
    "SystemTestHook",
    "application_path",
    "bound_address",
    "build_hook",
    "close_client",
    "delete",
    "get",
    "join",
    "patch",
    "path",
    "post",
    "put",
]
