"""Declarations that describe a REST resource as a Python class."""

import inspect
from dataclasses import dataclass
from typing import Callable, TypeVar

ENDPOINT_ATTR = "__systest_endpoint__"
RESOURCE_PATH_ATTR = "__systest_resource_path__"

_F = TypeVar("_F", bound=Callable[..., object])
_T = TypeVar("_T", bound=type)


@dataclass(frozen=True, slots=True)
class Endpoint:
    """HTTP method and path template attached to a client method."""

    method: str
    path: str = ""


def path(value: str) -> Callable[[_T], _T]:
    """Set the path prefix shared by every endpoint of a client class."""

    def decorator(cls: _T) -> _T:
        setattr(cls, RESOURCE_PATH_ATTR, value)
        return cls

    return decorator


def _endpoint(method: str) -> Callable[[str], Callable[[_F], _F]]:
    def factory(template: str = "") -> Callable[[_F], _F]:
        def decorator(func: _F) -> _F:
            setattr(func, ENDPOINT_ATTR, Endpoint(method, template))
            return func

        return decorator

    factory.__name__ = method.lower()
    factory.__doc__ = f"Mark a client method as a {method} request to ``template``."
    return factory


get = _endpoint("GET")
post = _endpoint("POST")
put = _endpoint("PUT")
patch = _endpoint("PATCH")
delete = _endpoint("DELETE")


def resource_path(cls: type) -> str:
    return getattr(cls, RESOURCE_PATH_ATTR, "")


def endpoints(cls: type) -> dict[str, tuple[Callable[..., object], Endpoint]]:
    """Collect every endpoint method declared on ``cls`` or its bases."""
    found: dict[str, tuple[Callable[..., object], Endpoint]] = {}
    for name, member in inspect.getmembers(cls, inspect.isfunction):
        endpoint = getattr(member, ENDPOINT_ATTR, None)
        if endpoint is not None:
            found[name] = (member, endpoint)
    return found
