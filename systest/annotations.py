"""Markers declared by applications and test classes."""

from typing import Callable, TypeVar

APPLICATION_PATH_ATTR = "__systest_application_path__"

_T = TypeVar("_T", bound=type)


class Application:
    """Base class for descriptors that define the routing root of an application."""


class Inject:
    """
    Field marker requesting a REST client.

    Used as ``ClassVar[Annotated[GreetingClient, Inject]]``; both the class and
    an instance of it are accepted as the metadata entry.
    """


def application_path(value: str) -> Callable[[_T], _T]:
    """Record the root path an Application subclass is served under."""
    if not isinstance(value, str):
        raise TypeError("application_path value must be a string.")

    def decorator(cls: _T) -> _T:
        setattr(cls, APPLICATION_PATH_ATTR, value)
        return cls

    return decorator


def canonical_name(cls: type) -> str:
    return f"{cls.__module__}.{cls.__qualname__}"
