"""
Typed REST proxies backed by httpx.

A proxy is an instance of a generated subclass of the client class: every
method marked with ``@get``/``@post``/... is replaced by an HTTP call against
the base address the proxy was bound to.
"""

import functools
import inspect
import logging
import re
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any, Callable, Protocol, TypeVar, get_type_hints
from urllib.parse import quote

import httpx

from systest.errors import ConfigurationError, RestClientError
from systest.http_client import create_http_client
from systest.paths import join
from systest.providers import EntityProvider, media_type_of
from systest.rest import Endpoint, endpoints, resource_path
from systest.settings import Settings

logger = logging.getLogger(__name__)

T = TypeVar("T")

BODY_PARAMETER = "body"
_INVOKER_ATTR = "_systest_invoker"
_PLACEHOLDER = re.compile(r"\{(\w+)\}")
_SNIPPET_LIMIT = 512


class ProxyRuntime(Protocol):
    def create(
        self,
        base_address: str,
        interface_type: type[T],
        providers: Sequence[EntityProvider],
    ) -> T: ...


def _join_paths(prefix: str, template: str) -> str:
    if not prefix or not template:
        return prefix or template
    return join(prefix, template)


@dataclass(slots=True)
class _Invoker:
    """Per-proxy state: the HTTP client and providers used for every call."""

    client: httpx.Client
    providers: tuple[EntityProvider, ...]
    base_address: str

    def invoke(
        self,
        func: Callable[..., object],
        endpoint: Endpoint,
        template: str,
        return_type: Any,
        args: tuple[Any, ...],
        kwargs: dict[str, Any],
    ) -> Any:
        signature = inspect.signature(func)
        bound = signature.bind(None, *args, **kwargs)
        bound.apply_defaults()
        arguments = dict(bound.arguments)
        arguments.pop(next(iter(signature.parameters)))

        used: set[str] = set()

        def _fill(match: re.Match[str]) -> str:
            name = match.group(1)
            if arguments.get(name) is None:
                raise ValueError(f"Path parameter '{name}' of {func.__qualname__} must be provided.")
            used.add(name)
            return quote(str(arguments[name]), safe="")

        url = _PLACEHOLDER.sub(_fill, template)
        body = arguments.pop(BODY_PARAMETER, None)
        params = {
            name: value
            for name, value in arguments.items()
            if name not in used and value is not None
        }

        request_kwargs: dict[str, Any] = {}
        if params:
            request_kwargs["params"] = params
        if body is not None:
            content, content_type = self._write(body)
            request_kwargs["content"] = content
            request_kwargs["headers"] = {"Content-Type": content_type}

        response = self._request(endpoint.method, url, **request_kwargs)
        return self._read(response, return_type, endpoint.method, url)

    def _write(self, value: Any) -> tuple[bytes, str]:
        for provider in self.providers:
            if provider.can_write(value):
                return provider.write(value)
        raise RestClientError(f"No provider can write a request body of type {type(value).__name__}.")

    def _read(self, response: httpx.Response, return_type: Any, method: str, path: str) -> Any:
        if return_type is None or return_type is type(None):
            return None
        if return_type is httpx.Response:
            return response
        if not response.content:
            return "" if return_type is str else None

        media_type = media_type_of(response.headers.get("content-type"))
        for provider in self.providers:
            if provider.can_read(return_type, media_type):
                return provider.read(response.content, return_type)
        raise RestClientError(
            f"No provider can read '{media_type}' as {return_type!r} during {method} {path}."
        )

    def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        """Normalized request handler for all outgoing proxy calls."""

        def _transport_error(message: str, *, exc: Exception | None = None) -> RestClientError:
            logger.error(
                message,
                extra={"method": method, "path": path, "base_address": self.base_address},
                exc_info=exc,
            )
            return RestClientError(message)

        try:
            response = self.client.request(method, path, **kwargs)
        except httpx.TimeoutException as exc:
            raise _transport_error(
                f"REST request timed out ({method} {path}).",
                exc=exc,
            ) from exc
        except httpx.RequestError as exc:
            raise _transport_error(
                f"REST request failed ({method} {path}): {exc!s}",
                exc=exc,
            ) from exc

        if response.is_error:
            snippet = response.text.strip()
            if len(snippet) > _SNIPPET_LIMIT:
                snippet = f"{snippet[:_SNIPPET_LIMIT]}..."
            logger.warning(
                "Application responded with error",
                extra={
                    "method": method,
                    "path": path,
                    "status_code": response.status_code,
                    "content": snippet,
                },
            )
            raise RestClientError(
                f"REST error ({response.status_code}) during {method} {path}: {snippet or 'no body provided.'}"
            )

        return response


def _proxy_method(
    interface_type: type,
    func: Callable[..., object],
    endpoint: Endpoint,
) -> Callable[..., Any]:
    try:
        return_type = get_type_hints(func).get("return", Any)
    except NameError as exc:
        raise ConfigurationError(
            f"Could not evaluate the return annotation of {func.__qualname__}: {exc}"
        ) from exc
    template = _join_paths(resource_path(interface_type), endpoint.path)

    @functools.wraps(func)
    def call(self: Any, *args: Any, **kwargs: Any) -> Any:
        invoker: _Invoker = getattr(self, _INVOKER_ATTR)
        return invoker.invoke(func, endpoint, template, return_type, args, kwargs)

    return call


def _invoker_of(proxy: object) -> _Invoker:
    invoker = getattr(proxy, _INVOKER_ATTR, None)
    if not isinstance(invoker, _Invoker):
        raise TypeError(f"{proxy!r} is not a REST client proxy.")
    return invoker


def bound_address(proxy: object) -> str:
    """Base address a proxy sends its requests to."""
    return _invoker_of(proxy).base_address


def close_client(proxy: object) -> None:
    """Release the HTTP resources held by a proxy."""
    _invoker_of(proxy).client.close()


class HttpxProxyRuntime:
    """ProxyRuntime that turns endpoint declarations into httpx calls."""

    def __init__(
        self,
        *,
        timeout: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._timeout = timeout
        self._transport = transport

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        transport: httpx.BaseTransport | None = None,
    ) -> "HttpxProxyRuntime":
        return cls(timeout=settings.request_timeout, transport=transport)

    def create(
        self,
        base_address: str,
        interface_type: type[T],
        providers: Sequence[EntityProvider],
    ) -> T:
        if not isinstance(interface_type, type):
            raise ConfigurationError(f"REST client type must be a class, got {interface_type!r}.")
        declared = endpoints(interface_type)
        if not declared:
            raise ConfigurationError(f"{interface_type.__qualname__} declares no REST endpoints.")

        namespace: dict[str, Any] = {
            name: _proxy_method(interface_type, func, endpoint)
            for name, (func, endpoint) in declared.items()
        }
        namespace["__module__"] = interface_type.__module__
        namespace["__repr__"] = lambda self: (
            f"<{interface_type.__qualname__} proxy bound to {bound_address(self)}>"
        )
        proxy_type = type(f"{interface_type.__name__}Proxy", (interface_type,), namespace)

        proxy = object.__new__(proxy_type)
        invoker = _Invoker(
            client=create_http_client(base_address, timeout=self._timeout, transport=self._transport),
            providers=tuple(providers),
            base_address=base_address,
        )
        object.__setattr__(proxy, _INVOKER_ATTR, invoker)
        return proxy
