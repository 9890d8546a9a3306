"""Injection of REST client proxies into test class fields."""

import logging
from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from typing import Any

from systest.annotations import Inject
from systest.client import ClientFactory
from systest.errors import ConfigurationError, Diagnostic
from systest.metadata import FieldRef, MetadataSource, ModuleMetadataSource
from systest.proxy import close_client
from systest.reporting import LoggingReporter, Reporter

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class FieldBinding:
    field: FieldRef
    proxy: Any


@dataclass(frozen=True)
class BoundClients(Mapping[str, Any]):
    """Proxies bound during one bind pass, keyed by field name."""

    test_class: type
    bindings: tuple[FieldBinding, ...] = ()

    def __getitem__(self, name: str) -> Any:
        for binding in self.bindings:
            if binding.field.name == name:
                return binding.proxy
        raise KeyError(name)

    def __iter__(self) -> Iterator[str]:
        return (binding.field.name for binding in self.bindings)

    def __len__(self) -> int:
        return len(self.bindings)

    def close(self) -> None:
        """Release the HTTP resources of every bound proxy."""
        for binding in self.bindings:
            close_client(binding.proxy)


def _validate(field_ref: FieldRef) -> None:
    if not field_ref.is_public or not field_ref.is_class_level or field_ref.is_final:
        raise ConfigurationError(
            f"REST-client field must be public, ClassVar, and non-Final: {field_ref.name}",
            field_name=field_ref.name,
        )


class FieldBinder:
    """Finds ``Inject``-marked fields on a test class and assigns proxies to them."""

    def __init__(
        self,
        factory: ClientFactory,
        metadata: MetadataSource | None = None,
        reporter: Reporter | None = None,
    ) -> None:
        self._factory = factory
        self._reporter = reporter or LoggingReporter(logger)
        self._metadata = metadata or ModuleMetadataSource(self._reporter)

    def bind(self, test_class: type, base_address: str) -> BoundClients:
        """
        Inject a proxy into every marked field of ``test_class``.

        All fields are validated and all proxies built before any attribute
        is assigned, so a failure leaves the class untouched.
        """
        fields = self._metadata.find_annotated_fields(test_class, Inject)
        if not fields:
            return BoundClients(test_class)

        for field_ref in fields:
            _validate(field_ref)

        bindings: list[FieldBinding] = []
        try:
            for field_ref in fields:
                proxy = self._factory.create(field_ref.target_type, base_address)
                bindings.append(FieldBinding(field_ref, proxy))
        except Exception:
            BoundClients(test_class, tuple(bindings)).close()
            raise

        for binding in bindings:
            setattr(test_class, binding.field.name, binding.proxy)
            self._reporter.debug(
                Diagnostic.CLIENT_INJECTED,
                f"Injecting rest client for {binding.field}",
                field=binding.field.name,
                test_class=test_class.__qualname__,
            )
        return BoundClients(test_class, tuple(bindings))
