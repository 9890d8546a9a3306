"""Resolution of the base address a REST client should be bound to."""

import logging
import sys
from collections.abc import Sequence

from systest.annotations import APPLICATION_PATH_ATTR, Application, canonical_name
from systest.errors import Diagnostic, NullArgumentError
from systest.metadata import MetadataSource, ModuleMetadataSource
from systest.reporting import LoggingReporter, Reporter

logger = logging.getLogger(__name__)

DEFAULT_APPLICATION_PATH = "/"
WIDENED_SCOPE_DEPTH = 3


def join(first: str, second: str) -> str:
    """Join two path fragments with exactly one separator at the boundary."""
    if first.endswith("/") and second.startswith("/"):
        return first + second[1:]
    if first.endswith("/") or second.startswith("/"):
        return first + second
    return f"{first}/{second}"


def package_of(resource_type: type) -> str:
    """Package containing the module that defines ``resource_type``."""
    module_name = resource_type.__module__
    module = sys.modules.get(module_name)
    package = getattr(module, "__package__", None) or module_name.rpartition(".")[0]
    return package or module_name


def widened_scope(package: str) -> str | None:
    """The first three segments of ``package``, or None when that would not widen it."""
    segments = package.split(".")
    if len(segments) <= WIDENED_SCOPE_DEPTH:
        return None
    return ".".join(segments[:WIDENED_SCOPE_DEPTH])


class PathResolver:
    """Derives the base address of the application-under-test for a client type."""

    def __init__(
        self,
        metadata: MetadataSource | None = None,
        reporter: Reporter | None = None,
        *,
        scan_packages: Sequence[str] = (),
    ) -> None:
        self._reporter = reporter or LoggingReporter(logger)
        self._metadata = metadata or ModuleMetadataSource(self._reporter)
        self._scan_packages = tuple(scan_packages)

    def resolve(self, resource_type: type, context_root: str) -> str:
        """Return ``context_root`` joined with the discovered application root path."""
        if resource_type is None:
            raise NullArgumentError("Supplied 'resource_type' must not be null")
        if context_root is None:
            raise NullArgumentError("Supplied 'context_root' must not be null")

        candidates = self._find_candidates(resource_type)
        if not candidates:
            self._reporter.info(
                Diagnostic.NO_APPLICATION_FOUND,
                f"No Application subclass with an application path found for {resource_type.__qualname__}. "
                f"Defaulting application path to '{DEFAULT_APPLICATION_PATH}'",
                resource_type=canonical_name(resource_type),
            )
            return join(context_root, DEFAULT_APPLICATION_PATH)

        candidates = sorted(candidates, key=canonical_name)
        selected = candidates[0]
        if len(candidates) > 1:
            names = [canonical_name(candidate) for candidate in candidates]
            self._reporter.warning(
                Diagnostic.AMBIGUOUS_APPLICATION,
                f"Found multiple Application subclasses: {names}. "
                f"Using the first one ({canonical_name(selected)})",
                candidates=names,
                selected=canonical_name(selected),
            )

        application_path = self._metadata.find_annotation(selected, APPLICATION_PATH_ATTR)
        return join(context_root, application_path)

    def _find_candidates(self, resource_type: type) -> list[type]:
        if self._scan_packages:
            found: list[type] = []
            for package in self._scan_packages:
                for candidate in self._scan(package):
                    if candidate not in found:
                        found.append(candidate)
            return found

        package = package_of(resource_type)
        found = self._scan(package)
        if not found:
            ancestor = widened_scope(package)
            if ancestor is not None:
                found = self._scan(ancestor)
        return found

    def _scan(self, package: str) -> list[type]:
        logger.debug("Scanning for application descriptors", extra={"scope": package})
        return self._metadata.find_all_classes_in_package(package, self._is_descriptor)

    def _is_descriptor(self, cls: type) -> bool:
        return (
            issubclass(cls, Application)
            and self._metadata.find_annotation(cls, APPLICATION_PATH_ATTR) is not None
        )
