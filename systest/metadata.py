"""
Metadata lookups used to find injectable fields and application descriptors.

Fields are discovered from class annotations, descriptors by importing every
module below a package and inspecting the classes it defines.
"""

import importlib
import inspect
import logging
import pkgutil
from collections.abc import Iterator
from dataclasses import dataclass
from types import ModuleType
from typing import Annotated, Any, Callable, ClassVar, Final, Protocol, get_args, get_origin

import pytest

from systest.errors import ConfigurationError, Diagnostic
from systest.reporting import LoggingReporter, Reporter

logger = logging.getLogger(__name__)

# pytest.importorskip raises Skipped, which derives from BaseException.
_SCAN_ERRORS = (Exception, pytest.skip.Exception)


@dataclass(frozen=True, slots=True)
class FieldRef:
    """A marked attribute declared in a class body."""

    owner: type
    name: str
    target_type: Any
    is_public: bool
    is_class_level: bool
    is_final: bool

    def __str__(self) -> str:
        return f"{self.owner.__qualname__}.{self.name}"


class MetadataSource(Protocol):
    def find_annotated_fields(self, cls: type, marker: type) -> list[FieldRef]: ...

    def find_all_classes_in_package(
        self,
        package_name: str,
        predicate: Callable[[type], bool],
    ) -> list[type]: ...

    def find_annotation(self, cls: type, marker: str) -> Any | None: ...


def _unwrap_hint(hint: Any) -> tuple[Any, list[Any], bool, bool]:
    """Peel ClassVar/Final/Annotated wrappers in any nesting order."""
    metadata: list[Any] = []
    is_class_level = False
    is_final = False
    while True:
        origin = get_origin(hint)
        if origin is Annotated:
            metadata.extend(hint.__metadata__)
            hint = hint.__origin__
        elif origin is ClassVar or hint is ClassVar:
            is_class_level = True
            args = get_args(hint)
            hint = args[0] if args else Any
        elif origin is Final or hint is Final:
            is_final = True
            args = get_args(hint)
            hint = args[0] if args else Any
        else:
            return hint, metadata, is_class_level, is_final


def _carries_marker(metadata: list[Any], marker: type) -> bool:
    return any(entry is marker or isinstance(entry, marker) for entry in metadata)


def _defined_classes(namespace: Any, module_name: str, outer: str = "") -> Iterator[type]:
    """Classes defined in a module, including classes nested in them."""
    for name, member in list(vars(namespace).items()):
        if not inspect.isclass(member) or member.__module__ != module_name:
            continue
        if outer and member.__qualname__ != f"{outer}.{name}":
            continue
        yield member
        yield from _defined_classes(member, module_name, member.__qualname__)


class ModuleMetadataSource:
    """MetadataSource backed by importlib, pkgutil and class annotations."""

    def __init__(self, reporter: Reporter | None = None) -> None:
        self._reporter = reporter or LoggingReporter(logger)

    def find_annotated_fields(self, cls: type, marker: type) -> list[FieldRef]:
        """Return marked fields of ``cls`` and its bases, base classes first."""
        fields: dict[str, FieldRef] = {}
        for klass in reversed(cls.__mro__):
            if klass is object:
                continue
            try:
                hints = inspect.get_annotations(klass, eval_str=True)
            except NameError as exc:
                raise ConfigurationError(
                    f"Could not evaluate annotations of {klass.__qualname__}: {exc}"
                ) from exc
            for name, hint in hints.items():
                target_type, metadata, is_class_level, is_final = _unwrap_hint(hint)
                if not _carries_marker(metadata, marker):
                    fields.pop(name, None)
                    continue
                fields[name] = FieldRef(
                    owner=klass,
                    name=name,
                    target_type=target_type,
                    is_public=not name.startswith("_"),
                    is_class_level=is_class_level,
                    is_final=is_final,
                )
        return list(fields.values())

    def find_all_classes_in_package(
        self,
        package_name: str,
        predicate: Callable[[type], bool],
    ) -> list[type]:
        """Import ``package_name`` and its submodules and collect matching classes."""
        root = self._import_root(package_name)
        if root is None:
            return []

        modules: list[ModuleType] = [root]
        if hasattr(root, "__path__"):
            modules.extend(self._walk(root))

        found: list[type] = []
        for module in modules:
            for member in _defined_classes(module, module.__name__):
                if member not in found and predicate(member):
                    found.append(member)
        return found

    def find_annotation(self, cls: type, marker: str) -> Any | None:
        """Return a marker value declared directly on ``cls``; subclasses do not inherit it."""
        return vars(cls).get(marker)

    def _walk(self, package: ModuleType) -> Iterator[ModuleType]:
        """Import every submodule below ``package``, skipping the ones that fail."""
        for module_info in pkgutil.iter_modules(package.__path__, prefix=f"{package.__name__}."):
            try:
                module = importlib.import_module(module_info.name)
            except _SCAN_ERRORS as exc:
                self._report_import_failure(module_info.name, exc)
                continue
            yield module
            if module_info.ispkg and hasattr(module, "__path__"):
                yield from self._walk(module)

    def _import_root(self, package_name: str) -> ModuleType | None:
        try:
            return importlib.import_module(package_name)
        except ModuleNotFoundError as exc:
            missing = exc.name or ""
            if package_name == missing or package_name.startswith(f"{missing}."):
                logger.debug("Scan scope does not exist", extra={"scope": package_name})
                return None
            raise

    def _report_import_failure(self, module_name: str, exc: BaseException) -> None:
        self._reporter.warning(
            Diagnostic.SCAN_IMPORT_FAILED,
            f"Skipping module {module_name} during descriptor scan: {type(exc).__name__}: {exc}",
            scope=module_name,
        )
