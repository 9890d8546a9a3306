import pytest

from systest import Application, application_path
from systest.errors import Diagnostic, NullArgumentError
from systest.paths import PathResolver, join, package_of, widened_scope
from tests.sample_apps.broken.client import BrokenClient
from tests.sample_apps.empty.client import StatusClient
from tests.sample_apps.inner.client import InnerClient
from tests.sample_apps.multi.client import InventoryClient
from tests.sample_apps.nested.deep.client import NestedClient
from tests.sample_apps.single.client import GreetingClient


@application_path("/beta")
class BetaApplication(Application):
    pass


@application_path("/alpha")
class AlphaApplication(Application):
    pass


class FakeMetadata:
    """Serves fixed classes per package and records the scopes scanned."""

    def __init__(self, classes_by_package: dict[str, list[type]]) -> None:
        self._classes = classes_by_package
        self.scanned: list[str] = []

    def find_annotated_fields(self, cls, marker):
        return []

    def find_all_classes_in_package(self, package_name, predicate):
        self.scanned.append(package_name)
        return [cls for cls in self._classes.get(package_name, []) if predicate(cls)]

    def find_annotation(self, cls, marker):
        return vars(cls).get(marker)


def _type_in(module: str) -> type:
    return type("OrderClient", (), {"__module__": module})


@pytest.mark.parametrize(
    ("first", "second"),
    [
        ("/app/", "/api"),
        ("/app", "api"),
        ("/app/", "api"),
        ("/app", "/api"),
    ],
)
def test_join_leaves_single_separator(first: str, second: str) -> None:
    assert join(first, second) == "/app/api"


def test_join_keeps_every_other_character() -> None:
    assert join("http://host:9080", "/") == "http://host:9080/"
    assert join("http://host:9080/ctx//", "/v1") == "http://host:9080/ctx//v1"
    assert join("", "api") == "/api"


def test_package_of_uses_defining_package() -> None:
    assert package_of(GreetingClient) == "tests.sample_apps.single"
    assert package_of(_type_in("com.acme.shop.client")) == "com.acme.shop"
    assert package_of(_type_in("toplevel")) == "toplevel"


@pytest.mark.parametrize(
    ("package", "expected"),
    [
        ("com.acme.shop.api.v1", "com.acme.shop"),
        ("com.acme.shop.api", "com.acme.shop"),
        ("com.acme.shop", None),
        ("com", None),
    ],
)
def test_widened_scope_truncates_to_three_segments(package: str, expected: str | None) -> None:
    assert widened_scope(package) == expected


def test_resolve_uses_single_descriptor(reporter) -> None:
    resolver = PathResolver(reporter=reporter)
    assert resolver.resolve(GreetingClient, "http://localhost:32768") == "http://localhost:32768/greeting"
    assert reporter.of(Diagnostic.AMBIGUOUS_APPLICATION) == []


def test_resolve_defaults_to_root_when_nothing_found(reporter) -> None:
    resolver = PathResolver(reporter=reporter)
    assert resolver.resolve(StatusClient, "http://host:9080") == "http://host:9080/"
    (level, _, message, fields) = reporter.of(Diagnostic.NO_APPLICATION_FOUND)[0]
    assert level == "info"
    assert "StatusClient" in message
    assert fields["resource_type"] == "tests.sample_apps.empty.client.StatusClient"


def test_resolve_widens_to_ancestor_package(reporter) -> None:
    resolver = PathResolver(reporter=reporter)
    assert resolver.resolve(NestedClient, "http://host:9080/") == "http://host:9080/nested/"


def test_resolve_picks_smallest_canonical_name_on_ambiguity(reporter) -> None:
    resolver = PathResolver(reporter=reporter)
    first = resolver.resolve(InventoryClient, "http://host")
    second = resolver.resolve(InventoryClient, "http://host")
    assert first == second == "http://host/alpha"

    warnings = reporter.of(Diagnostic.AMBIGUOUS_APPLICATION)
    assert len(warnings) == 2
    level, _, _, fields = warnings[0]
    assert level == "warning"
    assert fields["candidates"] == [
        "tests.sample_apps.multi.alpha.AlphaApplication",
        "tests.sample_apps.multi.beta.BetaApplication",
    ]
    assert fields["selected"] == "tests.sample_apps.multi.alpha.AlphaApplication"


def test_resolve_sorts_regardless_of_discovery_order(reporter) -> None:
    metadata = FakeMetadata({"com.acme.shop": [BetaApplication, AlphaApplication]})
    resolver = PathResolver(metadata, reporter)
    assert resolver.resolve(_type_in("com.acme.shop.client"), "http://host") == "http://host/alpha"


def test_resolve_scans_immediate_then_widened_scope(reporter) -> None:
    metadata = FakeMetadata({})
    resolver = PathResolver(metadata, reporter)
    resolver.resolve(_type_in("com.acme.shop.api.v1.client"), "http://host")
    assert metadata.scanned == ["com.acme.shop.api.v1", "com.acme.shop"]


def test_resolve_does_not_rescan_identical_scope(reporter) -> None:
    metadata = FakeMetadata({})
    PathResolver(metadata, reporter).resolve(_type_in("com.acme.shop.client"), "http://host")
    assert metadata.scanned == ["com.acme.shop"]


def test_explicit_scan_packages_replace_derived_scope(reporter) -> None:
    resolver = PathResolver(reporter=reporter, scan_packages=["tests.sample_apps.single"])
    assert resolver.resolve(StatusClient, "http://host") == "http://host/greeting"


def test_explicit_scan_packages_skip_widening(reporter) -> None:
    metadata = FakeMetadata({})
    resolver = PathResolver(metadata, reporter, scan_packages=["one", "two"])
    assert resolver.resolve(_type_in("com.acme.shop.api.v1.client"), "http://host") == "http://host/"
    assert metadata.scanned == ["one", "two"]


def test_resolve_rejects_missing_arguments(reporter) -> None:
    resolver = PathResolver(FakeMetadata({}), reporter)
    with pytest.raises(NullArgumentError):
        resolver.resolve(GreetingClient, None)
    with pytest.raises(NullArgumentError):
        resolver.resolve(None, "http://host")


def test_resolve_survives_modules_that_fail_to_import(reporter) -> None:
    resolver = PathResolver(reporter=reporter)
    assert resolver.resolve(BrokenClient, "http://host") == "http://host/broken"
    assert len(reporter.of(Diagnostic.SCAN_IMPORT_FAILED)) == 3


def test_resolve_finds_nested_descriptor(reporter) -> None:
    resolver = PathResolver(reporter=reporter)
    assert resolver.resolve(InnerClient, "http://host") == "http://host/inner"
