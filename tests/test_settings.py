import pytest

from systest.settings import Settings

_VARIABLES = ("SYSTEST_APPLICATION_URL", "SYSTEST_REQUEST_TIMEOUT", "SYSTEST_SCAN_PACKAGES")


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _VARIABLES:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr("systest.settings.load_dotenv", lambda: False)


def test_load_defaults() -> None:
    assert Settings.load() == Settings()


def test_load_reads_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SYSTEST_APPLICATION_URL", " http://localhost:9080 ")
    monkeypatch.setenv("SYSTEST_REQUEST_TIMEOUT", "2.5")
    monkeypatch.setenv("SYSTEST_SCAN_PACKAGES", "com.acme.shop, com.acme.admin,,")

    settings = Settings.load()

    assert settings.application_url == "http://localhost:9080"
    assert settings.request_timeout == 2.5
    assert settings.scan_packages == ("com.acme.shop", "com.acme.admin")


@pytest.mark.parametrize("value", ["soon", "0", "-1"])
def test_load_rejects_bad_timeout(monkeypatch: pytest.MonkeyPatch, value: str) -> None:
    monkeypatch.setenv("SYSTEST_REQUEST_TIMEOUT", value)
    with pytest.raises(ValueError, match="SYSTEST_REQUEST_TIMEOUT"):
        Settings.load()
