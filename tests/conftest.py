from dataclasses import dataclass, field

import pytest

from systest.errors import Diagnostic

pytest_plugins = ["systest.pytest_plugin"]


@dataclass
class RecordingReporter:
    events: list[tuple[str, Diagnostic, str, dict[str, object]]] = field(default_factory=list)

    def debug(self, event: Diagnostic, message: str, **fields: object) -> None:
        self.events.append(("debug", event, message, fields))

    def info(self, event: Diagnostic, message: str, **fields: object) -> None:
        self.events.append(("info", event, message, fields))

    def warning(self, event: Diagnostic, message: str, **fields: object) -> None:
        self.events.append(("warning", event, message, fields))

    def of(self, event: Diagnostic) -> list[tuple[str, Diagnostic, str, dict[str, object]]]:
        return [entry for entry in self.events if entry[1] is event]


@pytest.fixture
def reporter() -> RecordingReporter:
    return RecordingReporter()
