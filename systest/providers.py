"""Entity providers that translate between Python values and HTTP bodies."""

from typing import Any, Protocol

from pydantic import TypeAdapter, ValidationError

from systest.errors import RestClientError

JSON_MEDIA_TYPE = "application/json"
TEXT_MEDIA_TYPE = "text/plain"


def media_type_of(content_type: str | None) -> str:
    """Strip parameters such as charset from a Content-Type header value."""
    if not content_type:
        return ""
    return content_type.split(";", 1)[0].strip().lower()


class EntityProvider(Protocol):
    """Reads response entities and writes request entities."""

    def can_read(self, target_type: Any, media_type: str) -> bool: ...

    def read(self, content: bytes, target_type: Any) -> Any: ...

    def can_write(self, value: Any) -> bool: ...

    def write(self, value: Any) -> tuple[bytes, str]: ...


class JsonProvider:
    """JSON binding backed by pydantic type adapters."""

    def can_read(self, target_type: Any, media_type: str) -> bool:
        return not media_type or media_type == JSON_MEDIA_TYPE or media_type.endswith("+json")

    def read(self, content: bytes, target_type: Any) -> Any:
        try:
            return TypeAdapter(target_type).validate_json(content)
        except ValidationError as exc:
            raise RestClientError(
                f"Response body could not be read as {target_type!r}: {exc}"
            ) from exc

    def can_write(self, value: Any) -> bool:
        return not isinstance(value, (bytes, str))

    def write(self, value: Any) -> tuple[bytes, str]:
        return TypeAdapter(type(value)).dump_json(value), JSON_MEDIA_TYPE

    def __repr__(self) -> str:
        return "JsonProvider()"


class TextProvider:
    """Plain text bodies mapped to ``str``."""

    def can_read(self, target_type: Any, media_type: str) -> bool:
        return target_type in (str, Any) and media_type.startswith("text/")

    def read(self, content: bytes, target_type: Any) -> Any:
        return content.decode("utf-8")

    def can_write(self, value: Any) -> bool:
        return isinstance(value, str)

    def write(self, value: Any) -> tuple[bytes, str]:
        return value.encode("utf-8"), f"{TEXT_MEDIA_TYPE}; charset=utf-8"

    def __repr__(self) -> str:
        return "TextProvider()"


DEFAULT_PROVIDERS: tuple[EntityProvider, ...] = (JsonProvider(), TextProvider())
