# This file turns error-bearing objects into JSON:API error objects.
# Model validation failures are translated field by field into entries that point
# at the offending attribute or relationship; anything else is normalized as-is.
# The result is always a deduplicated list, so formatting errors never fails itself.

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping, Sequence
from typing import Any, Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict, ValidationError, model_validator

from jsonapi_utils.errors import JsonApiError
from jsonapi_utils.resources import format_key

LOGGER = logging.getLogger("jsonapi_utils.errors")

VALIDATION_ERROR_CODE = "100"
VALIDATION_ERROR_STATUS = "422"
BASE_ERROR_FIELD = "base"


class ErrorEntry(BaseModel):
    """One JSON:API error object."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str | None = None
    status: str | None = None
    code: str | None = None
    title: str | None = None
    detail: str | None = None
    source: dict[str, str] | None = None
    links: dict[str, Any] | None = None
    meta: dict[str, Any] | None = None

    @model_validator(mode="after")
    def _require_member(self) -> ErrorEntry:
        if not self.model_dump(exclude_none=True):
            raise ValueError("error object must carry at least one JSON:API member")
        return self

    def as_document(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)


@runtime_checkable
class HasFieldErrors(Protocol):
    """A record that collected per-field validation messages."""

    def field_errors(self) -> Mapping[str, Sequence[str]]: ...


class ModelErrors:
    """Adapter exposing a record's field failures as error entries."""

    def __init__(
        self,
        source: ValidationError | HasFieldErrors,
        resource_class: type | None = None,
        key_format: str = "underscored",
    ) -> None:
        self.source = source
        self.resource_class = resource_class
        self.key_format = key_format

    @property
    def errors(self) -> list[ErrorEntry]:
        return list(self)

    def __iter__(self) -> Iterator[ErrorEntry]:
        for field_name, message in self._messages():
            yield ErrorEntry(
                id=field_name,
                title=message,
                detail=message,
                code=VALIDATION_ERROR_CODE,
                status=VALIDATION_ERROR_STATUS,
                source={"pointer": self._pointer(field_name)},
            )

    def _messages(self) -> Iterator[tuple[str, str]]:
        if isinstance(self.source, ValidationError):
            for error in self.source.errors():
                location = [str(part) for part in error.get("loc", ())]
                field_name = location[0] if location else BASE_ERROR_FIELD
                yield field_name, str(error.get("msg", ""))
            return
        for field_name, messages in self.source.field_errors().items():
            if isinstance(messages, str):
                messages = [messages]
            for message in messages:
                yield str(field_name), str(message)

    def _pointer(self, field_name: str) -> str:
        if field_name == BASE_ERROR_FIELD:
            return "/data"
        key = format_key(field_name, self.key_format)
        relationships = getattr(self.resource_class, "relationships", ())
        if field_name in relationships:
            return f"/data/relationships/{key}"
        return f"/data/attributes/{key}"


def has_model_errors(obj: Any) -> bool:
    return isinstance(obj, (ValidationError, HasFieldErrors))


def unwrap_errors(obj: Any) -> Any:
    """Return the error collection an object exposes, or the object itself."""

    if isinstance(obj, (JsonApiError, ModelErrors)):
        return obj.errors
    errors = getattr(obj, "errors", None)
    if errors is None:
        return obj
    return errors() if callable(errors) else errors


def sanitize_errors(raw: Any) -> list[ErrorEntry]:
    """Normalize whatever error shape was given into a list of entries."""

    if raw is None:
        return []
    single = isinstance(raw, (ErrorEntry, Mapping, JsonApiError, str))
    if single or not isinstance(raw, (Sequence, ModelErrors)):
        raw = [raw]

    entries: list[ErrorEntry] = []
    for item in raw:
        if isinstance(item, ErrorEntry):
            entries.append(item)
        elif isinstance(item, Mapping):
            try:
                entries.append(ErrorEntry.model_validate(dict(item)))
            except ValidationError:
                LOGGER.warning("dropping malformed error object keys=%s", sorted(map(str, item)))
        elif isinstance(item, JsonApiError):
            entries.extend(sanitize_errors(item.errors))
        else:
            LOGGER.debug("dropping unrecognized error item type=%s", type(item).__name__)
    return entries


def dedupe_errors(entries: Sequence[ErrorEntry]) -> list[ErrorEntry]:
    unique: list[ErrorEntry] = []
    for entry in entries:
        if entry not in unique:
            unique.append(entry)
    return unique
