# This file describes how domain records are exposed as JSON:API resources.
# Resource classes are looked up through an explicit registry rather than by
# resolving names at runtime, so every mapper a handler can ask for is declared up front.

from __future__ import annotations

import re
from collections.abc import Callable, Mapping
from typing import Any, ClassVar, Union

from jsonapi_utils.errors import ResourceNotFoundError

_CAMEL_BOUNDARY_RE = re.compile(r"(?<!^)(?=[A-Z])")


def read_field(record: Any, name: str) -> Any:
    """Read a field from a keyed record or an attribute-bearing object."""

    if isinstance(record, Mapping):
        return record.get(name)
    return getattr(record, name, None)


def format_key(name: str, key_format: str = "underscored") -> str:
    if key_format == "dasherized":
        return name.replace("_", "-")
    if key_format == "camelized":
        head, *tail = name.split("_")
        return head + "".join(part[:1].upper() + part[1:] for part in tail)
    return name


class Resource:
    """Maps one domain record to its JSON:API representation."""

    type: ClassVar[str] = ""
    attributes: ClassVar[tuple[str, ...]] = ()
    relationships: ClassVar[tuple[str, ...]] = ()
    filters: ClassVar[tuple[str, ...]] = ()
    sortable_fields: ClassVar[tuple[str, ...]] = ()

    def __init__(self, model: Any, context: Any = None) -> None:
        self.model = model
        self.context = context

    def __repr__(self) -> str:
        return f"{type(self).__name__}(id={self.id!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Resource):
            return NotImplemented
        return type(self) is type(other) and self.model == other.model

    __hash__ = None  # type: ignore[assignment]

    @classmethod
    def resource_type(cls) -> str:
        if cls.type:
            return cls.type
        base = cls.__name__.removesuffix("Resource") or cls.__name__
        return _CAMEL_BOUNDARY_RE.sub("_", base).lower() + "s"

    @classmethod
    def allowed_sort_fields(cls) -> tuple[str, ...]:
        return cls.sortable_fields or ("id", *cls.attributes)

    @property
    def id(self) -> str | None:
        value = read_field(self.model, "id")
        return None if value is None else str(value)

    def attribute(self, name: str) -> Any:
        return read_field(self.model, name)

    def serialize(self, key_format: str = "underscored") -> dict[str, Any]:
        return {
            "type": self.resource_type(),
            "id": self.id,
            "attributes": {
                format_key(name, key_format): self.attribute(name) for name in self.attributes
            },
        }


class ResourceRegistry:
    """Lookup table from resource names to resource classes."""

    def __init__(self) -> None:
        self._resources: dict[str, type[Resource]] = {}

    def register(
        self,
        resource_class: type[Resource] | None = None,
        *,
        name: str | None = None,
    ) -> Any:
        """Register a resource class; usable directly or as a decorator."""

        def decorator(cls: type[Resource]) -> type[Resource]:
            self._resources[name or cls.__name__] = cls
            return cls

        if resource_class is None:
            return decorator
        return decorator(resource_class)

    def resolve(self, key: str | type[Resource]) -> type[Resource]:
        if isinstance(key, type):
            return key
        try:
            return self._resources[str(key)]
        except KeyError:
            raise ResourceNotFoundError(f"No resource registered under {key!r}") from None


ResourceSelector = Union[type[Resource], str, Callable[[Any], Any]]

default_registry = ResourceRegistry()
