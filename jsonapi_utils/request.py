# This file holds the parsed request parameters the formatter reads from.
# It exists so paging, filtering and sorting input is parsed once, at the boundary,
# into immutable values instead of being re-read from the transport on every use.

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

_BRACKETED_KEY_RE = re.compile(r"^(?P<group>[a-zA-Z_]+)\[(?P<key>[^\]]+)\]$")


@dataclass(frozen=True)
class PageParams:
    """Raw `page[...]` values as sent by the client."""

    values: Mapping[str, Any] = field(default_factory=dict)

    def get(self, key: str, default: Any = None) -> Any:
        return self.values.get(key, default)

    def positive_int(self, key: str) -> int | None:
        """Parsed value for `key`, or None when absent, non-numeric or non-positive."""

        raw = self.values.get(key)
        if raw is None or isinstance(raw, bool):
            return None
        try:
            value = int(str(raw).strip())
        except ValueError:
            return None
        return value if value > 0 else None


@dataclass(frozen=True)
class JsonApiRequest:
    """Request-scoped input consumed by the response formatter."""

    page: PageParams = field(default_factory=PageParams)
    filters: Mapping[str, str] = field(default_factory=dict)
    sort: str | None = None
    resource_class: type | None = None
    context: Any = None
    base_url: str | None = None

    @property
    def has_filters(self) -> bool:
        return any(str(value).strip() for value in self.filters.values())

    @classmethod
    def from_query_params(
        cls,
        items: Iterable[tuple[str, str]],
        *,
        resource_class: type | None = None,
        context: Any = None,
        base_url: str | None = None,
    ) -> JsonApiRequest:
        """Parse `page[number]=2&filter[name]=a,b&sort=-name` style pairs."""

        page: dict[str, str] = {}
        filters: dict[str, str] = {}
        sort: str | None = None
        for raw_key, value in items:
            if raw_key == "sort":
                sort = value
                continue
            match = _BRACKETED_KEY_RE.match(raw_key)
            if match is None:
                continue
            group, key = match.group("group"), match.group("key")
            if group == "page":
                page[key] = value
            elif group == "filter":
                filters[key] = value

        return cls(
            page=PageParams(page),
            filters=filters,
            sort=sort,
            resource_class=resource_class,
            context=context,
            base_url=base_url,
        )
