"""Result values produced by the response formatter for the serialization layer."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Union


@dataclass(frozen=True)
class CollectionMetadata:
    pagination_links: Mapping[str, Mapping[str, Any]] | None = None
    record_count: int | None = None


@dataclass(frozen=True)
class SingleResult:
    resource: Any | None


@dataclass(frozen=True)
class CollectionResult:
    resources: tuple[Any, ...]
    metadata: CollectionMetadata = field(default_factory=CollectionMetadata)


ResultEnvelope = Union[SingleResult, CollectionResult]
