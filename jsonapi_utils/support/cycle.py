"""Per-call memo shared by counting and pagination while one response is built."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass
class ResponseCycle:
    """Scratch state for a single `format` call; discarded once the result is built."""

    record_count: int | None = None
    paginator: Any = None
    pagination: Any = None
