"""Assignment run domain models."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Tuple

from ...models.domain import Driver, Order
from .engine import AssignmentResult


@dataclass(slots=True)
class AssignmentRun:
    """One complete, published assignment run and the records it was computed from."""

    run_id: int
    orders: Tuple[Order, ...]
    drivers: Tuple[Driver, ...]
    result: AssignmentResult
    started_at: datetime
    completed_at: datetime
    geocoded: bool
    errors: List[str] = field(default_factory=list)

    @property
    def assignments(self) -> dict[str, str]:
        return self.result.assignments


@dataclass(slots=True)
class ExportOutcome:
    delivered: bool
    content: str
    location: Optional[str] = None
    error: Optional[str] = None
