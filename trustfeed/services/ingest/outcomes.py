"""Типизированный итог обработки каждого субъекта батча."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class OutcomeStatus(str, Enum):
    INGESTED = "ingested"
    DUPLICATE = "duplicate"
    FAILED = "failed"


@dataclass(slots=True)
class SubjectOutcome:
    """ingested / duplicate / failed + причина мягкого сбоя обогащения, если был."""

    mint: str
    status: OutcomeStatus
    source: str
    soft_failure: str | None = None
    error: str | None = None


@dataclass(slots=True)
class IngestReport:
    outcomes: list[SubjectOutcome] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.outcomes)

    @property
    def ingested(self) -> int:
        return sum(1 for outcome in self.outcomes if outcome.status is OutcomeStatus.INGESTED)

    def count(self, status: OutcomeStatus) -> int:
        return sum(1 for outcome in self.outcomes if outcome.status is status)

    def as_response(self) -> dict[str, Any]:
        return {"ingested": self.ingested, "total": self.total}


__all__ = ["IngestReport", "OutcomeStatus", "SubjectOutcome"]
