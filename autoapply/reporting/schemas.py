"""
Reporting data models for application runs.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Optional, Tuple

from pydantic import BaseModel, Field

# (page_index, position on page); unique within a run
ItemKey = Tuple[int, int]

UNKNOWN_TITLE = "Unknown Job"
UNKNOWN_ORGANIZATION = "Unknown Company"


def _now() -> datetime:
    return datetime.now(timezone.utc)


class ItemAttemptOutcome(BaseModel):
    """Outcome of processing one item. The unit of truth for the report."""

    succeeded: bool
    title: str = UNKNOWN_TITLE
    organization: str = UNKNOWN_ORGANIZATION
    error_reason: Optional[str] = None
    timestamp: datetime = Field(default_factory=_now)
    page_index: int = 1
    position: int = 1
    artifact_path: Optional[str] = None

    @property
    def key(self) -> ItemKey:
        return (self.page_index, self.position)


class RunReport(BaseModel):
    """Summary of one run, rendered as text and optionally written to disk."""

    site: str
    succeeded: int
    failed: int
    pages_visited: int = 0
    items: List[ItemAttemptOutcome] = Field(default_factory=list)

    @property
    def total(self) -> int:
        return self.succeeded + self.failed

    @property
    def success_rate(self) -> float:
        return (self.succeeded / self.total * 100) if self.total else 0.0
