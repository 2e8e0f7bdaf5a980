"""Value objects produced by the status rules and stats calculators."""

from typing import Optional

from pydantic import BaseModel, ConfigDict


class StatusChangeResult(BaseModel):
    """Outcome of a reading status change check."""

    model_config = ConfigDict(frozen=True)

    allowed: bool
    reason: Optional[str] = None


class ReadingStats(BaseModel):
    """Dashboard reading statistics."""

    books_completed_this_month: int = 0
    books_completed_this_year: int = 0
    highlights_this_month: int = 0
