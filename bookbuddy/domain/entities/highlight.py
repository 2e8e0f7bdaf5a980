"""Highlight entities for the BookBuddy reading tracker."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from .timestamps import as_utc, utc_now


class Highlight(BaseModel):
    """A passage captured from one page of one book."""

    id: str = Field(min_length=1, description="Unique identifier for the highlight")
    book_id: str = Field(min_length=1, description="Identifier of the owning book")
    text: str = Field(min_length=1, description="Highlighted text")
    page: int = Field(ge=0, description="Page the passage was taken from")
    is_favorite: bool = False
    created_at: datetime = Field(default_factory=utc_now)
    modified_at: Optional[datetime] = None
    note: Optional[str] = None

    @field_validator("created_at", "modified_at")
    @classmethod
    def _normalize_timezone(cls, value: Optional[datetime]) -> Optional[datetime]:
        return as_utc(value)

    @property
    def last_touched_at(self) -> datetime:
        return self.modified_at or self.created_at


class EnrichedHighlight(Highlight):
    """Highlight joined with the details of its book."""

    book_title: str
    book_author: str
    book_current_page: Optional[int] = None
    book_total_pages: int = 0
    reading_progress: int = Field(default=0, ge=0, le=100)
