"""Book entities for the BookBuddy reading tracker."""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .timestamps import as_utc


class ReadingStatus(str, Enum):
    """Reading status of a book in the library."""

    NOT_STARTED = "not-started"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"

    @property
    def label(self) -> str:
        """Human readable label, e.g. ``In Progress``."""
        return " ".join(word.capitalize() for word in self.value.split("-"))


class Book(BaseModel):
    """Book entity tracked in a user's library.

    ``current_page`` carries no range constraint: progress updates are
    recorded as given by the store and only clamped for display
    (see ``reading_stats.percent_complete``). Requests coming through the
    HTTP API are checked for negative pages before they reach the store.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": "book-42",
                "title": "The Left Hand of Darkness",
                "author": "Ursula K. Le Guin",
                "total_pages": 304,
                "current_page": 120,
                "status": "in-progress",
            }
        }
    )

    id: str = Field(min_length=1, description="Unique identifier for the book")
    title: str = Field(min_length=1, max_length=300, description="Title of the book")
    author: str = Field(default="Unknown Author", description="Author of the book")
    cover_url: Optional[str] = Field(None, description="URL of the cover image")
    total_pages: int = Field(default=0, ge=0, description="Total number of pages")
    current_page: Optional[int] = Field(None, description="Last page read")
    start_date: Optional[datetime] = None
    completed_date: Optional[datetime] = None
    status: ReadingStatus = ReadingStatus.NOT_STARTED

    subtitle: Optional[str] = None
    description: Optional[str] = None
    genre: Optional[str] = None
    isbn: Optional[str] = None
    publisher: Optional[str] = None
    categories: list[str] = Field(default_factory=list)

    @field_validator("start_date", "completed_date")
    @classmethod
    def _normalize_timezone(cls, value: Optional[datetime]) -> Optional[datetime]:
        return as_utc(value)

    @model_validator(mode="after")
    def _completed_date_requires_completed_status(self) -> "Book":
        if self.completed_date is not None and self.status != ReadingStatus.COMPLETED:
            raise ValueError("completed_date can only be set on a completed book")
        return self

