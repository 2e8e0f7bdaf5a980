"""Reading state snapshot entities."""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from .book import Book
from .highlight import Highlight

SNAPSHOT_VERSION = 1


class ReadingState(BaseModel):
    """Immutable view of the books and highlights held by the store.

    Both collections keep insertion order. Mutations on the store never
    modify an existing instance; they produce a new one.
    """

    model_config = ConfigDict(frozen=True)

    books: tuple[Book, ...] = ()
    highlights: tuple[Highlight, ...] = ()

    def find_book(self, book_id: str) -> Optional[Book]:
        return next((book for book in self.books if book.id == book_id), None)

    def find_highlight(self, highlight_id: str) -> Optional[Highlight]:
        return next((h for h in self.highlights if h.id == highlight_id), None)


class PersistedSnapshot(BaseModel):
    """Versioned envelope written to snapshot storage."""

    version: int = SNAPSHOT_VERSION
    state: dict[str, list[Any]] = Field(default_factory=dict)

    @classmethod
    def from_state(cls, state: ReadingState) -> "PersistedSnapshot":
        return cls(
            version=SNAPSHOT_VERSION,
            state={
                "books": [book.model_dump(mode="json") for book in state.books],
                "highlights": [h.model_dump(mode="json") for h in state.highlights],
            },
        )
