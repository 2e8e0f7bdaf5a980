"""Highlight Repository interface."""

from typing import Any, Callable, Optional, Protocol, runtime_checkable

from ..entities.highlight import Highlight

HighlightsListener = Callable[[list[Highlight]], None]


@runtime_checkable
class HighlightRepository(Protocol):
    """Protocol defining the interface for highlight repositories."""

    async def list_highlights(self, user_id: str) -> list[Highlight]:
        """List a user's highlights, newest first."""
        ...

    async def list_highlights_by_book(
        self, user_id: str, book_id: str, limit: Optional[int] = None
    ) -> list[Highlight]:
        """List a user's highlights for one book, newest first.

        Args:
            user_id: The owner of the highlights.
            book_id: The book the highlights belong to.
            limit: Maximum number of highlights to return.
        """
        ...

    async def add_highlight(self, user_id: str, highlight: Highlight) -> Highlight:
        """Store a new highlight."""
        ...

    async def update_highlight(self, highlight_id: str, **updates: Any) -> Highlight:
        """Apply field updates to a highlight.

        Raises:
            ValueError: If the highlight is not found.
        """
        ...

    async def delete_highlight(self, highlight_id: str) -> None:
        """Delete a highlight.

        Raises:
            ValueError: If the highlight is not found.
        """
        ...

    def subscribe(self, user_id: str, on_update: HighlightsListener) -> Callable[[], None]:
        """Register a callback receiving the user's highlights after every change."""
        ...
