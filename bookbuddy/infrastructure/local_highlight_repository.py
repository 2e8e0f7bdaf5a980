"""Local in-memory implementation of Highlight Repository."""

from collections import defaultdict
from typing import Any, Callable, Dict, List, Optional

from ..domain.entities.highlight import Highlight
from ..domain.entities.timestamps import utc_now
from ..domain.interfaces.highlight_repository import HighlightRepository, HighlightsListener


class LocalHighlightRepository(HighlightRepository):
    """Local in-memory implementation of the Highlight Repository.

    Stores highlights in a dictionary for testing and development purposes.
    """

    def __init__(self):
        self._highlights: Dict[str, Highlight] = {}
        self._owners: Dict[str, str] = {}
        self._listeners: Dict[str, List[HighlightsListener]] = defaultdict(list)

    async def list_highlights(self, user_id: str) -> list[Highlight]:
        return self._highlights_for(user_id)

    async def list_highlights_by_book(
        self, user_id: str, book_id: str, limit: Optional[int] = None
    ) -> list[Highlight]:
        highlights = [h for h in self._highlights_for(user_id) if h.book_id == book_id]
        return highlights[:limit] if limit else highlights

    async def list_favorite_highlights(self, user_id: str) -> list[Highlight]:
        return [h for h in self._highlights_for(user_id) if h.is_favorite]

    async def add_highlight(self, user_id: str, highlight: Highlight) -> Highlight:
        self._highlights[highlight.id] = highlight
        self._owners[highlight.id] = user_id
        self._publish(user_id)
        return highlight

    async def update_highlight(self, highlight_id: str, **updates: Any) -> Highlight:
        """Update fields of a highlight and stamp ``modified_at``.

        Raises:
            ValueError: If the highlight is not found.
        """
        if highlight_id not in self._highlights:
            raise ValueError(f"Highlight with id {highlight_id} not found")

        highlight = Highlight.model_validate(
            {**self._highlights[highlight_id].model_dump(), **updates, "modified_at": utc_now()}
        )
        self._highlights[highlight_id] = highlight
        self._publish(self._owners[highlight_id])
        return highlight

    async def delete_highlight(self, highlight_id: str) -> None:
        """Delete a highlight.

        Raises:
            ValueError: If the highlight is not found.
        """
        if highlight_id not in self._highlights:
            raise ValueError(f"Highlight with id {highlight_id} not found")

        del self._highlights[highlight_id]
        self._publish(self._owners.pop(highlight_id))

    def delete_highlights_for_book(self, book_id: str) -> int:
        """Delete every highlight of a book.

        Returns:
            int: Number of highlights removed.
        """
        doomed = [h.id for h in self._highlights.values() if h.book_id == book_id]
        owners = {self._owners[highlight_id] for highlight_id in doomed}
        for highlight_id in doomed:
            del self._highlights[highlight_id]
            del self._owners[highlight_id]
        for owner in owners:
            self._publish(owner)
        return len(doomed)

    def subscribe(self, user_id: str, on_update: HighlightsListener) -> Callable[[], None]:
        self._listeners[user_id].append(on_update)
        on_update(self._highlights_for(user_id))

        def unsubscribe() -> None:
            if on_update in self._listeners[user_id]:
                self._listeners[user_id].remove(on_update)

        return unsubscribe

    def clear(self) -> None:
        """Clear all highlights from the dictionary."""
        self._highlights.clear()
        self._owners.clear()

    def _highlights_for(self, user_id: str) -> list[Highlight]:
        owned = [h for h in self._highlights.values() if self._owners[h.id] == user_id]
        return sorted(owned, key=lambda h: h.created_at, reverse=True)

    def _publish(self, user_id: str) -> None:
        highlights = self._highlights_for(user_id)
        for listener in list(self._listeners[user_id]):
            listener(highlights)
