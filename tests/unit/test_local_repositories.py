"""Tests for the local in-memory book and highlight repositories."""

from datetime import datetime, timezone

import pytest

from bookbuddy.domain.entities import Book, Highlight, ReadingStatus
from bookbuddy.infrastructure.local_book_repository import LocalBookRepository
from bookbuddy.infrastructure.local_highlight_repository import LocalHighlightRepository


@pytest.fixture
def highlight_repository():
    return LocalHighlightRepository()


@pytest.fixture
def book_repository(highlight_repository):
    return LocalBookRepository(highlight_repository=highlight_repository)


def _highlight(highlight_id, book_id="b1", day=1):
    return Highlight(
        id=highlight_id,
        book_id=book_id,
        text=f"passage {highlight_id}",
        page=day,
        created_at=datetime(2026, 3, day, tzinfo=timezone.utc),
    )


class TestLocalBookRepository:
    """Test cases for LocalBookRepository."""

    @pytest.mark.asyncio
    async def test_add_and_get_book(self, book_repository):
        book = Book(id="b1", title="Dune")
        await book_repository.add_book("user-1", book)

        assert await book_repository.get_book("b1") == book

    @pytest.mark.asyncio
    async def test_get_book_not_found(self, book_repository):
        with pytest.raises(ValueError, match="Book with id missing not found"):
            await book_repository.get_book("missing")

    @pytest.mark.asyncio
    async def test_list_books_per_user_most_recent_first(self, book_repository):
        """Test that books are listed per owner, most recently updated first."""
        await book_repository.add_book("user-1", Book(id="b1", title="Dune"))
        await book_repository.add_book("user-1", Book(id="b2", title="Emma"))
        await book_repository.add_book("user-2", Book(id="b3", title="Ulysses"))
        await book_repository.update_book("b1", current_page=10)

        assert [b.id for b in await book_repository.list_books("user-1")] == ["b1", "b2"]
        assert [b.id for b in await book_repository.list_books("user-2")] == ["b3"]
        assert await book_repository.list_books("nobody") == []

    @pytest.mark.asyncio
    async def test_update_book_validates(self, book_repository):
        """Test that updates producing an invalid book are rejected."""
        await book_repository.add_book("user-1", Book(id="b1", title="Dune"))

        with pytest.raises(ValueError):
            await book_repository.update_book(
                "b1", completed_date=datetime(2026, 1, 1, tzinfo=timezone.utc)
            )

    @pytest.mark.asyncio
    async def test_update_book_not_found(self, book_repository):
        with pytest.raises(ValueError):
            await book_repository.update_book("missing", status=ReadingStatus.COMPLETED)

    @pytest.mark.asyncio
    async def test_delete_book_cascades_to_highlights(self, book_repository, highlight_repository):
        """Test that deleting a book removes its highlights."""
        await book_repository.add_book("user-1", Book(id="b1", title="Dune"))
        await book_repository.add_book("user-1", Book(id="b2", title="Emma"))
        await highlight_repository.add_highlight("user-1", _highlight("h1", book_id="b1"))
        await highlight_repository.add_highlight("user-1", _highlight("h2", book_id="b2"))

        await book_repository.delete_book("b1")

        assert [b.id for b in await book_repository.list_books("user-1")] == ["b2"]
        assert [h.id for h in await highlight_repository.list_highlights("user-1")] == ["h2"]

    @pytest.mark.asyncio
    async def test_delete_book_not_found(self, book_repository):
        with pytest.raises(ValueError):
            await book_repository.delete_book("missing")

    @pytest.mark.asyncio
    async def test_subscribe_and_unsubscribe(self, book_repository):
        """Test that listeners get the current books and later changes."""
        received = []
        unsubscribe = book_repository.subscribe("user-1", received.append)
        assert received == [[]]

        await book_repository.add_book("user-1", Book(id="b1", title="Dune"))
        assert [b.id for b in received[-1]] == ["b1"]

        unsubscribe()
        await book_repository.add_book("user-1", Book(id="b2", title="Emma"))
        assert len(received) == 2

    @pytest.mark.asyncio
    async def test_clear(self, book_repository):
        await book_repository.add_book("user-1", Book(id="b1", title="Dune"))
        book_repository.clear()
        assert await book_repository.list_books("user-1") == []


class TestLocalHighlightRepository:
    """Test cases for LocalHighlightRepository."""

    @pytest.mark.asyncio
    async def test_list_highlights_newest_first(self, highlight_repository):
        await highlight_repository.add_highlight("user-1", _highlight("h1", day=1))
        await highlight_repository.add_highlight("user-1", _highlight("h2", day=3))
        await highlight_repository.add_highlight("user-2", _highlight("h3", day=2))

        assert [h.id for h in await highlight_repository.list_highlights("user-1")] == ["h2", "h1"]

    @pytest.mark.asyncio
    async def test_list_highlights_by_book_with_limit(self, highlight_repository):
        for day in range(1, 5):
            await highlight_repository.add_highlight("user-1", _highlight(f"h{day}", day=day))
        await highlight_repository.add_highlight("user-1", _highlight("other", book_id="b2", day=9))

        by_book = await highlight_repository.list_highlights_by_book("user-1", "b1", limit=2)
        assert [h.id for h in by_book] == ["h4", "h3"]

    @pytest.mark.asyncio
    async def test_update_highlight_stamps_modified_at(self, highlight_repository):
        await highlight_repository.add_highlight("user-1", _highlight("h1"))

        updated = await highlight_repository.update_highlight("h1", is_favorite=True, note="Reread")

        assert updated.is_favorite is True
        assert updated.note == "Reread"
        assert updated.modified_at is not None
        favorites = await highlight_repository.list_favorite_highlights("user-1")
        assert [h.id for h in favorites] == ["h1"]

    @pytest.mark.asyncio
    async def test_update_highlight_not_found(self, highlight_repository):
        with pytest.raises(ValueError, match="Highlight with id missing not found"):
            await highlight_repository.update_highlight("missing", is_favorite=True)

    @pytest.mark.asyncio
    async def test_delete_highlight(self, highlight_repository):
        await highlight_repository.add_highlight("user-1", _highlight("h1"))
        await highlight_repository.delete_highlight("h1")

        assert await highlight_repository.list_highlights("user-1") == []
        with pytest.raises(ValueError):
            await highlight_repository.delete_highlight("h1")

    @pytest.mark.asyncio
    async def test_delete_highlights_for_book(self, highlight_repository):
        await highlight_repository.add_highlight("user-1", _highlight("h1"))
        await highlight_repository.add_highlight("user-1", _highlight("h2", day=2))

        assert highlight_repository.delete_highlights_for_book("b1") == 2
        assert highlight_repository.delete_highlights_for_book("b1") == 0

    @pytest.mark.asyncio
    async def test_subscribe(self, highlight_repository):
        received = []
        unsubscribe = highlight_repository.subscribe("user-1", received.append)

        await highlight_repository.add_highlight("user-1", _highlight("h1"))
        unsubscribe()
        await highlight_repository.add_highlight("user-1", _highlight("h2", day=2))

        assert [[h.id for h in batch] for batch in received] == [[], ["h1"]]
