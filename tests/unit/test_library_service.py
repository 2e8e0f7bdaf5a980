"""Unit tests for the library service."""

from datetime import datetime, timezone
from unittest.mock import AsyncMock

import pytest

from bookbuddy.domain.entities import Book, Highlight, ReadingStatus
from bookbuddy.domain.services import LibraryService, ReadingStateStore
from bookbuddy.domain.services.library_service import DUPLICATE_BOOK_TITLE, STATUS_REJECTED_TITLE
from bookbuddy.domain.services.status_rules import ONLY_BOOK_IN_PROGRESS
from bookbuddy.infrastructure.collecting_notifier import CollectingNotifier
from bookbuddy.infrastructure.local_book_repository import LocalBookRepository
from bookbuddy.infrastructure.local_highlight_repository import LocalHighlightRepository
from bookbuddy.infrastructure.snapshot_storage import InMemorySnapshotStorage


@pytest.fixture
def store():
    return ReadingStateStore(InMemorySnapshotStorage())


@pytest.fixture
def notifier():
    return CollectingNotifier()


@pytest.fixture
def highlight_repository():
    return LocalHighlightRepository()


@pytest.fixture
def book_repository(highlight_repository):
    return LocalBookRepository(highlight_repository=highlight_repository)


@pytest.fixture
def service(store, notifier, book_repository, highlight_repository):
    return LibraryService(
        store=store,
        notifier=notifier,
        book_repository=book_repository,
        highlight_repository=highlight_repository,
    )


@pytest.fixture
def dune():
    return Book(id="b1", title="Dune", author="Frank Herbert", total_pages=412)


@pytest.fixture
def emma():
    return Book(id="b2", title="Emma", author="Jane Austen", total_pages=320)


class TestAddBook:
    """Tests for LibraryService.add_book."""

    @pytest.mark.asyncio
    async def test_add_book_updates_store_and_backend(self, service, store, book_repository, dune):
        added = await service.add_book("user-1", dune)

        assert added == dune
        assert store.books == (dune,)
        assert await book_repository.list_books("user-1") == [dune]

    @pytest.mark.asyncio
    async def test_duplicate_book_is_reported(self, service, store, notifier, dune):
        """Test that a book with the same title and author is not added twice."""
        await service.add_book("user-1", dune)
        copy = Book(id="b9", title="dune", author="FRANK HERBERT")

        assert await service.add_book("user-1", copy) is None

        assert len(store.books) == 1
        assert notifier.pending[-1].title == DUPLICATE_BOOK_TITLE
        assert notifier.pending[-1].variant == "destructive"

    @pytest.mark.asyncio
    async def test_add_book_without_backend(self, store, notifier, dune):
        service = LibraryService(store=store, notifier=notifier)
        await service.add_book("user-1", dune)
        assert store.books == (dune,)


class TestChangeStatus:
    """Tests for LibraryService.change_status."""

    @pytest.mark.asyncio
    async def test_start_reading(self, service, store, book_repository, notifier, dune, emma):
        await service.add_book("user-1", dune)
        await service.add_book("user-1", emma)

        result = await service.change_status("b1", ReadingStatus.IN_PROGRESS)

        assert result.allowed is True
        book = store.get_book("b1")
        assert book.status == ReadingStatus.IN_PROGRESS
        assert book.start_date is not None
        assert (await book_repository.get_book("b1")).status == ReadingStatus.IN_PROGRESS
        assert notifier.pending[-1].title == "Status Updated"
        assert notifier.pending[-1].description == "'Dune' is now In Progress."

    @pytest.mark.asyncio
    async def test_complete_book(self, service, store, dune):
        await service.add_book("user-1", dune)

        await service.change_status("b1", ReadingStatus.COMPLETED)

        book = store.get_book("b1")
        assert book.status == ReadingStatus.COMPLETED
        assert book.current_page == 412
        assert book.completed_date is not None

    @pytest.mark.asyncio
    async def test_only_book_in_progress_cannot_be_reset(self, service, store, notifier, dune):
        """Test that the only book in the library cannot go back to not started."""
        await service.add_book("user-1", dune)
        await service.change_status("b1", ReadingStatus.IN_PROGRESS)

        result = await service.change_status("b1", ReadingStatus.NOT_STARTED)

        assert result.allowed is False
        assert result.reason == ONLY_BOOK_IN_PROGRESS
        assert store.get_book("b1").status == ReadingStatus.IN_PROGRESS
        toast = notifier.pending[-1]
        assert toast.title == STATUS_REJECTED_TITLE == "Can't Change Book Status"
        assert toast.description == ONLY_BOOK_IN_PROGRESS
        assert toast.variant == "destructive"

    @pytest.mark.asyncio
    async def test_reset_allowed_with_other_books(self, service, store, dune, emma):
        await service.add_book("user-1", dune)
        await service.add_book("user-1", emma)
        await service.change_status("b1", ReadingStatus.IN_PROGRESS)
        await service.record_progress("b1", 40)

        result = await service.change_status("b1", ReadingStatus.NOT_STARTED)

        assert result.allowed is True
        book = store.get_book("b1")
        assert book.current_page == 0
        assert book.start_date is None

    @pytest.mark.asyncio
    async def test_unknown_book_raises(self, service):
        with pytest.raises(ValueError):
            await service.change_status("missing", ReadingStatus.COMPLETED)


class TestProgressAndHighlights:
    """Tests for progress recording and highlights."""

    @pytest.mark.asyncio
    async def test_record_progress(self, service, book_repository, dune):
        await service.add_book("user-1", dune)

        book = await service.record_progress("b1", 120)

        assert book.current_page == 120
        assert book.status == ReadingStatus.NOT_STARTED
        assert (await book_repository.get_book("b1")).current_page == 120

    @pytest.mark.asyncio
    async def test_record_progress_unknown_book(self, service):
        assert await service.record_progress("missing", 3) is None

    @pytest.mark.asyncio
    async def test_add_highlight(self, service, store, highlight_repository, dune):
        await service.add_book("user-1", dune)
        highlight = Highlight(id="h1", book_id="b1", text="Fear is the mind-killer.", page=8)

        await service.add_highlight("user-1", highlight)

        assert store.highlights == (highlight,)
        assert await highlight_repository.list_highlights("user-1") == [highlight]

    @pytest.mark.asyncio
    async def test_add_highlight_outside_book(self, service, dune):
        await service.add_book("user-1", dune)
        highlight = Highlight(id="h1", book_id="b1", text="text", page=500)

        with pytest.raises(ValueError, match=r"\(0-412\)"):
            await service.add_highlight("user-1", highlight)

    @pytest.mark.asyncio
    async def test_add_highlight_book_without_page_count(self, service, store):
        """Test that a book with no page count only accepts highlights on page 0."""
        await service.add_book("user-1", Book(id="b3", title="Untitled Notes"))

        with pytest.raises(ValueError, match=r"\(0-0\)"):
            await service.add_highlight(
                "user-1", Highlight(id="h1", book_id="b3", text="text", page=999)
            )
        assert store.highlights == ()

        highlight = Highlight(id="h2", book_id="b3", text="text", page=0)
        assert await service.add_highlight("user-1", highlight) == highlight

    @pytest.mark.asyncio
    async def test_add_highlight_on_last_page(self, service, dune):
        await service.add_book("user-1", dune)
        highlight = Highlight(id="h1", book_id="b1", text="text", page=412)
        assert await service.add_highlight("user-1", highlight) == highlight

    @pytest.mark.asyncio
    async def test_add_highlight_unknown_book(self, service):
        highlight = Highlight(id="h1", book_id="missing", text="text", page=1)
        with pytest.raises(ValueError):
            await service.add_highlight("user-1", highlight)

    @pytest.mark.asyncio
    async def test_toggle_favorite(self, service, highlight_repository, dune):
        await service.add_book("user-1", dune)
        await service.add_highlight(
            "user-1", Highlight(id="h1", book_id="b1", text="text", page=1)
        )

        highlight = await service.toggle_favorite("h1")

        assert highlight.is_favorite is True
        assert (await highlight_repository.list_favorite_highlights("user-1"))[0].id == "h1"

    @pytest.mark.asyncio
    async def test_toggle_favorite_unknown(self, service):
        assert await service.toggle_favorite("missing") is None


class TestDelete:
    """Tests for deleting books and highlights."""

    @pytest.mark.asyncio
    async def test_delete_book_with_highlights(
        self, service, store, book_repository, highlight_repository, dune, emma
    ):
        await service.add_book("user-1", dune)
        await service.add_book("user-1", emma)
        await service.add_highlight("user-1", Highlight(id="h1", book_id="b1", text="a", page=1))
        await service.add_highlight("user-1", Highlight(id="h2", book_id="b2", text="b", page=2))

        deleted = await service.delete_book("b1")

        assert deleted == dune
        assert store.books == (emma,)
        assert [h.id for h in store.highlights] == ["h2"]
        assert await book_repository.list_books("user-1") == [emma]
        assert [h.id for h in await highlight_repository.list_highlights("user-1")] == ["h2"]

    @pytest.mark.asyncio
    async def test_delete_book_without_backend(self, store, notifier, dune):
        service = LibraryService(store=store, notifier=notifier)
        await service.add_book("user-1", dune)

        await service.delete_book("b1")

        assert store.books == ()

    @pytest.mark.asyncio
    async def test_delete_unknown_book_raises(self, service):
        with pytest.raises(ValueError):
            await service.delete_book("missing")

    @pytest.mark.asyncio
    async def test_delete_highlight(self, service, store, highlight_repository, dune):
        await service.add_book("user-1", dune)
        await service.add_highlight("user-1", Highlight(id="h1", book_id="b1", text="a", page=1))

        deleted = await service.delete_highlight("h1")

        assert deleted.id == "h1"
        assert store.highlights == ()
        assert store.books == (dune,)
        assert await highlight_repository.list_highlights("user-1") == []

    @pytest.mark.asyncio
    async def test_delete_unknown_highlight_raises(self, service):
        with pytest.raises(ValueError):
            await service.delete_highlight("missing")


class TestSyncFromBackend:
    """Tests for LibraryService.sync_from_backend."""

    @pytest.mark.asyncio
    async def test_sync_replaces_store_books(self, store, notifier, dune, emma):
        repository = AsyncMock()
        repository.list_books.return_value = [emma, dune]
        service = LibraryService(store=store, notifier=notifier, book_repository=repository)

        books = await service.sync_from_backend("user-1")

        repository.list_books.assert_awaited_once_with("user-1")
        assert books == [emma, dune]
        assert store.books == (emma, dune)

    @pytest.mark.asyncio
    async def test_sync_without_backend_keeps_store(self, store, notifier, dune):
        store.add_book(dune)
        service = LibraryService(store=store, notifier=notifier)

        assert await service.sync_from_backend("user-1") == [dune]
