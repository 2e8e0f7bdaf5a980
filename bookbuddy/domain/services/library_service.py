"""Library service applying reading business rules on top of the store."""

import logging
from typing import Optional

from ..entities.book import Book, ReadingStatus
from ..entities.highlight import Highlight
from ..entities.onboarding import Toast
from ..entities.stats import StatusChangeResult
from ..interfaces.book_repository import BookRepository
from ..interfaces.highlight_repository import HighlightRepository
from ..interfaces.notifier import Notifier
from .reading_store import ReadingStateStore
from .reading_stats import is_duplicate_book
from .status_rules import can_change_status, status_changes

logger = logging.getLogger(__name__)

STATUS_REJECTED_TITLE = "Can't Change Book Status"
DUPLICATE_BOOK_TITLE = "Book already in library"


class LibraryService:
    """
    Coordinates user actions on the library.

    The store is updated first, so the local view changes immediately; the
    change is then mirrored to the backend repositories when they are
    configured. Business-rule rejections are reported through the notifier
    and returned as values, never raised.
    """

    def __init__(
        self,
        store: ReadingStateStore,
        notifier: Notifier,
        book_repository: Optional[BookRepository] = None,
        highlight_repository: Optional[HighlightRepository] = None,
    ):
        self.store = store
        self.notifier = notifier
        self.book_repository = book_repository
        self.highlight_repository = highlight_repository

    async def sync_from_backend(self, user_id: str) -> list[Book]:
        """Replace the local books with the backend's copy of the library."""
        if self.book_repository is None:
            return list(self.store.books)
        books = await self.book_repository.list_books(user_id)
        self.store.replace_books(books)
        logger.info(f"Synced {len(books)} books for user {user_id}")
        return books

    async def add_book(self, user_id: str, book: Book) -> Optional[Book]:
        """Add a book unless one with the same title and author is already listed.

        Returns:
            Optional[Book]: The added book, or None when it was a duplicate.
        """
        if is_duplicate_book(self.store.books, book.title, book.author):
            self.notifier.notify(
                Toast(
                    title=DUPLICATE_BOOK_TITLE,
                    description=f"'{book.title}' by {book.author} is already in your library.",
                    variant="destructive",
                )
            )
            return None

        self.store.add_book(book)
        if self.book_repository is not None:
            await self.book_repository.add_book(user_id, book)
        logger.info(f"Added book {book.id} for user {user_id}")
        return book

    def check_status_change(self, book: Book, new_status: ReadingStatus) -> StatusChangeResult:
        is_only_book = len(self.store.books) == 1
        return can_change_status(book, new_status, is_only_book=is_only_book)

    async def change_status(self, book_id: str, new_status: ReadingStatus) -> StatusChangeResult:
        """Move a book to ``new_status`` if the status rules allow it.

        Raises:
            ValueError: If the book is not in the library.
        """
        book = self.store.get_book(book_id)
        if book is None:
            raise ValueError(f"Book with id {book_id} not found")

        result = self.check_status_change(book, new_status)
        if not result.allowed:
            self.notifier.notify(
                Toast(
                    title=STATUS_REJECTED_TITLE,
                    description=result.reason or "Invalid status transition",
                    variant="destructive",
                )
            )
            return result

        changes = status_changes(book, new_status)
        self.store.update_book(book_id, **changes)
        if self.book_repository is not None:
            await self.book_repository.update_book(book_id, **changes)

        self.notifier.notify(
            Toast(title="Status Updated", description=f"'{book.title}' is now {new_status.label}.")
        )
        logger.info(f"Book {book_id} moved from {book.status.value} to {new_status.value}")
        return result

    async def record_progress(self, book_id: str, current_page: int) -> Optional[Book]:
        """Record the page reached; the status is left as it is."""
        self.store.update_reading_progress(book_id, current_page)
        book = self.store.get_book(book_id)
        if book is not None and self.book_repository is not None:
            await self.book_repository.update_book(book_id, current_page=current_page)
        return book

    async def add_highlight(self, user_id: str, highlight: Highlight) -> Highlight:
        """Add a highlight to a book in the library.

        Raises:
            ValueError: If the book is unknown or the page is outside the book.
        """
        book = self.store.get_book(highlight.book_id)
        if book is None:
            raise ValueError(f"Book with id {highlight.book_id} not found")
        if not 0 <= highlight.page <= book.total_pages:
            raise ValueError(
                f"Page {highlight.page} is outside '{book.title}' (0-{book.total_pages})"
            )

        self.store.add_highlight(highlight)
        if self.highlight_repository is not None:
            await self.highlight_repository.add_highlight(user_id, highlight)
        return highlight

    async def delete_book(self, book_id: str) -> Book:
        """Remove a book and its highlights from the library and the backend.

        Raises:
            ValueError: If the book is not in the library.
        """
        book = self.store.get_book(book_id)
        if book is None:
            raise ValueError(f"Book with id {book_id} not found")

        highlight_ids = [h.id for h in self.store.highlights if h.book_id == book_id]
        self.store.delete_book(book_id)
        if self.highlight_repository is not None:
            for highlight_id in highlight_ids:
                await self.highlight_repository.delete_highlight(highlight_id)
        if self.book_repository is not None:
            await self.book_repository.delete_book(book_id)

        logger.info(f"Deleted book {book_id} with {len(highlight_ids)} highlights")
        return book

    async def delete_highlight(self, highlight_id: str) -> Highlight:
        """Remove a highlight from the library and the backend.

        Raises:
            ValueError: If the highlight is not in the library.
        """
        highlight = self.store.state.find_highlight(highlight_id)
        if highlight is None:
            raise ValueError(f"Highlight with id {highlight_id} not found")

        self.store.delete_highlight(highlight_id)
        if self.highlight_repository is not None:
            await self.highlight_repository.delete_highlight(highlight_id)
        return highlight

    async def toggle_favorite(self, highlight_id: str) -> Optional[Highlight]:
        self.store.toggle_favorite_highlight(highlight_id)
        highlight = self.store.state.find_highlight(highlight_id)
        if highlight is not None and self.highlight_repository is not None:
            await self.highlight_repository.update_highlight(
                highlight_id, is_favorite=highlight.is_favorite
            )
        return highlight
