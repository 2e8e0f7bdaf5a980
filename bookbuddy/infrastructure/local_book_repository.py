"""Local in-memory implementation of Book Repository."""

import itertools
import logging
from collections import defaultdict
from typing import Any, Dict, List, Optional

from ..domain.entities.book import Book
from ..domain.interfaces.book_repository import BookRepository, BooksListener, Unsubscribe
from .local_highlight_repository import LocalHighlightRepository

logger = logging.getLogger(__name__)


class LocalBookRepository(BookRepository):
    """Local in-memory implementation of the Book Repository.

    Stores books in a dictionary for testing and development purposes.
    When a highlight repository is attached, deleting a book also deletes
    its highlights.
    """

    def __init__(self, highlight_repository: Optional[LocalHighlightRepository] = None):
        """Initialize the local book repository with an empty dictionary.

        Args:
            highlight_repository: Repository whose highlights are removed
                together with their book.
        """
        self._books: Dict[str, Book] = {}
        self._owners: Dict[str, str] = {}
        self._revisions: Dict[str, int] = {}
        self._sequence = itertools.count()
        self._listeners: Dict[str, List[BooksListener]] = defaultdict(list)
        self._highlight_repository = highlight_repository

    async def list_books(self, user_id: str) -> list[Book]:
        """List the books of a user, most recently updated first.

        Args:
            user_id: The owner of the books.

        Returns:
            list[Book]: The user's books.
        """
        return self._books_for(user_id)

    async def get_book(self, book_id: str) -> Book:
        """Retrieve a book by ID from the in-memory dictionary.

        Raises:
            ValueError: If the book is not found.
        """
        if book_id not in self._books:
            raise ValueError(f"Book with id {book_id} not found")

        return self._books[book_id]

    async def add_book(self, user_id: str, book: Book) -> Book:
        """Save a book to the in-memory dictionary."""
        self._books[book.id] = book
        self._owners[book.id] = user_id
        self._touch(book.id)
        self._publish(user_id)
        return book

    async def update_book(self, book_id: str, **updates: Any) -> Book:
        """Update fields of an existing book.

        Raises:
            ValueError: If the book is not found.
        """
        if book_id not in self._books:
            raise ValueError(f"Book with id {book_id} not found")

        book = Book.model_validate({**self._books[book_id].model_dump(), **updates})
        self._books[book_id] = book
        self._touch(book_id)
        self._publish(self._owners[book_id])
        return book

    async def delete_book(self, book_id: str) -> None:
        """Delete a book, and its highlights when a highlight repository is attached.

        Raises:
            ValueError: If the book is not found.
        """
        if book_id not in self._books:
            raise ValueError(f"Book with id {book_id} not found")

        del self._books[book_id]
        del self._revisions[book_id]
        owner = self._owners.pop(book_id)
        if self._highlight_repository is not None:
            removed = self._highlight_repository.delete_highlights_for_book(book_id)
            logger.info(f"Deleted {removed} highlights of book {book_id}")
        self._publish(owner)

    def subscribe(self, user_id: str, on_update: BooksListener) -> Unsubscribe:
        """Call ``on_update`` with the user's books now and after every change."""
        self._listeners[user_id].append(on_update)
        on_update(self._books_for(user_id))

        def unsubscribe() -> None:
            if on_update in self._listeners[user_id]:
                self._listeners[user_id].remove(on_update)

        return unsubscribe

    def clear(self) -> None:
        """Clear all books from the dictionary."""
        self._books.clear()
        self._owners.clear()
        self._revisions.clear()

    def _books_for(self, user_id: str) -> list[Book]:
        owned = [book for book_id, book in self._books.items() if self._owners[book_id] == user_id]
        return sorted(owned, key=lambda b: self._revisions[b.id], reverse=True)

    def _touch(self, book_id: str) -> None:
        self._revisions[book_id] = next(self._sequence)

    def _publish(self, user_id: str) -> None:
        books = self._books_for(user_id)
        for listener in list(self._listeners[user_id]):
            listener(books)
