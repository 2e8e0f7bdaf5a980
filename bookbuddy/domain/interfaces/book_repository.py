"""Book Repository interface."""

from typing import Any, Callable, Protocol, runtime_checkable

from ..entities.book import Book

BooksListener = Callable[[list[Book]], None]
Unsubscribe = Callable[[], None]


@runtime_checkable
class BookRepository(Protocol):
    """Protocol defining the interface for book repositories.

    This interface can be implemented by different storage backends
    (in-memory, DynamoDB, etc.) to provide the authoritative copy of a
    user's library.
    """

    async def list_books(self, user_id: str) -> list[Book]:
        """List the books owned by a user, most recently updated first.

        Args:
            user_id: The owner of the books.

        Returns:
            list[Book]: The user's books.
        """
        ...

    async def get_book(self, book_id: str) -> Book:
        """Retrieve a book by ID.

        Args:
            book_id: The unique identifier of the book.

        Returns:
            Book: The book entity.

        Raises:
            ValueError: If the book is not found.
        """
        ...

    async def add_book(self, user_id: str, book: Book) -> Book:
        """Add a book to a user's library.

        Args:
            user_id: The owner of the book.
            book: The book entity to store.

        Returns:
            Book: The stored book.
        """
        ...

    async def update_book(self, book_id: str, **updates: Any) -> Book:
        """Apply field updates to an existing book.

        Args:
            book_id: The unique identifier of the book.
            **updates: Field values to change.

        Returns:
            Book: The updated book.

        Raises:
            ValueError: If the book is not found.
        """
        ...

    async def delete_book(self, book_id: str) -> None:
        """Delete a book.

        Args:
            book_id: The unique identifier of the book.

        Raises:
            ValueError: If the book is not found.
        """
        ...

    def subscribe(self, user_id: str, on_update: BooksListener) -> Unsubscribe:
        """Register a callback receiving the user's books after every change.

        Args:
            user_id: The owner of the books.
            on_update: Called with the full, current list of books.

        Returns:
            Unsubscribe: Callable removing the subscription.
        """
        ...
