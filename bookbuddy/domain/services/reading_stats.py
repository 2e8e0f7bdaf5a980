"""Derived reading statistics.

All functions here are pure: they only read the collections they are given.
Dates are compared in UTC and ``now`` defaults to the current time.
"""

from collections.abc import Iterable
from datetime import datetime
from typing import Optional

from ..entities.book import Book, ReadingStatus
from ..entities.highlight import EnrichedHighlight, Highlight
from ..entities.stats import ReadingStats
from ..entities.timestamps import as_utc, utc_now

DEFAULT_RECENT_HIGHLIGHTS_LIMIT = 5


def _now(now: Optional[datetime]) -> datetime:
    return as_utc(now) if now is not None else utc_now()


def _same_month(value: datetime, now: datetime) -> bool:
    value = as_utc(value)
    return value.year == now.year and value.month == now.month


def _completed_books(books: Iterable[Book]) -> list[Book]:
    return [
        book
        for book in books
        if book.status == ReadingStatus.COMPLETED and book.completed_date is not None
    ]


def books_completed_this_month(books: Iterable[Book], now: Optional[datetime] = None) -> int:
    """Count completed books whose completion date is in the current calendar month."""
    now = _now(now)
    return sum(1 for book in _completed_books(books) if _same_month(book.completed_date, now))


def books_completed_this_year(books: Iterable[Book], now: Optional[datetime] = None) -> int:
    """Count completed books whose completion date is in the current calendar year."""
    now = _now(now)
    return sum(1 for book in _completed_books(books) if as_utc(book.completed_date).year == now.year)


def highlights_this_month(highlights: Iterable[Highlight], now: Optional[datetime] = None) -> int:
    now = _now(now)
    return sum(1 for h in highlights if _same_month(h.created_at, now))


def recent_highlights(
    highlights: Iterable[Highlight], limit: int = DEFAULT_RECENT_HIGHLIGHTS_LIMIT
) -> list[Highlight]:
    """Most recently created highlights first, at most ``limit`` of them."""
    ordered = sorted(highlights, key=lambda h: h.created_at, reverse=True)
    return ordered[: max(limit, 0)]


def valid_highlights(highlights: Iterable[Highlight], books: Iterable[Book]) -> list[Highlight]:
    """Drop highlights whose book is not in ``books``."""
    book_ids = {book.id for book in books}
    return [h for h in highlights if h.book_id in book_ids]


def calculate_reading_stats(
    books: Iterable[Book], highlights: Iterable[Highlight], now: Optional[datetime] = None
) -> ReadingStats:
    books = list(books)
    now = _now(now)
    return ReadingStats(
        books_completed_this_month=books_completed_this_month(books, now),
        books_completed_this_year=books_completed_this_year(books, now),
        highlights_this_month=highlights_this_month(valid_highlights(highlights, books), now),
    )


def percent_complete(current_page: Optional[int], total_pages: Optional[int]) -> int:
    """Percentage of a book read, clamped to 0..100."""
    current = current_page or 0
    total = total_pages or 0
    if total <= 0 or current <= 0:
        return 0
    if current > total:
        return 100
    return min(round(current / total * 100), 100)


def enrich_highlights(
    highlights: Iterable[Highlight], books: Iterable[Book]
) -> list[EnrichedHighlight]:
    """Join highlights with their books; highlights of unknown books are dropped."""
    by_id = {book.id: book for book in books}
    enriched = []
    for highlight in highlights:
        book = by_id.get(highlight.book_id)
        if book is None:
            continue
        enriched.append(
            EnrichedHighlight(
                **highlight.model_dump(),
                book_title=book.title,
                book_author=book.author,
                book_current_page=book.current_page,
                book_total_pages=book.total_pages,
                reading_progress=percent_complete(book.current_page, book.total_pages),
            )
        )
    return enriched


def is_duplicate_book(books: Iterable[Book], title: str, author: str) -> bool:
    """Whether a book with the same title and author (ignoring case) is already listed."""
    title, author = title.casefold(), author.casefold()
    return any(b.title.casefold() == title and b.author.casefold() == author for b in books)
