"""Business rules for reading status transitions."""

from datetime import datetime
from typing import Optional

from ..entities.book import Book, ReadingStatus
from ..entities.stats import StatusChangeResult
from ..entities.timestamps import utc_now

ALREADY_IN_STATUS = "Book is already in this status"
COMPLETED_TO_NOT_STARTED = "Cannot change a completed book back to not started"
NOT_STARTED_ONLY_FROM_IN_PROGRESS = "Can only move to not started from in progress"
ONLY_BOOK_IN_PROGRESS = "Cannot change status of the only book in progress except to completed"


def can_change_status(
    book: Book, new_status: ReadingStatus, is_only_book: bool = False
) -> StatusChangeResult:
    """Decide whether ``book`` may move to ``new_status``.

    Rules are checked in order and the first match decides.
    """
    if book.status == new_status:
        return StatusChangeResult(allowed=False, reason=ALREADY_IN_STATUS)

    if book.status == ReadingStatus.COMPLETED and new_status == ReadingStatus.NOT_STARTED:
        return StatusChangeResult(allowed=False, reason=COMPLETED_TO_NOT_STARTED)

    if new_status == ReadingStatus.NOT_STARTED and book.status != ReadingStatus.IN_PROGRESS:
        return StatusChangeResult(allowed=False, reason=NOT_STARTED_ONLY_FROM_IN_PROGRESS)

    if (
        is_only_book
        and book.status == ReadingStatus.IN_PROGRESS
        and new_status not in (ReadingStatus.IN_PROGRESS, ReadingStatus.COMPLETED)
    ):
        return StatusChangeResult(allowed=False, reason=ONLY_BOOK_IN_PROGRESS)

    return StatusChangeResult(allowed=True)


def status_changes(
    book: Book, new_status: ReadingStatus, now: Optional[datetime] = None
) -> dict:
    """Field updates that accompany an allowed move of ``book`` to ``new_status``.

    Starting a book stamps ``start_date``; completing it stamps
    ``completed_date`` and jumps to the last page; resetting it clears both
    dates and the page.
    """
    now = now or utc_now()
    changes: dict = {"status": new_status}

    if new_status == ReadingStatus.NOT_STARTED:
        changes.update(start_date=None, completed_date=None, current_page=0)
        return changes

    if book.start_date is None:
        changes["start_date"] = now

    if new_status == ReadingStatus.COMPLETED:
        changes["completed_date"] = now
        changes["current_page"] = book.total_pages
    elif book.status == ReadingStatus.COMPLETED:
        changes["completed_date"] = None

    return changes


def apply_status_change(
    book: Book, new_status: ReadingStatus, now: Optional[datetime] = None
) -> Book:
    """Return ``book`` moved to ``new_status`` with its dates and page adjusted."""
    return Book.model_validate({**book.model_dump(), **status_changes(book, new_status, now)})
