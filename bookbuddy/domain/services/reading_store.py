"""Reading state store holding the books and highlights of the current session."""

import logging
from collections.abc import Iterable, Mapping
from typing import Any, Optional, TypeVar

from pydantic import BaseModel, ValidationError

from ..entities.book import Book
from ..entities.highlight import Highlight
from ..entities.reading_state import PersistedSnapshot, ReadingState
from ..interfaces.snapshot_storage import SnapshotStorage

logger = logging.getLogger(__name__)

DEFAULT_STORAGE_KEY = "book-store"

EntryT = TypeVar("EntryT", bound=BaseModel)


def is_valid_persisted_state(state: Any) -> bool:
    """Structural check: a mapping with list-typed ``books`` and ``highlights``."""
    if not isinstance(state, Mapping):
        return False
    return isinstance(state.get("books"), list) and isinstance(state.get("highlights"), list)


def migrate(persisted_state: Any, version: int) -> dict[str, list[Any]]:
    """Bring a persisted state written by ``version`` up to the current shape.

    Invalid states migrate to the empty state. Version 0 snapshots are used
    as-is with missing collections defaulted to empty.
    """
    if not is_valid_persisted_state(persisted_state):
        return {"books": [], "highlights": []}

    if version == 0:
        return {
            "books": persisted_state.get("books") or [],
            "highlights": persisted_state.get("highlights") or [],
        }

    return dict(persisted_state)


class ReadingStateStore:
    """Process-local store of the user's books and highlights.

    The store is owned by whoever builds it and is handed to its consumers
    explicitly. It hydrates lazily from ``storage`` on first use and writes a
    versioned snapshot after every mutation.

    Every operation is synchronous and total: unmatched ids are silent
    no-ops, a corrupt snapshot hydrates to the empty state, and a failed
    snapshot write keeps the in-memory state.
    """

    def __init__(self, storage: SnapshotStorage, key: str = DEFAULT_STORAGE_KEY):
        self._storage = storage
        self._key = key
        self._state = ReadingState()
        self._has_hydrated = False

    @property
    def has_hydrated(self) -> bool:
        return self._has_hydrated

    @property
    def state(self) -> ReadingState:
        self._ensure_hydrated()
        return self._state

    @property
    def books(self) -> tuple[Book, ...]:
        return self.state.books

    @property
    def highlights(self) -> tuple[Highlight, ...]:
        return self.state.highlights

    # ── Hydration ──────────────────────────────────────────

    def hydrate(self) -> ReadingState:
        """Load the persisted snapshot, replacing the in-memory state."""
        raw = self._storage.load(self._key)
        self._state = self._parse_snapshot(raw)
        self._has_hydrated = True
        logger.info(
            f"Hydrated reading state '{self._key}' with {len(self._state.books)} books "
            f"and {len(self._state.highlights)} highlights"
        )
        return self._state

    def _ensure_hydrated(self) -> None:
        if not self._has_hydrated:
            self.hydrate()

    def _parse_snapshot(self, raw: Any) -> ReadingState:
        if raw is None:
            return ReadingState()

        if isinstance(raw, Mapping) and "state" in raw:
            version = raw.get("version") or 0
            persisted = raw.get("state")
        else:
            # Snapshots written before the envelope existed hold the state directly.
            version = 0
            persisted = raw

        if not isinstance(version, int) or not is_valid_persisted_state(persisted):
            logger.warning(f"Discarding invalid reading state snapshot '{self._key}'")
            return ReadingState()

        migrated = migrate(persisted, version)
        return ReadingState(
            books=self._validate_entries(Book, migrated["books"]),
            highlights=self._validate_entries(Highlight, migrated["highlights"]),
        )

    def _validate_entries(self, model: type[EntryT], entries: list[Any]) -> tuple[EntryT, ...]:
        """Validate snapshot entries one by one, dropping those that do not parse."""
        valid = []
        for entry in entries:
            try:
                valid.append(model.model_validate(entry))
            except ValidationError as e:
                entry_id = entry.get("id") if isinstance(entry, Mapping) else None
                logger.warning(
                    f"Dropping invalid {model.__name__.lower()} {entry_id!r} from reading state "
                    f"snapshot '{self._key}': {e.error_count()} errors"
                )
        return tuple(valid)

    def _commit(self, state: ReadingState) -> ReadingState:
        self._state = state
        snapshot = PersistedSnapshot.from_state(state)
        try:
            self._storage.save(self._key, snapshot.model_dump(mode="json"))
        except OSError as e:
            logger.warning(f"Could not persist reading state '{self._key}': {e}")
        return state

    # ── Mutations ──────────────────────────────────────────

    def add_book(self, book: Book) -> ReadingState:
        """Append a book. Callers are responsible for unique ids."""
        current = self.state
        return self._commit(current.model_copy(update={"books": current.books + (book,)}))

    def add_highlight(self, highlight: Highlight) -> ReadingState:
        """Append a highlight. The owning book is not checked here."""
        current = self.state
        return self._commit(
            current.model_copy(update={"highlights": current.highlights + (highlight,)})
        )

    def toggle_favorite_highlight(self, highlight_id: str) -> ReadingState:
        current = self.state
        if current.find_highlight(highlight_id) is None:
            return current

        highlights = tuple(
            h.model_copy(update={"is_favorite": not h.is_favorite}) if h.id == highlight_id else h
            for h in current.highlights
        )
        return self._commit(current.model_copy(update={"highlights": highlights}))

    def update_reading_progress(self, book_id: str, current_page: int) -> ReadingState:
        """Record the page reached in a book.

        The page is stored as given, without clamping to ``total_pages``,
        and the book's status is left untouched.
        """
        return self.update_book(book_id, current_page=current_page)

    def update_book(self, book_id: str, **changes: Any) -> ReadingState:
        current = self.state
        if current.find_book(book_id) is None:
            return current

        books = tuple(
            b.model_copy(update=changes) if b.id == book_id else b for b in current.books
        )
        return self._commit(current.model_copy(update={"books": books}))

    def delete_book(self, book_id: str) -> ReadingState:
        """Remove a book together with its highlights."""
        current = self.state
        if current.find_book(book_id) is None:
            return current

        return self._commit(
            ReadingState(
                books=tuple(b for b in current.books if b.id != book_id),
                highlights=tuple(h for h in current.highlights if h.book_id != book_id),
            )
        )

    def delete_highlight(self, highlight_id: str) -> ReadingState:
        current = self.state
        if current.find_highlight(highlight_id) is None:
            return current

        highlights = tuple(h for h in current.highlights if h.id != highlight_id)
        return self._commit(current.model_copy(update={"highlights": highlights}))

    def replace_books(self, books: Iterable[Book]) -> ReadingState:
        current = self.state
        return self._commit(current.model_copy(update={"books": tuple(books)}))

    # ── Selectors ──────────────────────────────────────────

    def get_book(self, book_id: str) -> Optional[Book]:
        return self.state.find_book(book_id)

    def favorite_highlights(self) -> list[Highlight]:
        return [h for h in self.highlights if h.is_favorite]

    def highlights_for_book(self, book_id: str, limit: Optional[int] = None) -> list[Highlight]:
        """Highlights of one book, most recently touched first."""
        matching = sorted(
            (h for h in self.highlights if h.book_id == book_id),
            key=lambda h: h.last_touched_at,
            reverse=True,
        )
        return matching[:limit] if limit else matching
