"""BookBuddy Controller for handling business logic and coordination."""

import logging
from typing import Any, Dict, Optional

from ..domain.entities import (
    Book,
    Highlight,
    OnboardingStep,
    ReadingStats,
    ReadingStatus,
    StatusChangeResult,
    Toast,
    UserIdentity,
    UserSettings,
)
from ..domain.interfaces.auth_provider import AuthProvider
from ..domain.interfaces.book_repository import BookRepository
from ..domain.interfaces.highlight_repository import HighlightRepository
from ..domain.interfaces.snapshot_storage import SnapshotStorage
from ..domain.interfaces.user_settings_provider import UserSettingsProvider
from ..domain.services import LibraryService, OnboardingService, ReadingStateStore
from ..domain.services.reading_stats import calculate_reading_stats, recent_highlights
from ..infrastructure.collecting_notifier import CollectingNotifier

logger = logging.getLogger(__name__)


class BookBuddyController:
    """
    Controller for coordinating BookBuddy operations.

    This controller is injected with all necessary providers and handles
    the business logic for each endpoint, keeping the API layer thin. It
    owns one reading state store, library service and notifier per user,
    and one onboarding flow per user while onboarding is in progress.
    """

    def __init__(
        self,
        snapshot_storage: SnapshotStorage,
        settings_provider: UserSettingsProvider,
        auth_provider: AuthProvider,
        book_repository: Optional[BookRepository] = None,
        highlight_repository: Optional[HighlightRepository] = None,
        snapshot_key: str = "book-store",
        recent_highlights_limit: int = 5,
    ):
        """
        Initialize the controller with injected dependencies.

        Args:
            snapshot_storage: Storage for the per-user reading state snapshots
            settings_provider: Provider for user settings
            auth_provider: Provider for session tokens
            book_repository: Backend copy of the library, if any
            highlight_repository: Backend copy of the highlights, if any
            snapshot_key: Prefix of the per-user snapshot keys
            recent_highlights_limit: Default size of the recent highlights list
        """
        self.snapshot_storage = snapshot_storage
        self.settings_provider = settings_provider
        self.auth_provider = auth_provider
        self.book_repository = book_repository
        self.highlight_repository = highlight_repository
        self.snapshot_key = snapshot_key
        self.recent_highlights_limit = recent_highlights_limit

        self._libraries: Dict[str, LibraryService] = {}
        self._notifiers: Dict[str, CollectingNotifier] = {}
        self._onboarding: Dict[str, OnboardingService] = {}

        logger.info("BookBuddyController initialized with providers")

    def get_health_status(self) -> Dict[str, Any]:
        return {
            "status": "healthy",
            "active_libraries": len(self._libraries),
            "active_onboarding_flows": len(self._onboarding),
        }

    # ── Authentication ─────────────────────────────────────

    def sign_in(self, identity: UserIdentity) -> str:
        token = self.auth_provider.issue_token(identity)
        logger.info(f"Issued session token for user {identity.user_id}")
        return token

    def authenticate(self, token: Optional[str]) -> UserIdentity:
        return self.auth_provider.authenticate(token)

    def sign_out(self, token: str) -> None:
        self.auth_provider.sign_out(token)

    # ── Per-user state ─────────────────────────────────────

    def notifier_for(self, user_id: str) -> CollectingNotifier:
        if user_id not in self._notifiers:
            self._notifiers[user_id] = CollectingNotifier()
        return self._notifiers[user_id]

    def drain_notifications(self, user_id: str) -> list[Toast]:
        return self.notifier_for(user_id).drain()

    async def library_for(self, user_id: str) -> LibraryService:
        if user_id in self._libraries:
            return self._libraries[user_id]

        store = ReadingStateStore(self.snapshot_storage, key=f"{self.snapshot_key}-{user_id}")
        library = LibraryService(
            store=store,
            notifier=self.notifier_for(user_id),
            book_repository=self.book_repository,
            highlight_repository=self.highlight_repository,
        )
        if self.book_repository is not None:
            await library.sync_from_backend(user_id)
        self._libraries[user_id] = library
        return library

    # ── Books ──────────────────────────────────────────────

    async def list_books(self, user_id: str, status: Optional[ReadingStatus] = None) -> list[Book]:
        library = await self.library_for(user_id)
        books = list(library.store.books)
        if status is not None:
            books = [book for book in books if book.status == status]
        return books

    async def get_book(self, user_id: str, book_id: str) -> Book:
        library = await self.library_for(user_id)
        book = library.store.get_book(book_id)
        if book is None:
            raise ValueError(f"Book with id {book_id} not found")
        return book

    async def add_book(self, user_id: str, book: Book) -> Optional[Book]:
        library = await self.library_for(user_id)
        return await library.add_book(user_id, book)

    async def record_progress(self, user_id: str, book_id: str, current_page: int) -> Book:
        library = await self.library_for(user_id)
        book = await library.record_progress(book_id, current_page)
        if book is None:
            raise ValueError(f"Book with id {book_id} not found")
        return book

    async def change_status(
        self, user_id: str, book_id: str, new_status: ReadingStatus
    ) -> StatusChangeResult:
        library = await self.library_for(user_id)
        return await library.change_status(book_id, new_status)

    async def delete_book(self, user_id: str, book_id: str) -> Book:
        library = await self.library_for(user_id)
        return await library.delete_book(book_id)

    # ── Highlights ─────────────────────────────────────────

    async def list_highlights(
        self, user_id: str, book_id: Optional[str] = None, favorites_only: bool = False
    ) -> list[Highlight]:
        library = await self.library_for(user_id)
        store = library.store
        if book_id is not None:
            highlights = store.highlights_for_book(book_id)
        else:
            highlights = list(store.highlights)
        if favorites_only:
            highlights = [h for h in highlights if h.is_favorite]
        return highlights

    async def add_highlight(self, user_id: str, highlight: Highlight) -> Highlight:
        library = await self.library_for(user_id)
        return await library.add_highlight(user_id, highlight)

    async def toggle_favorite(self, user_id: str, highlight_id: str) -> Highlight:
        library = await self.library_for(user_id)
        highlight = await library.toggle_favorite(highlight_id)
        if highlight is None:
            raise ValueError(f"Highlight with id {highlight_id} not found")
        return highlight

    async def delete_highlight(self, user_id: str, highlight_id: str) -> Highlight:
        library = await self.library_for(user_id)
        return await library.delete_highlight(highlight_id)

    async def recent_highlights(self, user_id: str, limit: Optional[int] = None) -> list[Highlight]:
        library = await self.library_for(user_id)
        if limit is None:
            limit = self.recent_highlights_limit
        return recent_highlights(library.store.highlights, limit)

    async def get_stats(self, user_id: str) -> ReadingStats:
        library = await self.library_for(user_id)
        return calculate_reading_stats(library.store.books, library.store.highlights)

    # ── Onboarding ─────────────────────────────────────────

    def onboarding_for(self, user_id: str) -> OnboardingService:
        if user_id not in self._onboarding:
            self._onboarding[user_id] = OnboardingService(
                settings_provider=self.settings_provider,
                notifier=self.notifier_for(user_id),
            )
        return self._onboarding[user_id]

    def change_onboarding_step(self, user_id: str, step: OnboardingStep) -> bool:
        return self.onboarding_for(user_id).go_to(step)

    def next_onboarding_step(self, user_id: str) -> bool:
        return self.onboarding_for(user_id).next_step()

    def previous_onboarding_step(self, user_id: str) -> bool:
        return self.onboarding_for(user_id).previous_step()

    def update_onboarding_data(self, user_id: str, **fields: Any) -> None:
        self.onboarding_for(user_id).update_data(**fields)

    def submit_onboarding(self, user_id: str) -> UserSettings:
        """Save the onboarding preferences and discard the finished flow."""
        settings = self.onboarding_for(user_id).submit(user_id)
        del self._onboarding[user_id]
        return settings

    # ── Settings ───────────────────────────────────────────

    def get_settings(self, user_id: str) -> UserSettings:
        return self.settings_provider.get_settings(user_id) or UserSettings()

    def update_settings(self, user_id: str, **fields: Any) -> UserSettings:
        return self.settings_provider.update_settings(user_id, **fields)
