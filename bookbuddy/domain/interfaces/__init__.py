"""Domain interfaces for the BookBuddy reading tracker."""

from .auth_provider import AuthenticationError, AuthProvider
from .book_repository import BookRepository
from .highlight_repository import HighlightRepository
from .notifier import Notifier
from .snapshot_storage import SnapshotStorage
from .user_settings_provider import UserSettingsProvider

__all__ = [
    "AuthProvider",
    "AuthenticationError",
    "BookRepository",
    "HighlightRepository",
    "Notifier",
    "SnapshotStorage",
    "UserSettingsProvider",
]
