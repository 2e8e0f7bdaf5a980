"""Infrastructure layer components."""

from .collecting_notifier import CollectingNotifier
from .dynamodb_book_repository import DynamoDBBookRepository
from .dynamodb_user_settings_provider import DynamoDBUserSettingsProvider
from .jwt_auth_provider import JwtAuthProvider
from .local_book_repository import LocalBookRepository
from .local_highlight_repository import LocalHighlightRepository
from .local_user_settings_provider import LocalUserSettingsProvider
from .snapshot_storage import InMemorySnapshotStorage, JsonFileSnapshotStorage

__all__ = [
    "CollectingNotifier",
    "DynamoDBBookRepository",
    "DynamoDBUserSettingsProvider",
    "InMemorySnapshotStorage",
    "JsonFileSnapshotStorage",
    "JwtAuthProvider",
    "LocalBookRepository",
    "LocalHighlightRepository",
    "LocalUserSettingsProvider",
]
