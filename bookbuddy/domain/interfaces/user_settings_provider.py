"""User settings provider protocol."""

from typing import Any, Optional, Protocol, runtime_checkable

from ..entities.user_settings import ReadingGoals, UserSettings


@runtime_checkable
class UserSettingsProvider(Protocol):
    """Protocol for user settings backends."""

    def get_settings(self, user_id: str) -> Optional[UserSettings]:
        """Retrieve the settings of a user.

        Args:
            user_id: The unique identifier of the user.

        Returns:
            Optional[UserSettings]: The settings, or None if the user has none yet.
        """
        ...

    def update_settings(self, user_id: str, **fields: Any) -> UserSettings:
        """Create or partially update the settings of a user.

        Args:
            user_id: The unique identifier of the user.
            **fields: ``UserSettings`` fields to change.

        Returns:
            UserSettings: The stored settings.
        """
        ...

    def update_reading_goals(self, user_id: str, goals: ReadingGoals) -> UserSettings:
        """Replace the reading goals of a user."""
        ...

    def update_genre_preferences(self, user_id: str, genres: list[str]) -> UserSettings:
        """Replace the preferred genres of a user."""
        ...
