"""Local in-memory implementation of UserSettingsProvider."""

from typing import Any, Dict, Optional

from ..domain.entities.timestamps import utc_now
from ..domain.entities.user_settings import ReadingGoals, UserSettings
from ..domain.interfaces.user_settings_provider import UserSettingsProvider


class LocalUserSettingsProvider(UserSettingsProvider):
    """Local in-memory implementation of the UserSettingsProvider protocol.

    Stores user settings in a dictionary for testing and development purposes.
    """

    def __init__(self):
        self._settings: Dict[str, UserSettings] = {}

    def get_settings(self, user_id: str) -> Optional[UserSettings]:
        """Retrieve the settings of a user from the in-memory dictionary.

        Args:
            user_id: The unique identifier of the user.

        Returns:
            Optional[UserSettings]: The settings, or None if none were saved yet.
        """
        return self._settings.get(user_id)

    def update_settings(self, user_id: str, **fields: Any) -> UserSettings:
        """Create the user's settings or merge ``fields`` into the existing ones."""
        current = self._settings.get(user_id) or UserSettings()
        settings = UserSettings.model_validate(
            {**current.model_dump(), **fields, "updated_at": utc_now()}
        )
        self._settings[user_id] = settings
        return settings

    def update_reading_goals(self, user_id: str, goals: ReadingGoals) -> UserSettings:
        return self.update_settings(user_id, reading_goals=goals)

    def update_genre_preferences(self, user_id: str, genres: list[str]) -> UserSettings:
        return self.update_settings(user_id, selected_genres=genres)

    def clear(self) -> None:
        """Clear all settings from the dictionary."""
        self._settings.clear()

    def get_all_settings(self) -> Dict[str, UserSettings]:
        return self._settings.copy()
