"""DynamoDB implementation of UserSettingsProvider."""

from decimal import Decimal
from typing import Any, Dict, Optional

import boto3

from ..domain.entities.timestamps import utc_now
from ..domain.entities.user_settings import ReadingGoals, UserSettings
from ..domain.interfaces.user_settings_provider import UserSettingsProvider


class DynamoDBUserSettingsProvider(UserSettingsProvider):
    """DynamoDB implementation of the UserSettingsProvider protocol."""

    def __init__(self, table_name: str, region_name: str = "us-east-1"):
        """Initialize the DynamoDB user settings provider.

        Args:
            table_name: The name of the DynamoDB table.
            region_name: AWS region name (default: us-east-1).
        """
        self.table_name = table_name
        self.dynamodb = boto3.resource("dynamodb", region_name=region_name)
        self.table = self.dynamodb.Table(table_name)

    def get_settings(self, user_id: str) -> Optional[UserSettings]:
        """Retrieve the settings of a user from DynamoDB.

        Args:
            user_id: The unique identifier of the user.

        Returns:
            Optional[UserSettings]: The settings, or None if the user has none yet.
        """
        response = self.table.get_item(Key={"id": user_id})

        if "Item" not in response:
            return None

        return self._item_to_settings(response["Item"])

    def update_settings(self, user_id: str, **fields: Any) -> UserSettings:
        """Create the user's settings or merge ``fields`` into the stored ones."""
        current = self.get_settings(user_id) or UserSettings()
        settings = UserSettings.model_validate(
            {**current.model_dump(), **fields, "updated_at": utc_now()}
        )
        self.table.put_item(Item=self._settings_to_item(user_id, settings))
        return settings

    def update_reading_goals(self, user_id: str, goals: ReadingGoals) -> UserSettings:
        return self.update_settings(user_id, reading_goals=goals)

    def update_genre_preferences(self, user_id: str, genres: list[str]) -> UserSettings:
        return self.update_settings(user_id, selected_genres=genres)

    def _settings_to_item(self, user_id: str, settings: UserSettings) -> Dict[str, Any]:
        return {
            "id": user_id,
            "reading_goals": {
                "monthly_target": settings.reading_goals.monthly_target,
                "yearly_target": settings.reading_goals.yearly_target,
            },
            "selected_genres": list(settings.selected_genres),
            "updated_at": settings.updated_at.isoformat(),
        }

    def _item_to_settings(self, item: Dict[str, Any]) -> UserSettings:
        """Convert a DynamoDB item to a UserSettings entity.

        Args:
            item: The DynamoDB item.

        Returns:
            UserSettings: The settings entity.
        """
        goals = item.get("reading_goals") or {}
        return UserSettings(
            reading_goals=ReadingGoals(
                monthly_target=int(goals.get("monthly_target", Decimal(0))),
                yearly_target=int(goals.get("yearly_target", Decimal(0))),
            ),
            selected_genres=list(item.get("selected_genres", [])),
            updated_at=item.get("updated_at") or utc_now(),
        )
