"""User settings and identity entities."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from .timestamps import utc_now


class ReadingGoals(BaseModel):
    """Reading goals stored in the user's settings."""

    monthly_target: int = Field(default=0, ge=0)
    yearly_target: int = Field(default=0, ge=0)


class UserSettings(BaseModel):
    """Per-user preferences kept by the settings backend."""

    reading_goals: ReadingGoals = Field(default_factory=ReadingGoals)
    selected_genres: list[str] = Field(default_factory=list)
    updated_at: datetime = Field(default_factory=utc_now)

    class Config:
        """Pydantic model configuration."""

        json_schema_extra = {
            "example": {
                "reading_goals": {"monthly_target": 2, "yearly_target": 24},
                "selected_genres": ["fantasy", "history"],
            }
        }


class UserIdentity(BaseModel):
    """Authenticated user as seen by the application."""

    user_id: str = Field(min_length=1)
    email: Optional[str] = None
    name: Optional[str] = None
