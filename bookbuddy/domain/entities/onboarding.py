"""Onboarding entities for the BookBuddy first-run flow."""

from enum import Enum
from typing import Literal, Optional

from pydantic import BaseModel, Field


class OnboardingStep(str, Enum):
    """Steps of the onboarding flow, in order."""

    WELCOME = "welcome"
    GENRES = "genres"
    GOALS = "goals"
    SCHEDULE = "schedule"
    COMPLETE = "complete"


ONBOARDING_STEPS: tuple[OnboardingStep, ...] = tuple(OnboardingStep)


class DayOfWeek(str, Enum):
    """Days a reading session can be scheduled on."""

    MONDAY = "monday"
    TUESDAY = "tuesday"
    WEDNESDAY = "wednesday"
    THURSDAY = "thursday"
    FRIDAY = "friday"
    SATURDAY = "saturday"
    SUNDAY = "sunday"


class ReadingTimePreference(BaseModel):
    """A recurring reading slot."""

    time: str = Field(pattern=r"^([01]\d|2[0-3]):[0-5]\d$", description="24-hour HH:MM")
    days_of_week: list[DayOfWeek] = Field(default_factory=list)
    duration: int = Field(default=30, ge=1, description="Duration in minutes")
    notifications: bool = True


class ReadingSchedule(BaseModel):
    preferences: list[ReadingTimePreference] = Field(default_factory=list)


class BookGoals(BaseModel):
    """Number of books the user wants to finish."""

    monthly_target: int = Field(default=0, ge=0)
    yearly_target: int = Field(default=0, ge=0)


class OnboardingData(BaseModel):
    """Preferences collected by the onboarding form."""

    selected_genres: list[str] = Field(default_factory=list)
    book_goals: BookGoals = Field(default_factory=BookGoals)
    reading_schedule: ReadingSchedule = Field(default_factory=ReadingSchedule)
    completed_steps: list[OnboardingStep] = Field(default_factory=list)
    is_onboarding_complete: bool = False


class OnboardingState(BaseModel):
    """Full state of an onboarding flow in progress."""

    current_step: OnboardingStep = OnboardingStep.WELCOME
    completed_steps: list[OnboardingStep] = Field(default_factory=list)
    form_data: OnboardingData = Field(default_factory=OnboardingData)
    progress: float = Field(default=0.0, ge=0.0, le=1.0)
    is_loading: bool = False
    error: Optional[str] = None


class Toast(BaseModel):
    """A user-facing notification."""

    title: str
    description: str = ""
    variant: Literal["default", "destructive"] = "default"
