"""Domain entities for the BookBuddy reading tracker."""

from .book import Book, ReadingStatus
from .highlight import EnrichedHighlight, Highlight
from .onboarding import (
    ONBOARDING_STEPS,
    BookGoals,
    DayOfWeek,
    OnboardingData,
    OnboardingState,
    OnboardingStep,
    ReadingSchedule,
    ReadingTimePreference,
    Toast,
)
from .reading_state import SNAPSHOT_VERSION, PersistedSnapshot, ReadingState
from .stats import ReadingStats, StatusChangeResult
from .user_settings import ReadingGoals, UserIdentity, UserSettings

__all__ = [
    # Library entities
    "Book",
    "ReadingStatus",
    "Highlight",
    "EnrichedHighlight",
    # Store snapshot entities
    "ReadingState",
    "PersistedSnapshot",
    "SNAPSHOT_VERSION",
    # Onboarding entities
    "OnboardingStep",
    "ONBOARDING_STEPS",
    "OnboardingData",
    "OnboardingState",
    "BookGoals",
    "DayOfWeek",
    "ReadingSchedule",
    "ReadingTimePreference",
    "Toast",
    # Settings entities
    "ReadingGoals",
    "UserSettings",
    "UserIdentity",
    # Value objects
    "StatusChangeResult",
    "ReadingStats",
]
