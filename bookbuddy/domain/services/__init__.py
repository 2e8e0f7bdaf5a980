"""Domain services for the BookBuddy reading tracker."""

from .library_service import LibraryService
from .onboarding_service import OnboardingService
from .reading_store import ReadingStateStore
from .status_rules import apply_status_change, can_change_status
from .step_navigator import StepNavigator

__all__ = [
    "LibraryService",
    "OnboardingService",
    "ReadingStateStore",
    "StepNavigator",
    "apply_status_change",
    "can_change_status",
]
