"""Onboarding service driving the BookBuddy first-run flow."""

import logging
from typing import Any, Optional

from ..entities.onboarding import (
    ONBOARDING_STEPS,
    BookGoals,
    OnboardingData,
    OnboardingState,
    OnboardingStep,
    ReadingSchedule,
)
from ..entities.user_settings import ReadingGoals, UserSettings
from ..interfaces.notifier import Notifier
from ..interfaces.user_settings_provider import UserSettingsProvider
from .step_navigator import StepNavigator

logger = logging.getLogger(__name__)


def _has_genres(state: OnboardingState) -> bool:
    return len(state.form_data.selected_genres) > 0


def _has_monthly_goal(state: OnboardingState) -> bool:
    return state.form_data.book_goals.monthly_target > 0


def _has_schedule(state: OnboardingState) -> bool:
    preferences = state.form_data.reading_schedule.preferences
    return len(preferences) > 0 and all(p.days_of_week for p in preferences)


DEFAULT_VALIDATORS = {
    OnboardingStep.GENRES: _has_genres,
    OnboardingStep.GOALS: _has_monthly_goal,
    OnboardingStep.SCHEDULE: _has_schedule,
}

DEFAULT_MESSAGES = {
    OnboardingStep.GENRES: "Please select at least one genre before proceeding",
    OnboardingStep.GOALS: "Please select a reading goal before proceeding",
    OnboardingStep.SCHEDULE: "Please select at least one preferred reading time",
}


class OnboardingService:
    """
    Per-user service that owns the state of one onboarding flow.

    Navigation is delegated to a ``StepNavigator`` over the onboarding
    steps. The collected preferences are only written to the settings
    backend by ``submit``; until then everything lives in memory.
    """

    def __init__(
        self,
        settings_provider: UserSettingsProvider,
        notifier: Notifier,
        validators: Optional[dict] = None,
    ):
        self.settings_provider = settings_provider
        self.notifier = notifier
        self.validators = DEFAULT_VALIDATORS if validators is None else validators
        self.state = OnboardingState(completed_steps=[ONBOARDING_STEPS[0]])
        self.navigator = self._build_navigator()

    def _build_navigator(self) -> StepNavigator[OnboardingStep, OnboardingState]:
        return StepNavigator(
            steps=ONBOARDING_STEPS,
            state_getter=lambda: self.state,
            notifier=self.notifier,
            validators=self.validators,
            messages=DEFAULT_MESSAGES,
            on_step_change=self._on_step_change,
        )

    @property
    def current_step(self) -> OnboardingStep:
        return self.navigator.current_step

    @property
    def is_first_step(self) -> bool:
        return self.navigator.is_first_step

    @property
    def is_last_step(self) -> bool:
        return self.navigator.is_last_step

    def _on_step_change(self, previous: OnboardingStep, target: OnboardingStep) -> None:
        completed = list(self.state.completed_steps)
        moving_forward = ONBOARDING_STEPS.index(target) > ONBOARDING_STEPS.index(previous)
        if moving_forward and previous not in completed:
            completed.append(previous)

        self.state = self.state.model_copy(
            update={
                "current_step": target,
                "progress": self.navigator.progress,
                "completed_steps": completed,
                "form_data": self.state.form_data.model_copy(update={"completed_steps": completed}),
            }
        )
        logger.info(f"Onboarding moved from {previous.value} to {target.value}")

    # ── Navigation ─────────────────────────────────────────

    def go_to(self, step: OnboardingStep) -> bool:
        return self.navigator.handle_step_change(step)

    def next_step(self) -> bool:
        return self.navigator.handle_next_step()

    def previous_step(self) -> bool:
        return self.navigator.handle_previous_step()

    # ── Form data ──────────────────────────────────────────

    def update_data(self, **fields: Any) -> OnboardingData:
        data = OnboardingData.model_validate({**self.state.form_data.model_dump(), **fields})
        self.state = self.state.model_copy(update={"form_data": data})
        return data

    def select_genres(self, genres: list[str]) -> OnboardingData:
        return self.update_data(selected_genres=list(dict.fromkeys(genres)))

    def set_book_goals(self, goals: BookGoals) -> OnboardingData:
        return self.update_data(book_goals=goals)

    def set_reading_schedule(self, schedule: ReadingSchedule) -> OnboardingData:
        return self.update_data(reading_schedule=schedule)

    def reset(self) -> None:
        self.state = OnboardingState(completed_steps=[ONBOARDING_STEPS[0]])
        self.navigator = self._build_navigator()

    # ── Submission ─────────────────────────────────────────

    def submit(self, user_id: str) -> UserSettings:
        """Persist the collected preferences and finish onboarding.

        Raises:
            Exception: Whatever the settings backend raised; the message is
                kept in ``state.error``.
        """
        data = self.state.form_data
        self.state = self.state.model_copy(update={"is_loading": True, "error": None})
        try:
            settings = self.settings_provider.update_settings(
                user_id,
                selected_genres=data.selected_genres,
                reading_goals=ReadingGoals(
                    monthly_target=data.book_goals.monthly_target,
                    yearly_target=data.book_goals.yearly_target,
                ),
            )
        except Exception as e:
            logger.error(f"Failed to save onboarding data for user {user_id}: {e}")
            self.state = self.state.model_copy(update={"is_loading": False, "error": str(e)})
            raise

        completed = list(dict.fromkeys([*self.state.completed_steps, *ONBOARDING_STEPS]))
        self.state = self.state.model_copy(
            update={
                "is_loading": False,
                "completed_steps": completed,
                "progress": 1.0,
                "form_data": data.model_copy(
                    update={"completed_steps": completed, "is_onboarding_complete": True}
                ),
            }
        )
        logger.info(f"Onboarding completed for user {user_id}")
        return settings
