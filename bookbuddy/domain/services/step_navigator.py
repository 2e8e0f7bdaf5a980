"""Generic step navigator for multi-step forms."""

import logging
from collections.abc import Callable, Hashable, Mapping, Sequence
from typing import Generic, Optional, TypeVar

from ..entities.onboarding import Toast
from ..interfaces.notifier import Notifier

logger = logging.getLogger(__name__)

StepT = TypeVar("StepT", bound=Hashable)
StateT = TypeVar("StateT")

StepValidator = Callable[[StateT], bool]
StepChangeCallback = Callable[[StepT, StepT], None]

INCOMPLETE_STEP_TITLE = "Please complete this step"
INCOMPLETE_STEP_MESSAGE = "Fill in all required information before proceeding."


class StepNavigator(Generic[StepT, StateT]):
    """Finite-state stepper over a fixed, ordered sequence of steps.

    Moving backwards is always allowed. Moving forward is allowed one step
    at a time, and only when the validator registered for the current step
    accepts the state returned by ``state_getter``. Steps without a
    validator always pass.
    """

    def __init__(
        self,
        steps: Sequence[StepT],
        state_getter: Callable[[], StateT],
        notifier: Notifier,
        validators: Optional[Mapping[StepT, StepValidator]] = None,
        messages: Optional[Mapping[StepT, str]] = None,
        on_step_change: Optional[StepChangeCallback] = None,
        initial_step: Optional[StepT] = None,
    ):
        if not steps:
            raise ValueError("A step navigator needs at least one step")
        if len(set(steps)) != len(steps):
            raise ValueError("Steps must be unique")

        self._steps: tuple[StepT, ...] = tuple(steps)
        self._state_getter = state_getter
        self._notifier = notifier
        self._validators: dict[StepT, StepValidator] = dict(validators or {})
        self._messages: dict[StepT, str] = dict(messages or {})
        self._on_step_change = on_step_change
        self._current_step: StepT = self._steps[0]
        if initial_step is not None:
            self._current_step = self._steps[self.index_of(initial_step)]

    @property
    def steps(self) -> tuple[StepT, ...]:
        return self._steps

    @property
    def current_step(self) -> StepT:
        return self._current_step

    @property
    def current_index(self) -> int:
        return self._steps.index(self._current_step)

    @property
    def is_first_step(self) -> bool:
        return self._current_step == self._steps[0]

    @property
    def is_last_step(self) -> bool:
        return self._current_step == self._steps[-1]

    @property
    def progress(self) -> float:
        """Completion fraction of the current position, from 0.0 to 1.0."""
        if len(self._steps) == 1:
            return 1.0
        return self.current_index / (len(self._steps) - 1)

    def index_of(self, step: StepT) -> int:
        try:
            return self._steps.index(step)
        except ValueError:
            raise ValueError(f"Unknown step {step!r}") from None

    def validate_step(self, step: StepT) -> bool:
        validator = self._validators.get(step)
        if validator is None:
            return True
        return bool(validator(self._state_getter()))

    def handle_step_change(self, target_step: StepT) -> bool:
        """Move to ``target_step`` if the navigation rules allow it.

        Returns:
            bool: True when the current step changed.
        """
        current_index = self.current_index
        target_index = self.index_of(target_step)

        if target_index > current_index + 1:
            logger.debug(f"Ignoring jump from {self._current_step!r} to {target_step!r}")
            return False

        if target_index > current_index and not self.validate_step(self._current_step):
            self._notifier.notify(
                Toast(
                    title=INCOMPLETE_STEP_TITLE,
                    description=self._messages.get(self._current_step, INCOMPLETE_STEP_MESSAGE),
                    variant="destructive",
                )
            )
            return False

        if target_index == current_index:
            return False

        previous = self._current_step
        self._current_step = target_step
        if self._on_step_change is not None:
            self._on_step_change(previous, target_step)
        return True

    def handle_next_step(self) -> bool:
        next_index = self.current_index + 1
        if next_index >= len(self._steps):
            return False
        return self.handle_step_change(self._steps[next_index])

    def handle_previous_step(self) -> bool:
        previous_index = self.current_index - 1
        if previous_index < 0:
            return False
        return self.handle_step_change(self._steps[previous_index])
