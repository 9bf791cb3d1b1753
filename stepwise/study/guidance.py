"""
Guidance Derivation.

Short, parent-facing messages derived from mastery state. Both entry points
are pure: they read their arguments, never mutate anything, and answer
``None`` for input they cannot make sense of instead of raising.

- derive_word_guidance: feedback for the card currently on screen
- derive_session_guidance: set-level messages at three lifecycle moments
  (first card ever, level transition, full completion)
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, replace
from enum import Enum

from loguru import logger

from stepwise.core.errors import OutOfRangeInput
from stepwise.core.models import AttemptRecord, Outcome


class Urgency(str, Enum):
    """How a guidance message should be presented."""

    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"

    @property
    def color(self) -> str:
        """Rich color for CLI display."""
        return {
            Urgency.INFO: "cyan",
            Urgency.SUCCESS: "green",
            Urgency.WARNING: "yellow",
        }[self]

    @property
    def emoji(self) -> str:
        return {
            Urgency.INFO: "💡",
            Urgency.SUCCESS: "✨",
            Urgency.WARNING: "🤔",
        }[self]


class GuidanceCategory(str, Enum):
    """Which situation a message describes."""

    # Word level
    INITIAL = "initial"
    FIRST_SUCCESS = "first_success"
    FIRST_WRONG = "first_wrong"
    PROGRESSING = "progressing"
    MASTERED = "mastered"
    STRUGGLING = "struggling"
    RETRY = "retry"

    # Session level
    SET_INTRODUCTION = "set_introduction"
    LEVEL_TRANSITION = "level_transition"
    COMPLETION = "completion"


@dataclass(frozen=True)
class Guidance:
    """A message plus how loudly to show it."""

    category: GuidanceCategory
    message: str
    urgency: Urgency
    tip: str | None = None

    def with_tip(self, tip: str | None) -> Guidance:
        return replace(self, tip=tip) if tip else self

    def to_dict(self) -> dict[str, str | None]:
        return {
            "category": self.category.value,
            "message": self.message,
            "urgency": self.urgency.value,
            "tip": self.tip,
        }


@dataclass
class GuidanceConfig:
    """Thresholds for word-level guidance."""

    accuracy_floor: float = 0.4  # recent accuracy below this is struggling
    reveal_ceiling: int = 3  # this many reveals or more is struggling
    recent_window: int = 5  # attempts considered for recent accuracy


# ============================================================================
# WORD GUIDANCE
# ============================================================================


def _outcomes(attempts: Sequence[AttemptRecord | Outcome | str | bool]) -> list[Outcome]:
    outcomes = []
    for attempt in attempts:
        raw = attempt.outcome if isinstance(attempt, AttemptRecord) else attempt
        try:
            outcomes.append(Outcome.parse(raw))
        except ValueError as exc:
            raise OutOfRangeInput("attempt outcome", raw) from exc
    return outcomes


def _count(field: str, value: object, minimum: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < minimum:
        raise OutOfRangeInput(field, value)
    return value


def _flag(field: str, value: object) -> bool:
    if not isinstance(value, bool):
        raise OutOfRangeInput(field, value)
    return value


def recent_accuracy(outcomes: Sequence[Outcome], window: int) -> float:
    """Share of correct outcomes among the last ``window`` attempts."""
    recent = list(outcomes)[-max(1, window):]
    if not recent:
        return 0.0
    return sum(1 for o in recent if o is Outcome.CORRECT) / len(recent)


def derive_word_guidance(
    mastery_step: int,
    attempts: Sequence[AttemptRecord | Outcome | str | bool],
    reveal_count: int,
    mastery_threshold: int = 2,
    config: GuidanceConfig | None = None,
) -> Guidance | None:
    """
    Feedback for a single word.

    Args:
        mastery_step: Current step of the word
        attempts: Attempt history, oldest first
        reveal_count: Times the answer was revealed
        mastery_threshold: Step at which the word counts as mastered
        config: Guidance thresholds

    Returns:
        Guidance, or None when the input is out of range
    """
    config = config or GuidanceConfig()
    try:
        _count("mastery_step", mastery_step, 0)
        _count("reveal_count", reveal_count, 0)
        _count("mastery_threshold", mastery_threshold, 1)
        if isinstance(attempts, (str, bytes)) or not isinstance(attempts, Sequence):
            raise OutOfRangeInput("attempts", attempts)
        outcomes = _outcomes(attempts)
    except OutOfRangeInput as exc:
        logger.warning(f"No word guidance: {exc}")
        return None

    total = len(outcomes)
    revealed_often = reveal_count >= config.reveal_ceiling

    if total == 0:
        if revealed_often:
            return Guidance(
                GuidanceCategory.STRUGGLING,
                "We'll bring this one back later for review",
                Urgency.INFO,
            )
        return Guidance(GuidanceCategory.INITIAL, "Ready when you are", Urgency.INFO)

    if outcomes[-1] is Outcome.CORRECT:
        if mastery_step >= mastery_threshold:
            return Guidance(
                GuidanceCategory.MASTERED, "Great work, this one is mastered", Urgency.SUCCESS
            )
        if total == 1:
            return Guidance(
                GuidanceCategory.FIRST_SUCCESS,
                "Nice start! One more time to lock it in",
                Urgency.SUCCESS,
            )
        remaining = mastery_threshold - mastery_step
        message = (
            "Good! One more correct will master this"
            if remaining == 1
            else f"Good! {remaining} more correct to master this"
        )
        return Guidance(GuidanceCategory.PROGRESSING, message, Urgency.SUCCESS)

    if total == 1:
        return Guidance(
            GuidanceCategory.FIRST_WRONG,
            "Let's try this together: show them first",
            Urgency.INFO,
        )
    if revealed_often or recent_accuracy(outcomes, config.recent_window) < config.accuracy_floor:
        return Guidance(
            GuidanceCategory.STRUGGLING,
            "This one's been tricky before, let's try again slowly",
            Urgency.WARNING,
        )
    return Guidance(GuidanceCategory.RETRY, "Not quite, give it another try", Urgency.INFO)


# ============================================================================
# SESSION GUIDANCE
# ============================================================================


def derive_session_guidance(
    session_index: int,
    total_in_session: int,
    mastered_in_session: int,
    all_mastered_at_level: bool,
    more_levels_exist: bool,
    is_first_card_ever: bool,
) -> Guidance | None:
    """
    Set-level guidance, or None to fall back to word guidance.

    Args:
        session_index: Pointer into the session
        total_in_session: Number of words in the session
        mastered_in_session: How many of them are mastered
        all_mastered_at_level: Whole unlocked level is mastered
        more_levels_exist: Another level can still be unlocked
        is_first_card_ever: Learner has never attempted this subject

    Returns:
        Guidance at a lifecycle moment, otherwise None
    """
    try:
        _count("total_in_session", total_in_session, 1)
        if _count("session_index", session_index, 0) >= total_in_session:
            raise OutOfRangeInput("session_index", session_index)
        if _count("mastered_in_session", mastered_in_session, 0) > total_in_session:
            raise OutOfRangeInput("mastered_in_session", mastered_in_session)
        _flag("all_mastered_at_level", all_mastered_at_level)
        _flag("more_levels_exist", more_levels_exist)
        _flag("is_first_card_ever", is_first_card_ever)
    except OutOfRangeInput as exc:
        logger.warning(f"No session guidance: {exc}")
        return None

    if is_first_card_ever and session_index == 0:
        if total_in_session == 1:
            message = "Practice Set: We'll Master this question"
        else:
            message = (
                f"Practice Set: We'll cycle through {total_in_session} questions "
                "until each is mastered"
            )
        return Guidance(GuidanceCategory.SET_INTRODUCTION, message, Urgency.INFO)

    session_done = mastered_in_session == total_in_session
    if session_done and all_mastered_at_level and more_levels_exist:
        return Guidance(
            GuidanceCategory.LEVEL_TRANSITION,
            "Great! All questions mastered. Ready for the next challenge?",
            Urgency.SUCCESS,
        )

    if session_done and all_mastered_at_level:
        return Guidance(
            GuidanceCategory.COMPLETION,
            "Amazing! You've mastered everything. Check back for new questions!",
            Urgency.SUCCESS,
        )

    return None
