"""
Core Mastery Module.

Per-word mastery state machine driven one attempt at a time.

Design:
- MasteryState: Enum for the four lifecycle states of a word
- MasteryChange: Event emitted by a transition (achieved, lost, revised)
- MasteryConfig: Step ceiling, mastery threshold and revision demotion step
- MasteryStateMachine: Applies attempts and session-completion housekeeping

The step ceiling and the mastery threshold are independent constants: with
the defaults a word is mastered at step 2 while the step keeps climbing to 5.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum

from loguru import logger

from stepwise.core.models import AttemptRecord, Outcome, WordRecord


class MasteryState(str, Enum):
    """Lifecycle state of a single word."""

    NEW = "new"  # step 0, never attempted
    PRACTICING = "practicing"  # below threshold, attempted
    MASTERED_ACTIVE = "mastered_active"  # mastered, cooling down
    MASTERED_IDLE = "mastered_idle"  # mastered, due for revision

    @property
    def is_mastered(self) -> bool:
        return self in (MasteryState.MASTERED_ACTIVE, MasteryState.MASTERED_IDLE)

    @property
    def display_name(self) -> str:
        """Human-readable name."""
        return {
            MasteryState.NEW: "New",
            MasteryState.PRACTICING: "Practicing",
            MasteryState.MASTERED_ACTIVE: "Mastered",
            MasteryState.MASTERED_IDLE: "Ready to revise",
        }[self]

    @property
    def emoji(self) -> str:
        """Status glyph for CLI display."""
        return {
            MasteryState.NEW: "○",
            MasteryState.PRACTICING: "◑",
            MasteryState.MASTERED_ACTIVE: "●",
            MasteryState.MASTERED_IDLE: "◕",
        }[self]

    @property
    def color(self) -> str:
        """Rich color for CLI display."""
        return {
            MasteryState.NEW: "dim",
            MasteryState.PRACTICING: "yellow",
            MasteryState.MASTERED_ACTIVE: "green",
            MasteryState.MASTERED_IDLE: "cyan",
        }[self]


class MasteryChange(str, Enum):
    """What a single attempt did to a word's mastery."""

    ACHIEVED = "achieved"  # crossed the threshold upwards
    LOST = "lost"  # failed a revision and was demoted
    REVISED = "revised"  # passed a revision
    NONE = "none"


@dataclass
class MasteryConfig:
    """Configuration for the mastery state machine."""

    step_max: int = 5
    mastery_threshold: int = 2
    revision_step: int = 1

    def __post_init__(self):
        if self.step_max < 1:
            raise ValueError(f"step_max must be >= 1, got {self.step_max}")
        if not 1 <= self.mastery_threshold <= self.step_max:
            raise ValueError(
                f"mastery_threshold must be within [1, {self.step_max}], "
                f"got {self.mastery_threshold}"
            )
        # A demoted word must stop counting as mastered
        ceiling = self.mastery_threshold - 1
        clamped = max(min(self.revision_step, ceiling), min(1, ceiling))
        if clamped != self.revision_step:
            logger.warning(
                f"revision_step {self.revision_step} clamped to {clamped} "
                f"(threshold {self.mastery_threshold})"
            )
            self.revision_step = clamped


class MasteryStateMachine:
    """
    Transitions one WordRecord per attempt.

    Rules:
    1. Every attempt is appended to the history
    2. Below threshold: correct climbs one step, wrong drops one step
    3. Mastered and idle: correct stamps a revision, wrong demotes
    4. Mastered and cooling down: history only, no state change
    """

    def __init__(self, config: MasteryConfig | None = None):
        self.config = config or MasteryConfig()

    # ========================================================================
    # PREDICATES
    # ========================================================================

    def is_mastered(self, word: WordRecord) -> bool:
        return word.mastery_step >= self.config.mastery_threshold

    def state_of(self, word: WordRecord) -> MasteryState:
        if self.is_mastered(word):
            if word.cooldown > 0:
                return MasteryState.MASTERED_ACTIVE
            return MasteryState.MASTERED_IDLE
        if word.mastery_step == 0 and not word.has_attempts:
            return MasteryState.NEW
        return MasteryState.PRACTICING

    def progress_percent(self, word: WordRecord) -> int:
        """Progress toward the mastery threshold, 0-100."""
        threshold = self.config.mastery_threshold
        return min(100, round(word.mastery_step / threshold * 100))

    def is_turnaround(self, word: WordRecord) -> bool:
        """Mastered despite at least one wrong attempt."""
        return self.is_mastered(word) and any(not a.is_correct for a in word.attempts)

    # ========================================================================
    # TRANSITIONS
    # ========================================================================

    def apply(
        self,
        word: WordRecord,
        outcome: Outcome | str | bool,
        now: datetime | None = None,
    ) -> MasteryChange:
        """
        Apply one attempt to a word.

        Args:
            word: Record to mutate in place
            outcome: Attempt result
            now: Attempt timestamp (defaults to current UTC time)

        Returns:
            The mastery event produced by this attempt
        """
        outcome = Outcome.parse(outcome)
        now = now or datetime.now(UTC)
        correct = outcome is Outcome.CORRECT

        word.attempts.append(AttemptRecord(timestamp=now, outcome=outcome))
        change = MasteryChange.NONE

        if not self.is_mastered(word):
            if correct:
                word.mastery_step = min(self.config.step_max, word.mastery_step + 1)
                if self.is_mastered(word):
                    word.last_revised_at = now
                    word.cooldown = 1
                    change = MasteryChange.ACHIEVED
            else:
                word.mastery_step = max(0, word.mastery_step - 1)
            word.last_practiced_at = now

        elif word.cooldown == 0:
            if correct:
                word.last_revised_at = now
                word.cooldown = 1
                change = MasteryChange.REVISED
            else:
                word.mastery_step = self.config.revision_step
                word.cooldown = 0
                change = MasteryChange.LOST

        # Mastered and cooling down: recorded only

        logger.debug(
            f"{word.id}: {outcome.value} -> step {word.mastery_step}, "
            f"cooldown {word.cooldown} ({change.value})"
        )
        return change

    def decrement_cooldown(self, word: WordRecord) -> None:
        """Session-completion housekeeping for one word."""
        if self.is_mastered(word) and word.cooldown > 0:
            word.cooldown -= 1
