"""
Complexity level progression.

A subject's unlocked level only rises once every word tagged with the
current level is mastered. This is deliberately stricter than session
rotation, which only needs most of the drawn words mastered.
"""
from __future__ import annotations

from loguru import logger

from stepwise.core.mastery import MasteryStateMachine
from stepwise.core.models import LearnerProfile, SubjectSettings


class ComplexityProgressor:
    """Decides per-subject level unlocks."""

    def __init__(
        self,
        mastery: MasteryStateMachine | None = None,
        max_level: int = 10,
        default_session_size: int = 12,
    ):
        self.mastery = mastery or MasteryStateMachine()
        self.max_level = max(1, max_level)
        self.default_session_size = default_session_size

    def level_fully_mastered(self, profile: LearnerProfile, subject: str, level: int) -> bool:
        """True when the level has words and all of them are mastered."""
        words = [
            w for w in profile.words_for_subject(subject) if w.complexity_level == level
        ]
        return bool(words) and all(self.mastery.is_mastered(w) for w in words)

    def should_progress(self, profile: LearnerProfile, subject: str) -> bool:
        level = self._settings(profile, subject).unlocked_level
        if level >= self.max_level:
            return False
        return self.level_fully_mastered(profile, subject, level)

    def has_more_levels(self, profile: LearnerProfile, subject: str) -> bool:
        """Whether any word sits above the unlocked level, within the ceiling."""
        level = self._settings(profile, subject).unlocked_level
        return any(
            level < w.complexity_level <= self.max_level
            for w in profile.words_for_subject(subject)
        )

    def progress(self, profile: LearnerProfile, subject: str) -> bool:
        """
        Unlock the next level when the current one is fully mastered.

        Args:
            profile: Learner profile to mutate
            subject: Subject code

        Returns:
            True if the unlocked level increased
        """
        if not self.should_progress(profile, subject):
            return False

        settings = self._settings(profile, subject)
        previous = settings.unlocked_level
        settings.unlocked_level = min(previous + 1, self.max_level)
        logger.info(f"{subject}: unlocked level {settings.unlocked_level} (was {previous})")
        return settings.unlocked_level > previous

    def set_level(self, profile: LearnerProfile, subject: str, level: int) -> int:
        """Manual override, clamped to [1, max_level]."""
        settings = self._settings(profile, subject)
        clamped = max(1, min(int(level), self.max_level))
        if clamped != level:
            logger.warning(f"{subject}: level {level} clamped to {clamped}")
        settings.unlocked_level = clamped
        return clamped

    def _settings(self, profile: LearnerProfile, subject: str) -> SubjectSettings:
        settings = profile.settings.get(subject)
        if settings is None:
            settings = SubjectSettings(session_size=self.default_session_size)
            profile.settings[subject] = settings
        return settings
