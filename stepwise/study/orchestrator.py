"""
Session Orchestrator.

Handles ``advance`` requests on a subject's active session:
- Continue: move the pointer to a random unresolved word
- Rotate: on completion, run housekeeping, maybe unlock a level, and
  replace the active session with a freshly bucketed one
- Starve: when nothing is left to draw, keep the current session and
  report that there is no more content

The completion predicate, the level predicate and the rebuild side effects
are separate methods so each can be exercised on its own.
"""
from __future__ import annotations

import random
import uuid
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum
from typing import Callable, Optional

from loguru import logger

from stepwise.core.errors import ExhaustedPool, InvalidReference
from stepwise.core.mastery import MasteryStateMachine
from stepwise.core.models import LearnerProfile, Session, SubjectSettings, WordRecord
from stepwise.core.subjects import SubjectRegistry
from stepwise.study.bucketer import BucketSelection, SessionBucketer
from stepwise.study.progression import ComplexityProgressor


def _utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass
class OrchestratorConfig:
    """Configuration for session rotation."""
    completion_threshold: float = 0.8
    max_complexity_level: int = 10
    default_session_size: int = 12
    min_session_size: int = 1
    max_session_size: int = 50

    def __post_init__(self):
        if not 0.0 < self.completion_threshold <= 1.0:
            raise ValueError(
                f"completion_threshold must be within (0, 1], got {self.completion_threshold}"
            )
        if self.min_session_size < 1 or self.max_session_size < self.min_session_size:
            raise ValueError(
                f"invalid session size bounds [{self.min_session_size}, {self.max_session_size}]"
            )

    def clamp_size(self, size: int) -> int:
        return max(self.min_session_size, min(int(size), self.max_session_size))


class AdvanceStatus(str, Enum):
    """Outcome of an advance request."""

    CONTINUED = "continued"  # pointer moved within the session
    ROTATED = "rotated"  # session completed and replaced
    NO_MORE_CONTENT = "no_more_content"  # completed, nothing left to draw
    INVALID = "invalid"  # unknown or retired session

    @property
    def display_name(self) -> str:
        return self.value.replace("_", " ").capitalize()


@dataclass
class AdvanceResult:
    """What an advance did."""
    status: AdvanceStatus
    session_id: Optional[str] = None
    previous_session_id: Optional[str] = None
    level_unlocked: bool = False
    selection: Optional[BucketSelection] = None

    @property
    def rotated(self) -> bool:
        return self.status is AdvanceStatus.ROTATED


class SessionOrchestrator:
    """
    Sequences advance requests for a learner profile.

    The profile is always passed in; the orchestrator holds no learner
    state of its own.
    """

    def __init__(
        self,
        mastery: Optional[MasteryStateMachine] = None,
        registry: Optional[SubjectRegistry] = None,
        config: Optional[OrchestratorConfig] = None,
        rng: Optional[random.Random] = None,
        clock: Optional[Callable[[], datetime]] = None,
        bucketer: Optional[SessionBucketer] = None,
        progressor: Optional[ComplexityProgressor] = None,
    ):
        """
        Initialize orchestrator.

        Args:
            mastery: Shared mastery state machine
            registry: Subject capabilities (revision support)
            config: OrchestratorConfig or None for defaults
            rng: Random source for sampling and pointer moves
            clock: Returns the current aware datetime
            bucketer: Session bucketer (built from ``mastery`` if omitted)
            progressor: Level progressor (built from ``mastery`` if omitted)
        """
        self.mastery = mastery or MasteryStateMachine()
        self.registry = registry or SubjectRegistry()
        self.config = config or OrchestratorConfig()
        self.rng = rng or random.Random()
        self.clock = clock or _utcnow
        self.bucketer = bucketer or SessionBucketer(self.mastery)
        self.progressor = progressor or ComplexityProgressor(
            self.mastery,
            max_level=self.config.max_complexity_level,
            default_session_size=self.config.default_session_size,
        )
        self.last_selection: Optional[BucketSelection] = None

    # ========================================================================
    # QUERIES
    # ========================================================================

    def subject_settings(self, profile: LearnerProfile, subject: str) -> SubjectSettings:
        settings = profile.settings.get(subject)
        if settings is None:
            settings = SubjectSettings(session_size=self.config.default_session_size)
            profile.settings[subject] = settings
        return settings

    def candidate_pool(self, profile: LearnerProfile, subject: str) -> list[WordRecord]:
        """Subject words at or below the unlocked level."""
        level = self.subject_settings(profile, subject).unlocked_level
        return [w for w in profile.words_for_subject(subject) if w.complexity_level <= level]

    def unresolved_indices(self, profile: LearnerProfile, session: Session) -> list[int]:
        """Indices of session words that are not mastered."""
        indices = []
        for index, word_id in enumerate(session.word_ids):
            word = profile.words.get(word_id)
            if word is not None and not self.mastery.is_mastered(word):
                indices.append(index)
        return indices

    def mastered_fraction(self, profile: LearnerProfile, session: Session) -> float:
        if not session.word_ids:
            return 1.0
        mastered = sum(
            1
            for word_id in session.word_ids
            if word_id in profile.words and self.mastery.is_mastered(profile.words[word_id])
        )
        return mastered / len(session.word_ids)

    def is_session_complete(self, profile: LearnerProfile, session: Session) -> bool:
        """Enough words mastered, or nothing unresolved left to show."""
        if self.mastered_fraction(profile, session) >= self.config.completion_threshold:
            return True
        return not self.unresolved_indices(profile, session)

    def pick_unresolved_index(self, profile: LearnerProfile, session: Session) -> Optional[int]:
        unresolved = self.unresolved_indices(profile, session)
        if not unresolved:
            return None
        return self.rng.choice(unresolved)

    # ========================================================================
    # COMMANDS
    # ========================================================================

    def build_session(self, profile: LearnerProfile, subject: str) -> Session:
        """
        Bucket a new session and make it the subject's active one.

        Raises:
            ExhaustedPool: No eligible words remain for the subject
        """
        settings = self.subject_settings(profile, subject)
        size = self.config.clamp_size(settings.session_size)
        selection = self.bucketer.select(
            self.candidate_pool(profile, subject),
            settings.selection_weights,
            size,
            self.rng,
            allow_revision=self.registry.supports_revision(subject),
        )
        if not selection.word_ids:
            raise ExhaustedPool(subject, settings.unlocked_level)

        session = Session(
            id=self._new_session_id(profile, subject),
            subject_code=subject,
            word_ids=tuple(selection.word_ids),
            created_at=self.clock(),
            initial_mastered=frozenset(
                word_id
                for word_id in selection.word_ids
                if self.mastery.is_mastered(profile.words[word_id])
            ),
        )
        profile.sessions[session.id] = session
        profile.active_session_by_subject[subject] = session.id
        self.last_selection = selection

        logger.info(
            f"{subject}: started session {session.id} with {session.size} words "
            f"at level {settings.unlocked_level}"
        )
        return session

    def ensure_active_session(self, profile: LearnerProfile, subject: str) -> Optional[Session]:
        """
        Return the subject's active session, building one if needed.

        Runs the level check first so a returning learner who mastered a
        whole level is not handed an all-mastered session.
        """
        active = profile.active_session(subject)
        if active is not None and not active.is_retired:
            return active

        self.progressor.progress(profile, subject)
        try:
            return self.build_session(profile, subject)
        except ExhaustedPool as exc:
            logger.warning(str(exc))
            return None

    def advance(self, profile: LearnerProfile, session_id: str) -> AdvanceResult:
        """
        Move past the current card.

        Args:
            profile: Learner profile to mutate
            session_id: Session being advanced

        Returns:
            AdvanceResult describing what happened
        """
        try:
            session = self._active(profile, session_id)
        except InvalidReference as exc:
            logger.warning(f"advance ignored: {exc}")
            return AdvanceResult(AdvanceStatus.INVALID, session_id=session_id)

        unresolved = self.unresolved_indices(profile, session)
        session.completion_signal = not unresolved

        if not self.is_session_complete(profile, session):
            session.current_index = self.rng.choice(unresolved)
            session.revealed = False
            session.last_outcome = None
            logger.debug(f"{session.id}: continue at index {session.current_index}")
            return AdvanceResult(AdvanceStatus.CONTINUED, session_id=session.id)

        return self._rotate(profile, session)

    # ========================================================================
    # INTERNALS
    # ========================================================================

    def _rotate(self, profile: LearnerProfile, session: Session) -> AdvanceResult:
        subject = session.subject_code
        logger.info(
            f"{session.id}: complete at {self.mastered_fraction(profile, session):.0%} mastered"
        )

        for word_id in session.word_ids:
            word = profile.words.get(word_id)
            if word is not None:
                self.mastery.decrement_cooldown(word)

        unlocked = self.progressor.progress(profile, subject)

        try:
            new_session = self.build_session(profile, subject)
        except ExhaustedPool as exc:
            logger.warning(f"{exc}; keeping session {session.id}")
            profile.active_session_by_subject[subject] = session.id
            session.completion_signal = True
            return AdvanceResult(
                AdvanceStatus.NO_MORE_CONTENT,
                session_id=session.id,
                level_unlocked=unlocked,
            )

        session.retired_at = self.clock()
        return AdvanceResult(
            AdvanceStatus.ROTATED,
            session_id=new_session.id,
            previous_session_id=session.id,
            level_unlocked=unlocked,
            selection=self.last_selection,
        )

    def _active(self, profile: LearnerProfile, session_id: str) -> Session:
        session = profile.sessions.get(session_id)
        if session is None:
            raise InvalidReference("session", session_id)
        if session.is_retired:
            raise InvalidReference("active session", session_id)
        return session

    @staticmethod
    def _new_session_id(profile: LearnerProfile, subject: str) -> str:
        while True:
            session_id = f"{subject}-{uuid.uuid4().hex[:8]}"
            if session_id not in profile.sessions:
                return session_id
