"""
Practice Service.

Command/query facade the presentation layer talks to. Every method takes
the learner profile explicitly and applies one command atomically.

Commands:
- record_attempt, reveal_answer, advance, ensure_active_session
- set_subject_selection, set_session_size, set_complexity_level

Queries:
- current_card, session_progress, word_guidance, session_guidance
- session_stats, progress_stats

No StepwiseError escapes this class: unknown ids and out-of-range input are
logged and turned into ``None``, a no-op, or an ``AdvanceStatus``.
"""

from __future__ import annotations

import random
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, date, datetime

from loguru import logger

from stepwise.config import Settings, get_settings
from stepwise.content.catalog import ContentCatalog
from stepwise.core.errors import InvalidReference, OutOfRangeInput, StepwiseError
from stepwise.core.mastery import MasteryChange, MasteryState, MasteryStateMachine
from stepwise.core.models import LearnerProfile, Outcome, Session, WordRecord
from stepwise.core.subjects import SubjectRegistry
from stepwise.study.guidance import (
    Guidance,
    GuidanceConfig,
    derive_session_guidance,
    derive_word_guidance,
)
from stepwise.study.orchestrator import AdvanceResult, SessionOrchestrator
from stepwise.study.stats import ProgressStats, SessionStats, StatsCalculator


@dataclass
class CardView:
    """What the presentation layer needs to render the current card."""

    word_id: str
    subject_code: str
    session_id: str
    prompt_label: str
    question: str
    answer: str | None
    notes: str | None
    answer_label: str
    show_answer: bool
    revealed: bool
    last_outcome: Outcome | None
    mastery_step: int
    mastery_progress: int  # percent toward the mastery threshold
    mastery_state: MasteryState


@dataclass
class SessionProgress:
    """Mastered words out of the session size."""

    completed_count: int
    total_count: int

    @property
    def fraction(self) -> float:
        return self.completed_count / self.total_count if self.total_count else 0.0


class PracticeService:
    """
    High-level service for practice operations.

    Coordinates the mastery state machine, the session orchestrator, the
    guidance functions and the content catalog.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        catalog: ContentCatalog | None = None,
        registry: SubjectRegistry | None = None,
        rng: random.Random | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        """
        Initialize practice service.

        Args:
            settings: Application settings (cached environment settings if None)
            catalog: Content catalog for display fields
            registry: Subject registry
            rng: Seedable random source shared by sampling and pointer moves
            clock: Returns the current aware datetime
        """
        self.settings = settings or get_settings()
        self.registry = registry or (catalog.registry if catalog else SubjectRegistry())
        self.catalog = catalog or ContentCatalog(
            registry=self.registry, extra_dir=self.settings.catalog_dir
        )
        self.clock = clock or (lambda: datetime.now(UTC))
        self.mastery = MasteryStateMachine(self.settings.mastery_config())
        self.guidance_config: GuidanceConfig = self.settings.guidance_config()
        self.orchestrator = SessionOrchestrator(
            mastery=self.mastery,
            registry=self.registry,
            config=self.settings.orchestrator_config(),
            rng=rng or random.Random(),
            clock=self.clock,
        )
        self.stats = StatsCalculator(self.mastery)

    # ========================================================================
    # COMMANDS
    # ========================================================================

    def record_attempt(
        self,
        profile: LearnerProfile,
        session_id: str,
        word_id: str,
        outcome: Outcome | str | bool,
        timestamp: datetime | None = None,
    ) -> MasteryChange | None:
        """
        Record one attempt on a session word.

        The answer is revealed and the outcome kept on the session so the
        presentation layer can show feedback before advancing.

        Returns:
            The mastery change, or None if the command was ignored
        """
        try:
            session = self._session(profile, session_id)
            word = self._session_word(profile, session, word_id)
            outcome = self._outcome(outcome)
        except StepwiseError as e:
            logger.warning(f"record_attempt ignored: {e}")
            return None

        change = self.mastery.apply(word, outcome, timestamp or self.clock())
        session.revealed = True
        session.last_outcome = outcome

        if change is MasteryChange.ACHIEVED:
            logger.info(f"{word.id}: mastered")
        elif change is MasteryChange.LOST:
            logger.info(f"{word.id}: revision failed, demoted to step {word.mastery_step}")
        return change

    def reveal_answer(self, profile: LearnerProfile, session_id: str, word_id: str) -> bool:
        """Show the answer and count the reveal against the word."""
        try:
            session = self._session(profile, session_id)
            word = self._session_word(profile, session, word_id)
        except StepwiseError as e:
            logger.warning(f"reveal_answer ignored: {e}")
            return False

        session.revealed = True
        word.reveal_count += 1
        logger.debug(f"{word.id}: revealed ({word.reveal_count} total)")
        return True

    def advance(self, profile: LearnerProfile, session_id: str) -> AdvanceResult:
        return self.orchestrator.advance(profile, session_id)

    def ensure_active_session(self, profile: LearnerProfile, subject: str) -> Session | None:
        """Active session for a subject, created on first use."""
        if not profile.words_for_subject(subject):
            logger.warning(f"ensure_active_session ignored: {InvalidReference('subject', subject)}")
            return None
        return self.orchestrator.ensure_active_session(profile, subject)

    def set_subject_selection(self, profile: LearnerProfile, subjects: list[str]) -> list[str]:
        """
        Choose which subjects the learner practices.

        Unknown subjects are dropped; order is kept and duplicates removed.
        """
        known = set(profile.subjects()) | set(self.registry.codes())
        selected: list[str] = []
        for subject in subjects:
            if subject not in known:
                logger.warning(f"Selection skipped: {InvalidReference('subject', subject)}")
                continue
            if subject not in selected:
                selected.append(subject)
        profile.selected_subjects = selected
        logger.debug(f"{profile.learner_id}: selected {selected}")
        return selected

    def set_session_size(self, profile: LearnerProfile, subject: str, size: int) -> int | None:
        """
        Change how many words new sessions draw.

        Returns:
            The stored size (clamped), or None for an unknown subject
        """
        try:
            self._require_subject(profile, subject)
            clamped = self.orchestrator.config.clamp_size(size)
            if clamped != size:
                logger.warning(f"{OutOfRangeInput('session size', size)}; using {clamped}")
        except (StepwiseError, ValueError, TypeError) as e:
            logger.warning(f"set_session_size ignored: {e}")
            return None

        self.orchestrator.subject_settings(profile, subject).session_size = clamped
        return clamped

    def set_complexity_level(self, profile: LearnerProfile, subject: str, level: int) -> int | None:
        """
        Manual level override, clamped to [1, max level].

        Returns:
            The stored level, or None for an unknown subject
        """
        try:
            self._require_subject(profile, subject)
            level = int(level)
        except (StepwiseError, ValueError, TypeError) as e:
            logger.warning(f"set_complexity_level ignored: {e}")
            return None

        self.orchestrator.subject_settings(profile, subject)
        return self.orchestrator.progressor.set_level(profile, subject, level)

    # ========================================================================
    # QUERIES
    # ========================================================================

    def current_card(self, profile: LearnerProfile, session_id: str) -> CardView | None:
        try:
            session = self._session(profile, session_id, allow_retired=True)
            word_id = session.current_word_id
            if word_id is None:
                raise OutOfRangeInput("current_index", session.current_index)
            word = self._word(profile, word_id)
        except StepwiseError as e:
            logger.warning(f"current_card unavailable: {e}")
            return None

        subject = self.registry.get(word.subject_code)
        item = self.catalog.find(word.id)
        always_show = subject.always_show_answer if subject else False

        return CardView(
            word_id=word.id,
            subject_code=word.subject_code,
            session_id=session.id,
            prompt_label=self.registry.prompt_label(word.subject_code),
            question=item.question if item else word.id,
            answer=item.answer if item else None,
            notes=item.notes if item else None,
            answer_label=subject.answer_label if subject else "Answer",
            show_answer=session.revealed or always_show,
            revealed=session.revealed,
            last_outcome=session.last_outcome,
            mastery_step=word.mastery_step,
            mastery_progress=self.mastery.progress_percent(word),
            mastery_state=self.mastery.state_of(word),
        )

    def session_progress(self, profile: LearnerProfile, session_id: str) -> SessionProgress | None:
        try:
            session = self._session(profile, session_id, allow_retired=True)
        except StepwiseError as e:
            logger.warning(f"session_progress unavailable: {e}")
            return None

        completed = sum(
            1
            for word_id in session.word_ids
            if word_id in profile.words and self.mastery.is_mastered(profile.words[word_id])
        )
        return SessionProgress(completed_count=completed, total_count=session.size)

    def word_guidance(self, profile: LearnerProfile, word_id: str) -> Guidance | None:
        try:
            word = self._word(profile, word_id)
        except StepwiseError as e:
            logger.warning(f"word_guidance unavailable: {e}")
            return None

        guidance = derive_word_guidance(
            word.mastery_step,
            word.attempts,
            word.reveal_count,
            mastery_threshold=self.mastery.config.mastery_threshold,
            config=self.guidance_config,
        )
        if guidance is None:
            return None
        return guidance.with_tip(self.registry.parent_tip(word.subject_code))

    def session_guidance(self, profile: LearnerProfile, session_id: str) -> Guidance | None:
        try:
            session = self._session(profile, session_id, allow_retired=True)
        except StepwiseError as e:
            logger.warning(f"session_guidance unavailable: {e}")
            return None

        subject = session.subject_code
        progressor = self.orchestrator.progressor
        # Everything unlocked so far, so an unlocked but empty level still reads as done
        pool = self.orchestrator.candidate_pool(profile, subject)
        progress = self.session_progress(profile, session_id)

        return derive_session_guidance(
            session_index=session.current_index,
            total_in_session=session.size,
            mastered_in_session=progress.completed_count if progress else 0,
            all_mastered_at_level=bool(pool) and all(self.mastery.is_mastered(w) for w in pool),
            more_levels_exist=progressor.has_more_levels(profile, subject),
            is_first_card_ever=not any(w.has_attempts for w in profile.words_for_subject(subject)),
        )

    def session_stats(self, profile: LearnerProfile, session_id: str) -> SessionStats | None:
        try:
            session = self._session(profile, session_id, allow_retired=True)
        except StepwiseError as e:
            logger.warning(f"session_stats unavailable: {e}")
            return None
        return self.stats.session_stats(profile, session)

    def progress_stats(
        self,
        profile: LearnerProfile,
        subject: str | None = None,
        today: date | None = None,
    ) -> ProgressStats:
        return self.stats.progress_stats(profile, today or self.clock().date(), subject)

    # ========================================================================
    # LOOKUPS
    # ========================================================================

    @staticmethod
    def _session(
        profile: LearnerProfile,
        session_id: str,
        allow_retired: bool = False,
    ) -> Session:
        session = profile.sessions.get(session_id)
        if session is None:
            raise InvalidReference("session", session_id)
        if session.is_retired and not allow_retired:
            raise InvalidReference("active session", session_id)
        return session

    @staticmethod
    def _word(profile: LearnerProfile, word_id: str) -> WordRecord:
        word = profile.words.get(word_id)
        if word is None:
            raise InvalidReference("word", word_id)
        return word

    def _session_word(self, profile: LearnerProfile, session: Session, word_id: str) -> WordRecord:
        if word_id not in session.word_ids:
            raise InvalidReference(f"word in session {session.id}", word_id)
        return self._word(profile, word_id)

    @staticmethod
    def _outcome(value: Outcome | str | bool) -> Outcome:
        try:
            return Outcome.parse(value)
        except ValueError as e:
            raise OutOfRangeInput("outcome", value) from e

    @staticmethod
    def _require_subject(profile: LearnerProfile, subject: str) -> None:
        if not profile.words_for_subject(subject):
            raise InvalidReference("subject", subject)

