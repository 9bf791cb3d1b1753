"""
Learner statistics.

Read-only summaries over a learner profile:
- SessionStats: how a single session is going
- ProgressStats: mastered/total, turnarounds and daily practice streaks
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import date, timedelta

from stepwise.core.mastery import MasteryStateMachine
from stepwise.core.models import LearnerProfile, Session


@dataclass
class SessionStats:
    """Breakdown of a session's words."""

    total_questions: int
    attempted_in_session: int
    mastered_in_session: int  # mastered now, not mastered when the session began
    practiced_in_session: int  # attempted this session, still unmastered
    yet_to_try: int
    currently_mastered: int
    initially_mastered: int

    def to_dict(self) -> dict[str, int]:
        return asdict(self)


@dataclass
class ProgressStats:
    """Long-running progress for one subject or all of them."""

    subject: str | None
    total_words: int
    mastered_words: int
    practicing_words: int
    new_words: int
    turnaround_count: int
    current_streak: int
    longest_streak: int

    @property
    def mastered_percent(self) -> float:
        if self.total_words == 0:
            return 0.0
        return self.mastered_words / self.total_words * 100

    def to_dict(self) -> dict:
        data = asdict(self)
        data["mastered_percent"] = round(self.mastered_percent, 1)
        return data


def practice_streaks(days: set[date], today: date) -> tuple[int, int]:
    """
    Current and longest run of consecutive practice days.

    The current streak counts back from today, or from yesterday when
    nothing has been practiced yet today.

    Returns:
        (current_streak, longest_streak)
    """
    if not days:
        return 0, 0

    longest = run = 0
    previous: date | None = None
    for day in sorted(days):
        run = run + 1 if previous is not None and day - previous == timedelta(days=1) else 1
        longest = max(longest, run)
        previous = day

    anchor = today if today in days else today - timedelta(days=1)
    current = 0
    while anchor in days:
        current += 1
        anchor -= timedelta(days=1)
    return current, longest


class StatsCalculator:
    """Computes statistics with a shared mastery predicate."""

    def __init__(self, mastery: MasteryStateMachine | None = None):
        self.mastery = mastery or MasteryStateMachine()

    def session_stats(self, profile: LearnerProfile, session: Session) -> SessionStats:
        words = [profile.words[w] for w in session.word_ids if w in profile.words]

        mastered_now = {w.id for w in words if self.mastery.is_mastered(w)}
        attempted = {
            w.id
            for w in words
            if any(a.timestamp >= session.created_at for a in w.attempts)
        }
        practiced = attempted - mastered_now

        return SessionStats(
            total_questions=len(session.word_ids),
            attempted_in_session=len(attempted),
            mastered_in_session=len(mastered_now - session.initial_mastered),
            practiced_in_session=len(practiced),
            yet_to_try=len(words) - len(mastered_now) - len(practiced),
            currently_mastered=len(mastered_now),
            initially_mastered=len(session.initial_mastered),
        )

    def progress_stats(
        self,
        profile: LearnerProfile,
        today: date,
        subject: str | None = None,
    ) -> ProgressStats:
        """
        Progress across one subject, or across the whole profile.

        Args:
            profile: Learner profile
            today: Reference day for the current streak
            subject: Subject code, or None for every subject
        """
        words = (
            profile.words_for_subject(subject)
            if subject is not None
            else list(profile.words.values())
        )

        mastered = sum(1 for w in words if self.mastery.is_mastered(w))
        new = sum(1 for w in words if not w.has_attempts and not self.mastery.is_mastered(w))
        days = {a.timestamp.date() for w in words for a in w.attempts}
        current, longest = practice_streaks(days, today)

        return ProgressStats(
            subject=subject,
            total_words=len(words),
            mastered_words=mastered,
            practicing_words=len(words) - mastered - new,
            new_words=new,
            turnaround_count=sum(1 for w in words if self.mastery.is_turnaround(w)),
            current_streak=current,
            longest_streak=longest,
        )
