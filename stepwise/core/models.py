"""
Core data model for learner progress.

Design:
- WordRecord: mutable mastery state for one catalog item
- Session: fixed-membership working set of word ids
- SubjectSettings: per-subject level, session size and bucket weights
- LearnerProfile: aggregate root holding everything for one learner

Each model round-trips through ``to_dict``/``from_dict`` using JSON-safe
primitives (ISO-8601 timestamps). The physical storage format is left to
the caller.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any


def _to_iso(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def _from_iso(value: str | None) -> datetime | None:
    if not value:
        return None
    parsed = datetime.fromisoformat(value)
    # Handle timezone awareness
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


class Outcome(str, Enum):
    """Result of one practice attempt."""

    CORRECT = "correct"
    WRONG = "wrong"

    @classmethod
    def parse(cls, value: Outcome | str | bool) -> Outcome:
        """Accept an Outcome, its string value, or a correctness flag."""
        if isinstance(value, Outcome):
            return value
        if isinstance(value, bool):
            return cls.CORRECT if value else cls.WRONG
        return cls(str(value).strip().lower())


@dataclass(frozen=True)
class AttemptRecord:
    """A single attempt in a word's history."""

    timestamp: datetime
    outcome: Outcome

    @property
    def is_correct(self) -> bool:
        return self.outcome is Outcome.CORRECT

    def to_dict(self) -> dict[str, Any]:
        return {"timestamp": _to_iso(self.timestamp), "outcome": self.outcome.value}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AttemptRecord:
        return cls(timestamp=_from_iso(data["timestamp"]), outcome=Outcome(data["outcome"]))


@dataclass
class WordRecord:
    """
    Mastery state for one content item, per learner.

    Created once from the content catalog with ``mastery_step=0`` and only
    mutated by the mastery state machine afterwards. Display text lives in
    the catalog, not here.
    """

    id: str
    subject_code: str
    complexity_level: int = 1

    attempts: list[AttemptRecord] = field(default_factory=list)
    mastery_step: int = 0
    cooldown: int = 0  # session completions left before revision sampling
    last_practiced_at: datetime | None = None
    last_revised_at: datetime | None = None
    reveal_count: int = 0

    @property
    def has_attempts(self) -> bool:
        return bool(self.attempts)

    @property
    def last_attempt(self) -> AttemptRecord | None:
        return self.attempts[-1] if self.attempts else None

    @property
    def correct_count(self) -> int:
        return sum(1 for attempt in self.attempts if attempt.is_correct)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "subject_code": self.subject_code,
            "complexity_level": self.complexity_level,
            "attempts": [attempt.to_dict() for attempt in self.attempts],
            "mastery_step": self.mastery_step,
            "cooldown": self.cooldown,
            "last_practiced_at": _to_iso(self.last_practiced_at),
            "last_revised_at": _to_iso(self.last_revised_at),
            "reveal_count": self.reveal_count,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> WordRecord:
        return cls(
            id=data["id"],
            subject_code=data["subject_code"],
            complexity_level=int(data.get("complexity_level", 1)),
            attempts=[AttemptRecord.from_dict(a) for a in data.get("attempts", [])],
            mastery_step=int(data.get("mastery_step", 0)),
            cooldown=int(data.get("cooldown", 0)),
            last_practiced_at=_from_iso(data.get("last_practiced_at")),
            last_revised_at=_from_iso(data.get("last_revised_at")),
            reveal_count=int(data.get("reveal_count", 0)),
        )


@dataclass
class Session:
    """
    A fixed-membership working set shown until enough of it is mastered.

    ``word_ids`` is fixed at construction; only the pointer and presentation
    flags change afterwards. Retired sessions are kept for history.
    """

    id: str
    subject_code: str
    word_ids: tuple[str, ...]
    created_at: datetime
    current_index: int = 0
    revealed: bool = False
    last_outcome: Outcome | None = None
    completion_signal: bool = False
    initial_mastered: frozenset[str] = frozenset()
    retired_at: datetime | None = None

    def __post_init__(self):
        ids = tuple(self.word_ids)
        if len(set(ids)) != len(ids):
            raise ValueError(f"session {self.id} has duplicate word ids")
        object.__setattr__(self, "word_ids", ids)
        object.__setattr__(self, "initial_mastered", frozenset(self.initial_mastered))

    def __setattr__(self, name: str, value: Any) -> None:
        if name == "word_ids" and "word_ids" in self.__dict__:
            raise AttributeError("session word_ids cannot change after creation")
        super().__setattr__(name, value)

    @property
    def current_word_id(self) -> str | None:
        if 0 <= self.current_index < len(self.word_ids):
            return self.word_ids[self.current_index]
        return None

    @property
    def is_retired(self) -> bool:
        return self.retired_at is not None

    @property
    def size(self) -> int:
        return len(self.word_ids)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "subject_code": self.subject_code,
            "word_ids": list(self.word_ids),
            "created_at": _to_iso(self.created_at),
            "current_index": self.current_index,
            "revealed": self.revealed,
            "last_outcome": self.last_outcome.value if self.last_outcome else None,
            "completion_signal": self.completion_signal,
            "initial_mastered": sorted(self.initial_mastered),
            "retired_at": _to_iso(self.retired_at),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Session:
        last_outcome = data.get("last_outcome")
        return cls(
            id=data["id"],
            subject_code=data["subject_code"],
            word_ids=tuple(data.get("word_ids", [])),
            created_at=_from_iso(data.get("created_at")) or datetime.now(UTC),
            current_index=int(data.get("current_index", 0)),
            revealed=bool(data.get("revealed", False)),
            last_outcome=Outcome(last_outcome) if last_outcome else None,
            completion_signal=bool(data.get("completion_signal", False)),
            initial_mastered=frozenset(data.get("initial_mastered", [])),
            retired_at=_from_iso(data.get("retired_at")),
        )


@dataclass(frozen=True)
class SelectionWeights:
    """Relative share of each bucket in a new session."""

    struggling: float = 0.5
    new: float = 0.3
    revision: float = 0.2

    def as_dict(self) -> dict[str, float]:
        """Bucket name -> non-negative weight, equal split when all are zero."""
        weights = {
            "struggling": max(0.0, float(self.struggling)),
            "new": max(0.0, float(self.new)),
            "revision": max(0.0, float(self.revision)),
        }
        if sum(weights.values()) <= 0:
            return {name: 1.0 for name in weights}
        return weights

    def to_dict(self) -> dict[str, float]:
        return {"struggling": self.struggling, "new": self.new, "revision": self.revision}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SelectionWeights:
        return cls(
            struggling=float(data.get("struggling", 0.5)),
            new=float(data.get("new", 0.3)),
            revision=float(data.get("revision", 0.2)),
        )


@dataclass
class SubjectSettings:
    """Per-subject learner settings."""

    unlocked_level: int = 1
    session_size: int = 12
    selection_weights: SelectionWeights = field(default_factory=SelectionWeights)

    def to_dict(self) -> dict[str, Any]:
        return {
            "unlocked_level": self.unlocked_level,
            "session_size": self.session_size,
            "selection_weights": self.selection_weights.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SubjectSettings:
        return cls(
            unlocked_level=int(data.get("unlocked_level", 1)),
            session_size=int(data.get("session_size", 12)),
            selection_weights=SelectionWeights.from_dict(data.get("selection_weights", {})),
        )


@dataclass
class LearnerProfile:
    """
    Aggregate root for one learner.

    Holds every word record, every session (retired ones included), the
    active session pointer per subject and per-subject settings. Passed
    explicitly into every command handler.
    """

    learner_id: str
    display_name: str = ""
    words: dict[str, WordRecord] = field(default_factory=dict)
    sessions: dict[str, Session] = field(default_factory=dict)
    active_session_by_subject: dict[str, str] = field(default_factory=dict)
    settings: dict[str, SubjectSettings] = field(default_factory=dict)
    selected_subjects: list[str] = field(default_factory=list)
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    def words_for_subject(self, subject: str) -> list[WordRecord]:
        return [word for word in self.words.values() if word.subject_code == subject]

    def subjects(self) -> list[str]:
        """Subjects with at least one word record, in first-seen order."""
        seen: dict[str, None] = {}
        for word in self.words.values():
            seen.setdefault(word.subject_code, None)
        return list(seen)

    def active_session(self, subject: str) -> Session | None:
        session_id = self.active_session_by_subject.get(subject)
        if session_id is None:
            return None
        return self.sessions.get(session_id)

    def to_dict(self) -> dict[str, Any]:
        return {
            "learner_id": self.learner_id,
            "display_name": self.display_name,
            "created_at": _to_iso(self.created_at),
            "words": {word_id: word.to_dict() for word_id, word in self.words.items()},
            "sessions": {session_id: s.to_dict() for session_id, s in self.sessions.items()},
            "active_session_by_subject": dict(self.active_session_by_subject),
            "settings": {subject: s.to_dict() for subject, s in self.settings.items()},
            "selected_subjects": list(self.selected_subjects),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> LearnerProfile:
        return cls(
            learner_id=data["learner_id"],
            display_name=data.get("display_name", ""),
            created_at=_from_iso(data.get("created_at")) or datetime.now(UTC),
            words={k: WordRecord.from_dict(v) for k, v in data.get("words", {}).items()},
            sessions={k: Session.from_dict(v) for k, v in data.get("sessions", {}).items()},
            active_session_by_subject=dict(data.get("active_session_by_subject", {})),
            settings={k: SubjectSettings.from_dict(v) for k, v in data.get("settings", {}).items()},
            selected_subjects=list(data.get("selected_subjects", [])),
        )
