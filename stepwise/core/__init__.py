"""
Core Module - Shared domain models and interfaces.

Components:
- models: WordRecord, Session, SubjectSettings, LearnerProfile
- mastery: Per-word mastery state machine (MasteryStateMachine, MasteryConfig)
- subjects: Closed subject registry (SubjectRegistry, SubjectProfile)
- errors: Recoverable engine conditions (InvalidReference, ExhaustedPool, ...)

Design Principle:
Everything under stepwise/study/ imports its shared concepts from here
rather than redefining them.
"""

from stepwise.core.errors import (
    ExhaustedPool,
    InvalidReference,
    OutOfRangeInput,
    StepwiseError,
)
from stepwise.core.mastery import (
    MasteryChange,
    MasteryConfig,
    MasteryState,
    MasteryStateMachine,
)
from stepwise.core.models import (
    AttemptRecord,
    LearnerProfile,
    Outcome,
    SelectionWeights,
    Session,
    SubjectSettings,
    WordRecord,
)
from stepwise.core.subjects import BUILTIN_SUBJECTS, SubjectProfile, SubjectRegistry

__all__ = [
    # Models
    "AttemptRecord",
    "LearnerProfile",
    "Outcome",
    "SelectionWeights",
    "Session",
    "SubjectSettings",
    "WordRecord",
    # Mastery
    "MasteryChange",
    "MasteryConfig",
    "MasteryState",
    "MasteryStateMachine",
    # Subjects
    "BUILTIN_SUBJECTS",
    "SubjectProfile",
    "SubjectRegistry",
    # Errors
    "ExhaustedPool",
    "InvalidReference",
    "OutOfRangeInput",
    "StepwiseError",
]
