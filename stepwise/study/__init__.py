"""
Study Module - Adaptive practice session engine.

Provides:
- Weighted session bucketing (struggling / new / revision)
- Session rotation and complexity level unlocks
- Parent-facing guidance derivation
- Learner statistics
- PracticeService, the command/query facade used by the CLI
"""

from stepwise.study.bucketer import BucketSelection, SessionBucketer
from stepwise.study.guidance import (
    Guidance,
    GuidanceCategory,
    GuidanceConfig,
    Urgency,
    derive_session_guidance,
    derive_word_guidance,
)
from stepwise.study.orchestrator import (
    AdvanceResult,
    AdvanceStatus,
    OrchestratorConfig,
    SessionOrchestrator,
)
from stepwise.study.practice_service import CardView, PracticeService, SessionProgress
from stepwise.study.progression import ComplexityProgressor
from stepwise.study.stats import ProgressStats, SessionStats, StatsCalculator

__all__ = [
    "AdvanceResult",
    "AdvanceStatus",
    "BucketSelection",
    "CardView",
    "ComplexityProgressor",
    "Guidance",
    "GuidanceCategory",
    "GuidanceConfig",
    "OrchestratorConfig",
    "PracticeService",
    "ProgressStats",
    "SessionBucketer",
    "SessionOrchestrator",
    "SessionProgress",
    "SessionStats",
    "StatsCalculator",
    "Urgency",
    "derive_session_guidance",
    "derive_word_guidance",
]
