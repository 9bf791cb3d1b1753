"""
Pytest Configuration and Fixtures.

This file configures pytest and provides shared fixtures for all tests.
"""
import random
import sys
from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from stepwise.config import Settings  # noqa: E402
from stepwise.content.catalog import ContentCatalog, bootstrap_profile  # noqa: E402
from stepwise.core.mastery import MasteryConfig, MasteryStateMachine  # noqa: E402
from stepwise.core.models import (  # noqa: E402
    AttemptRecord,
    LearnerProfile,
    Outcome,
    Session,
    SubjectSettings,
    WordRecord,
)


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "bdd: Behaviour scenarios (pytest-bdd)")
    config.addinivalue_line("markers", "smoke: Smoke tests for CLI commands")
    config.addinivalue_line("markers", "slow: Slow tests")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        # Mark based on test file location
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "bdd" in str(item.fspath):
            item.add_marker(pytest.mark.bdd)
        elif "smoke" in str(item.fspath):
            item.add_marker(pytest.mark.smoke)


# =============================================================================
# Builders
# =============================================================================

T0 = datetime(2024, 3, 1, 9, 0, tzinfo=UTC)


class FixedClock:
    """Deterministic clock that ticks one second per call."""

    def __init__(self, start: datetime = T0):
        self.now = start

    def __call__(self) -> datetime:
        self.now += timedelta(seconds=1)
        return self.now


def make_word(
    word_id: str,
    subject: str = "mathtables",
    level: int = 1,
    step: int = 0,
    cooldown: int = 0,
    attempts: int = 0,
) -> WordRecord:
    """Word record with optional synthetic history."""
    word = WordRecord(id=word_id, subject_code=subject, complexity_level=level)
    word.mastery_step = step
    word.cooldown = cooldown
    word.attempts = [
        AttemptRecord(timestamp=T0 - timedelta(days=1), outcome=Outcome.CORRECT)
        for _ in range(attempts)
    ]
    return word


def make_profile(words: list[WordRecord], session_size: int = 12) -> LearnerProfile:
    profile = LearnerProfile(learner_id="tester", display_name="Tester", created_at=T0)
    for word in words:
        profile.words[word.id] = word
        profile.settings.setdefault(word.subject_code, SubjectSettings(session_size=session_size))
    return profile


def add_session(profile: LearnerProfile, word_ids: list[str], subject: str = "mathtables") -> Session:
    session = Session(
        id=f"{subject}-fixed",
        subject_code=subject,
        word_ids=tuple(word_ids),
        created_at=T0,
    )
    profile.sessions[session.id] = session
    profile.active_session_by_subject[subject] = session.id
    return session


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture(scope="session")
def project_root():
    """Return the project root directory."""
    return PROJECT_ROOT


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def clock():
    return FixedClock()


@pytest.fixture
def mastery():
    return MasteryStateMachine(MasteryConfig())


@pytest.fixture
def settings(tmp_path):
    """Settings isolated from the environment and the home directory."""
    return Settings(_env_file=None, profile_dir=tmp_path / "profiles")


@pytest.fixture
def small_catalog():
    """Two-level math bank plus a one-level quiz bank."""
    return ContentCatalog.from_items({
        "mathtables": [
            {"id": f"2x{n}", "complexity": 1, "question": f"2 × {n}", "answer": str(2 * n)}
            for n in range(2, 6)
        ] + [
            {"id": f"3x{n}", "complexity": 2, "question": f"3 × {n}", "answer": str(3 * n)}
            for n in range(2, 6)
        ],
        "humanbody": [
            {"id": "hb-1", "complexity": 1, "question": "Which organ pumps blood?", "answer": "The heart"},
            {"id": "hb-2", "complexity": 1, "question": "Which organ do we breathe with?", "answer": "The lungs"},
        ],
    })


@pytest.fixture
def fresh_profile(small_catalog, settings, clock):
    return bootstrap_profile("tester", "Tester", small_catalog, settings=settings, now=clock())


@pytest.fixture
def word_factory():
    return make_word


@pytest.fixture
def profile_factory():
    return make_profile


@pytest.fixture
def session_factory():
    return add_session
