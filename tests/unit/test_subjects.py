"""
Unit tests for the subject registry.
"""

import pytest

from stepwise.core.subjects import BUILTIN_SUBJECTS, SubjectProfile, SubjectRegistry


@pytest.fixture
def registry():
    return SubjectRegistry()


def test_builtin_codes(registry):
    assert registry.codes() == ["english", "mathtables", "numberspellings", "humanbody"]


def test_revision_support(registry):
    assert registry.supports_revision("mathtables")
    assert registry.supports_revision("numberspellings")
    assert not registry.supports_revision("english")
    assert not registry.supports_revision("unknown")


def test_parent_tips(registry):
    assert registry.parent_tip("english") == "Have them read it again."
    assert registry.parent_tip("mathtables") == "Ask them to explain the step."
    assert registry.parent_tip("humanbody") is None


def test_unknown_subject_falls_back(registry):
    assert "geography" not in registry
    assert registry.display_name("geography") == "Geography"
    assert registry.prompt_label("geography") == "Answer the question"


def test_duplicate_codes_rejected():
    with pytest.raises(ValueError):
        SubjectRegistry(BUILTIN_SUBJECTS + (SubjectProfile(code="english", display_name="Again"),))
