"""
Subject registry.

Subject-specific display rules, tips and revision support resolve through a
closed registry built once at import time. Adding a subject means adding a
SubjectProfile to BUILTIN_SUBJECTS and dropping its question bank into
``stepwise/content/banks``; nothing else branches on subject codes.
"""

from __future__ import annotations

from dataclasses import dataclass

DEFAULT_PROMPT_LABEL = "Answer the question"
DEFAULT_PARENT_INSTRUCTION = (
    "Ask your child to answer out loud while you tap the button that matches."
)


@dataclass(frozen=True)
class SubjectProfile:
    """Capability descriptor for one subject."""

    code: str
    display_name: str
    icon: str = "📘"
    prompt_label: str = DEFAULT_PROMPT_LABEL
    parent_instruction: str = DEFAULT_PARENT_INSTRUCTION
    parent_tip: str | None = None
    supports_revision: bool = False
    always_show_answer: bool = False  # answer printed with the prompt
    answer_label: str = "Answer"
    default_complexity_level: int = 1
    bank: str | None = None  # bundled bank file; None means generated


BUILTIN_SUBJECTS: tuple[SubjectProfile, ...] = (
    SubjectProfile(
        code="english",
        display_name="English",
        icon="🇺🇸",
        prompt_label="Read this sentence aloud",
        parent_instruction=(
            "Ask your child to read the sentence aloud. Listen and confirm their "
            "response, then tap the button that matches how well they did."
        ),
        parent_tip="Have them read it again.",
        always_show_answer=True,
        answer_label="Sentence",
        bank="english.json",
    ),
    SubjectProfile(
        code="mathtables",
        display_name="Math Tables",
        icon="🔢",
        prompt_label="Solve this problem",
        parent_instruction=(
            "Ask for the answer out loud. Encourage quick mental recall before "
            "you tap the response."
        ),
        parent_tip="Ask them to explain the step.",
        supports_revision=True,
        answer_label="Product",
    ),
    SubjectProfile(
        code="numberspellings",
        display_name="Number Spellings (1-20)",
        icon="🔤",
        prompt_label="Spell this number",
        parent_instruction=(
            "Show the number and ask your child to spell it letter by letter "
            "aloud before you tap."
        ),
        supports_revision=True,
        answer_label="Spelling",
        bank="numberspellings.json",
    ),
    SubjectProfile(
        code="humanbody",
        display_name="Human Body",
        icon="🧠",
        prompt_label="Answer the question",
        parent_instruction=(
            "Read the fact aloud, hear their answer, then tap the button that "
            "matches how confident it was."
        ),
        bank="humanbody.json",
    ),
)


class SubjectRegistry:
    """Lookup of subject capabilities by code."""

    def __init__(self, profiles: tuple[SubjectProfile, ...] = BUILTIN_SUBJECTS):
        self._profiles: dict[str, SubjectProfile] = {}
        for profile in profiles:
            if profile.code in self._profiles:
                raise ValueError(f"duplicate subject code: {profile.code}")
            self._profiles[profile.code] = profile

    def __contains__(self, code: object) -> bool:
        return code in self._profiles

    def __iter__(self):
        return iter(self._profiles.values())

    def get(self, code: str) -> SubjectProfile | None:
        return self._profiles.get(code)

    def codes(self) -> list[str]:
        return list(self._profiles)

    def is_configured(self, code: str) -> bool:
        return code in self._profiles

    def display_name(self, code: str) -> str:
        """Configured name, or the capitalised code for unknown subjects."""
        profile = self._profiles.get(code)
        if profile is not None:
            return profile.display_name
        return code[:1].upper() + code[1:]

    def parent_tip(self, code: str) -> str | None:
        profile = self._profiles.get(code)
        return profile.parent_tip if profile else None

    def supports_revision(self, code: str) -> bool:
        profile = self._profiles.get(code)
        return profile.supports_revision if profile else False

    def prompt_label(self, code: str) -> str:
        profile = self._profiles.get(code)
        return profile.prompt_label if profile else DEFAULT_PROMPT_LABEL
