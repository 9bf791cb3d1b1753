"""
Learner profile persistence.

Each learner is one JSON document, ``{learner_id}.json``, under the
configured profile directory (``~/.stepwise/profiles`` by default).
The engine never imports this module; the CLI loads a profile, passes it
through PracticeService commands, and saves it afterwards.
"""

from __future__ import annotations

import json
import re
from pathlib import Path
from typing import Optional

from loguru import logger

from stepwise.core.models import LearnerProfile

_SLUG_RE = re.compile(r"[^a-z0-9]+")


def learner_id_for(name: str) -> str:
    """File-safe learner id derived from a display name."""
    slug = _SLUG_RE.sub("-", name.strip().lower()).strip("-")
    return slug or "learner"


class ProfileStore:
    """
    Manages profile persistence.

    Profiles are stored as JSON files with naming: {learner_id}.json
    """

    def __init__(self, profile_dir: Path):
        self.profile_dir = Path(profile_dir)
        self.profile_dir.mkdir(parents=True, exist_ok=True)

    def path_for(self, learner_id: str) -> Path:
        return self.profile_dir / f"{learner_id_for(learner_id)}.json"

    def exists(self, learner_id: str) -> bool:
        return self.path_for(learner_id).exists()

    def save(self, profile: LearnerProfile) -> Path:
        """Save a profile, replacing any previous version."""
        filepath = self.path_for(profile.learner_id)
        tmp_path = filepath.with_suffix(".json.tmp")

        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(profile.to_dict(), f, indent=2, ensure_ascii=False)
        tmp_path.replace(filepath)

        logger.info(f"Saved profile {profile.learner_id} to {filepath}")
        return filepath

    def load(self, learner_id: str) -> Optional[LearnerProfile]:
        """Load a profile by id, or None if missing or unreadable."""
        filepath = self.path_for(learner_id)
        if not filepath.exists():
            return None
        return self._read(filepath)

    def delete(self, learner_id: str) -> bool:
        """Delete a profile file."""
        filepath = self.path_for(learner_id)
        if filepath.exists():
            filepath.unlink()
            logger.info(f"Deleted profile {learner_id}")
            return True
        return False

    def list_profiles(self) -> list[LearnerProfile]:
        """All readable profiles, sorted by display name."""
        profiles = []
        for filepath in sorted(self.profile_dir.glob("*.json")):
            profile = self._read(filepath)
            if profile is not None:
                profiles.append(profile)
        return sorted(profiles, key=lambda p: (p.display_name.lower(), p.learner_id))

    @staticmethod
    def _read(filepath: Path) -> Optional[LearnerProfile]:
        try:
            with open(filepath, "r", encoding="utf-8") as f:
                data = json.load(f)
            return LearnerProfile.from_dict(data)
        except (OSError, json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
            logger.warning(f"Skipping unreadable profile {filepath.name}: {e}")
            return None
