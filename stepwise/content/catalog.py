"""
Content catalog.

Immutable question banks per subject. Banks are JSON arrays of
``{id, complexity, question, answer?, notes?}`` objects; the math tables bank
is generated. The catalog never carries learner state: ``bootstrap_profile``
and ``sync_catalog`` lay mastery records on top of it.
"""

from __future__ import annotations

import json
from collections.abc import Iterable
from datetime import UTC, datetime
from pathlib import Path

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from stepwise.config import Settings, get_settings
from stepwise.core.models import LearnerProfile, SubjectSettings, WordRecord
from stepwise.core.subjects import SubjectRegistry

BANKS_DIR = Path(__file__).parent / "banks"

# First factor -> tier for the generated multiplication tables
MATH_TABLE_LEVELS = {
    2: 1,
    3: 2, 4: 2, 5: 2,
    6: 3, 7: 3, 8: 3,
    9: 4, 10: 4,
    11: 5, 12: 5,
    13: 6, 14: 6, 15: 6,
    16: 7, 17: 7, 18: 7,
    19: 8, 20: 8,
}


class CatalogItem(BaseModel):
    """One question in a bank."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str = Field(min_length=1)
    complexity: int = Field(default=1, ge=1)
    question: str
    answer: str | None = None
    notes: str | None = None


def generate_math_tables() -> list[CatalogItem]:
    """Multiplication facts 2..20 x 2..10, tiered by the first factor."""
    items = []
    for first, level in MATH_TABLE_LEVELS.items():
        for second in range(2, 11):
            items.append(
                CatalogItem(
                    id=f"{first}x{second}",
                    complexity=level,
                    question=f"{first} × {second}",
                    answer=str(first * second),
                )
            )
    return items


GENERATED_BANKS = {"mathtables": generate_math_tables}


class ContentCatalog:
    """Question banks keyed by subject code."""

    def __init__(
        self,
        registry: SubjectRegistry | None = None,
        extra_dir: Path | None = None,
        include_bundled: bool = True,
    ):
        """
        Initialize catalog.

        Args:
            registry: Subjects whose bundled banks should be loaded
            extra_dir: Optional directory of ``{subject}.json`` banks
            include_bundled: Load the banks shipped with the package
        """
        self.registry = registry or SubjectRegistry()
        self._items: dict[str, list[CatalogItem]] = {}
        self._index: dict[str, tuple[str, CatalogItem]] = {}

        if include_bundled:
            self._load_bundled()
        if extra_dir is not None:
            self.load_directory(Path(extra_dir))

    @classmethod
    def from_items(
        cls,
        banks: dict[str, Iterable[CatalogItem | dict]],
        registry: SubjectRegistry | None = None,
    ) -> ContentCatalog:
        """Build a catalog from in-memory banks only."""
        catalog = cls(registry=registry, include_bundled=False)
        for subject, items in banks.items():
            catalog.add_items(
                subject,
                [i if isinstance(i, CatalogItem) else CatalogItem(**i) for i in items],
            )
        return catalog

    # ========================================================================
    # LOADING
    # ========================================================================

    def _load_bundled(self) -> None:
        for profile in self.registry:
            generator = GENERATED_BANKS.get(profile.code)
            if generator is not None:
                self.add_items(profile.code, generator())
            elif profile.bank:
                self.load_bank(profile.code, BANKS_DIR / profile.bank)

    def load_directory(self, directory: Path) -> int:
        """Load every ``{subject}.json`` bank in a directory."""
        if not directory.is_dir():
            logger.warning(f"Catalog directory not found: {directory}")
            return 0
        loaded = 0
        for path in sorted(directory.glob("*.json")):
            loaded += self.load_bank(path.stem, path)
        return loaded

    def load_bank(self, subject: str, path: Path) -> int:
        """
        Load one bank file.

        Args:
            subject: Subject code the bank belongs to
            path: JSON file holding an array of items

        Returns:
            Number of items added
        """
        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
            if not isinstance(raw, list):
                raise ValueError("bank must be a JSON array")
            items = [CatalogItem.model_validate(entry) for entry in raw]
        except (OSError, ValueError, ValidationError) as e:
            logger.warning(f"Skipping bank {path}: {e}")
            return 0
        return self.add_items(subject, items)

    def add_items(self, subject: str, items: Iterable[CatalogItem]) -> int:
        bank = self._items.setdefault(subject, [])
        added = 0
        for item in items:
            if item.id in self._index:
                owner = self._index[item.id][0]
                logger.warning(f"Duplicate item id {item.id!r} in {subject} (already in {owner})")
                continue
            bank.append(item)
            self._index[item.id] = (subject, item)
            added += 1
        logger.debug(f"Loaded {added} items into {subject}")
        return added

    # ========================================================================
    # LOOKUP
    # ========================================================================

    def subjects(self) -> list[str]:
        return [subject for subject, items in self._items.items() if items]

    def items(self, subject: str) -> list[CatalogItem]:
        return list(self._items.get(subject, []))

    def item(self, subject: str, item_id: str) -> CatalogItem | None:
        entry = self._index.get(item_id)
        if entry is None or entry[0] != subject:
            return None
        return entry[1]

    def find(self, item_id: str) -> CatalogItem | None:
        """Look up an item by id regardless of subject."""
        entry = self._index.get(item_id)
        return entry[1] if entry else None

    def levels(self, subject: str) -> list[int]:
        return sorted({item.complexity for item in self._items.get(subject, [])})

    def __len__(self) -> int:
        return len(self._index)


# ============================================================================
# PROFILE BOOTSTRAP
# ============================================================================


def default_subject_settings(
    subject: str,
    registry: SubjectRegistry,
    settings: Settings,
) -> SubjectSettings:
    profile = registry.get(subject)
    level = profile.default_complexity_level if profile else 1
    return SubjectSettings(
        unlocked_level=max(1, min(level, settings.max_complexity_level)),
        session_size=settings.default_session_size,
        selection_weights=settings.selection_weights(),
    )


def sync_catalog(
    profile: LearnerProfile,
    catalog: ContentCatalog,
    registry: SubjectRegistry | None = None,
    settings: Settings | None = None,
) -> int:
    """
    Add word records for catalog items the profile has not seen yet.

    Existing records are never touched or removed.

    Returns:
        Number of records added
    """
    registry = registry or catalog.registry
    settings = settings or get_settings()
    added = 0
    for subject in catalog.subjects():
        if subject not in profile.settings:
            profile.settings[subject] = default_subject_settings(subject, registry, settings)
        for item in catalog.items(subject):
            if item.id in profile.words:
                continue
            profile.words[item.id] = WordRecord(
                id=item.id,
                subject_code=subject,
                complexity_level=item.complexity,
            )
            added += 1
    if added:
        logger.info(f"{profile.learner_id}: added {added} new words from the catalog")
    return added


def bootstrap_profile(
    learner_id: str,
    display_name: str,
    catalog: ContentCatalog,
    registry: SubjectRegistry | None = None,
    settings: Settings | None = None,
    now: datetime | None = None,
) -> LearnerProfile:
    """
    Create a fresh learner profile with one record per catalog item.

    Args:
        learner_id: Stable learner identifier
        display_name: Name shown in the CLI
        catalog: Content to lay mastery records on
        registry: Subject registry (defaults to the catalog's)
        settings: Application settings for subject defaults

    Returns:
        New LearnerProfile with every word at step 0
    """
    profile = LearnerProfile(
        learner_id=learner_id,
        display_name=display_name or learner_id,
        created_at=now or datetime.now(UTC),
    )
    sync_catalog(profile, catalog, registry=registry, settings=settings)
    profile.selected_subjects = catalog.subjects()
    logger.info(f"Bootstrapped profile {learner_id} with {len(profile.words)} words")
    return profile
