"""
Unit tests for the content catalog and profile bootstrap.
"""

import json

import pytest
from pydantic import ValidationError

from stepwise.content.catalog import (
    CatalogItem,
    ContentCatalog,
    bootstrap_profile,
    generate_math_tables,
    sync_catalog,
)


class TestCatalogItem:
    def test_extra_fields_ignored(self):
        item = CatalogItem.model_validate({"id": "x", "question": "Q", "audio": "x.mp3"})
        assert item.complexity == 1

    def test_complexity_must_be_positive(self):
        with pytest.raises(ValidationError):
            CatalogItem(id="x", question="Q", complexity=0)

    def test_frozen(self):
        item = CatalogItem(id="x", question="Q")
        with pytest.raises(ValidationError):
            item.question = "changed"


class TestMathTables:
    def test_generated_bank(self):
        items = generate_math_tables()

        assert len(items) == 19 * 9
        assert len({i.id for i in items}) == len(items)
        by_id = {i.id: i for i in items}
        assert by_id["7x8"].answer == "56"
        assert by_id["2x2"].complexity == 1
        assert by_id["20x10"].complexity == 8


class TestBundledCatalog:
    @pytest.fixture(scope="class")
    def catalog(self):
        return ContentCatalog()

    def test_every_builtin_subject_has_content(self, catalog):
        assert set(catalog.subjects()) == {"english", "mathtables", "numberspellings", "humanbody"}

    def test_item_ids_are_globally_unique(self, catalog):
        total = sum(len(catalog.items(s)) for s in catalog.subjects())
        assert total == len(catalog)

    def test_lookup(self, catalog):
        assert catalog.find("7x8").question == "7 × 8"
        assert catalog.item("mathtables", "7x8") is not None
        assert catalog.item("english", "7x8") is None

    def test_levels_start_at_one(self, catalog):
        for subject in catalog.subjects():
            assert catalog.levels(subject)[0] == 1


class TestLoading:
    def test_extra_directory(self, tmp_path):
        (tmp_path / "dinosaurs.json").write_text(
            json.dumps([{"id": "dino-1", "question": "Biggest dinosaur?", "answer": "Argentinosaurus"}]),
            encoding="utf-8",
        )

        catalog = ContentCatalog(extra_dir=tmp_path, include_bundled=False)

        assert catalog.subjects() == ["dinosaurs"]
        assert catalog.find("dino-1").answer == "Argentinosaurus"

    @pytest.mark.parametrize(
        "content",
        ["{not json", json.dumps({"id": "x"}), json.dumps([{"question": "no id"}])],
    )
    def test_bad_bank_is_skipped(self, tmp_path, content):
        path = tmp_path / "broken.json"
        path.write_text(content, encoding="utf-8")

        catalog = ContentCatalog(include_bundled=False)

        assert catalog.load_bank("broken", path) == 0
        assert len(catalog) == 0

    def test_missing_directory(self, tmp_path):
        catalog = ContentCatalog(include_bundled=False)
        assert catalog.load_directory(tmp_path / "nope") == 0

    def test_duplicate_ids_skipped(self):
        catalog = ContentCatalog.from_items({
            "english": [{"id": "dup", "question": "First"}],
            "humanbody": [{"id": "dup", "question": "Second"}, {"id": "hb", "question": "Q"}],
        })

        assert len(catalog) == 2
        assert catalog.find("dup").question == "First"
        assert [i.id for i in catalog.items("humanbody")] == ["hb"]


class TestBootstrap:
    def test_fresh_profile(self, small_catalog, settings):
        profile = bootstrap_profile("ada", "Ada", small_catalog, settings=settings)

        assert len(profile.words) == 10
        assert all(w.mastery_step == 0 and not w.attempts for w in profile.words.values())
        assert profile.words["3x4"].complexity_level == 2
        assert profile.selected_subjects == ["mathtables", "humanbody"]
        assert profile.settings["mathtables"].unlocked_level == 1
        assert profile.settings["mathtables"].session_size == settings.default_session_size

    def test_sync_keeps_existing_progress(self, small_catalog, settings, fresh_profile):
        fresh_profile.words["2x2"].mastery_step = 2
        small_catalog.add_items("humanbody", [CatalogItem(id="hb-3", question="Q")])

        added = sync_catalog(fresh_profile, small_catalog, settings=settings)

        assert added == 1
        assert fresh_profile.words["2x2"].mastery_step == 2
        assert fresh_profile.words["hb-3"].subject_code == "humanbody"

    def test_sync_is_idempotent(self, small_catalog, settings, fresh_profile):
        assert sync_catalog(fresh_profile, small_catalog, settings=settings) == 0
