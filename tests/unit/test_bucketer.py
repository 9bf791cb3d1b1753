"""
Unit tests for SessionBucketer.

Tests:
- Bucket partitioning (new / struggling / revision / excluded)
- Target computation and rounding remainder
- Output size and uniqueness for any pool and weights
- Cascading shortfalls
- Determinism under a seeded generator
"""

import random

import pytest

from stepwise.core.models import SelectionWeights
from stepwise.study.bucketer import SessionBucketer


@pytest.fixture
def bucketer(mastery):
    return SessionBucketer(mastery)


@pytest.fixture
def mixed_pool(word_factory):
    """6 new, 6 struggling, 6 revision-ready, 3 cooling down."""
    pool = [word_factory(f"new-{i}") for i in range(6)]
    pool += [word_factory(f"str-{i}", step=1, attempts=1) for i in range(6)]
    pool += [word_factory(f"rev-{i}", step=2, cooldown=0, attempts=2) for i in range(6)]
    pool += [word_factory(f"hot-{i}", step=2, cooldown=1, attempts=2) for i in range(3)]
    return pool


class TestPartition:
    """Tests for bucket assignment."""

    def test_buckets_are_disjoint_and_sorted(self, bucketer, mixed_pool):
        buckets = bucketer.partition(mixed_pool)

        assert [w.id for w in buckets["new"]] == [f"new-{i}" for i in range(6)]
        assert [w.id for w in buckets["struggling"]] == [f"str-{i}" for i in range(6)]
        assert [w.id for w in buckets["revision"]] == [f"rev-{i}" for i in range(6)]

    def test_cooling_down_words_are_excluded(self, bucketer, mixed_pool):
        buckets = bucketer.partition(mixed_pool)
        ids = {w.id for words in buckets.values() for w in words}
        assert not any(i.startswith("hot-") for i in ids)

    def test_step_zero_with_attempts_is_struggling(self, bucketer, word_factory):
        buckets = bucketer.partition([word_factory("w", step=0, attempts=3)])
        assert [w.id for w in buckets["struggling"]] == ["w"]

    def test_revision_disabled(self, bucketer, mixed_pool):
        buckets = bucketer.partition(mixed_pool, allow_revision=False)
        assert buckets["revision"] == []


class TestTargets:
    """Tests for per-bucket targets."""

    def test_default_weights_for_twelve(self):
        targets = SessionBucketer.compute_targets(SelectionWeights(), 12)
        assert targets == {"struggling": 6, "new": 4, "revision": 2}

    def test_targets_sum_to_n(self):
        for n in range(0, 30):
            for weights in (
                SelectionWeights(),
                SelectionWeights(1, 1, 1),
                SelectionWeights(0.1, 0.7, 0.2),
                SelectionWeights(0, 0, 1),
            ):
                assert sum(SessionBucketer.compute_targets(weights, n).values()) == n

    def test_remainder_goes_to_heaviest_bucket(self):
        targets = SessionBucketer.compute_targets(SelectionWeights(1, 1, 1), 2)
        # 2/3 rounds to 1 for each bucket; the extra one comes off "struggling"
        assert targets == {"struggling": 0, "new": 1, "revision": 1}

    def test_all_zero_weights_fall_back_to_equal(self):
        targets = SessionBucketer.compute_targets(SelectionWeights(0, 0, 0), 3)
        assert targets == {"struggling": 1, "new": 1, "revision": 1}

    def test_negative_weights_count_as_zero(self):
        targets = SessionBucketer.compute_targets(SelectionWeights(-5, 1, 0), 4)
        assert targets == {"struggling": 0, "new": 4, "revision": 0}


class TestSelect:
    """Tests for the full draw."""

    def test_weighted_draw_respects_targets(self, bucketer, mixed_pool, rng):
        selection = bucketer.select(mixed_pool, SelectionWeights(), 12, rng)

        assert selection.size == 12
        assert selection.drawn == {"struggling": 6, "new": 4, "revision": 2}
        assert selection.cascaded == 0
        assert sum(1 for i in selection.word_ids if i.startswith("str-")) == 6

    def test_shortfall_cascades_to_other_buckets(self, bucketer, word_factory, rng):
        pool = [word_factory(f"new-{i}") for i in range(10)]

        selection = bucketer.select(pool, SelectionWeights(), 6, rng)

        assert selection.size == 6
        assert selection.drawn["new"] == 2
        assert selection.cascaded == 4
        assert len(set(selection.word_ids)) == 6

    def test_small_pool_returns_everything(self, bucketer, mixed_pool, rng):
        selection = bucketer.select(mixed_pool, SelectionWeights(), 50, rng)

        assert selection.size == 18
        assert selection.eligible == 18
        assert selection.is_short

    def test_empty_pool(self, bucketer, rng):
        selection = bucketer.select([], SelectionWeights(), 12, rng)
        assert selection.word_ids == []

    def test_same_seed_same_draw(self, bucketer, mixed_pool):
        first = bucketer.select(mixed_pool, SelectionWeights(), 10, random.Random(7))
        second = bucketer.select(list(reversed(mixed_pool)), SelectionWeights(), 10, random.Random(7))
        assert first.word_ids == second.word_ids

    @pytest.mark.parametrize("seed", range(25))
    def test_size_is_min_of_request_and_pool(self, bucketer, word_factory, seed):
        rng = random.Random(seed)
        pool = []
        for i in range(rng.randint(0, 30)):
            kind = rng.choice(["new", "struggling", "revision"])
            if kind == "new":
                pool.append(word_factory(f"w{i}"))
            elif kind == "struggling":
                pool.append(word_factory(f"w{i}", step=1, attempts=1))
            else:
                pool.append(word_factory(f"w{i}", step=2, cooldown=0, attempts=2))
        weights = SelectionWeights(rng.random(), rng.random(), rng.random())
        n = rng.randint(0, 40)

        selection = bucketer.select(pool, weights, n, rng)

        assert selection.size == min(n, len(pool))
        assert len(set(selection.word_ids)) == selection.size
        assert set(selection.word_ids) <= {w.id for w in pool}
