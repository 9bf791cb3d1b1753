"""
Session Bucketer.

Samples a fixed-size working set from a candidate pool, mixing three
buckets by weight:
- Struggling: attempted but not yet mastered
- New: never attempted
- Revision: mastered, cooled down, and the subject supports revision

Mastered words still cooling down are not eligible for any bucket.

Targets are ``round(weight / total_weight * n)``; the rounding remainder goes
to the heaviest bucket. Buckets that cannot meet their target hand the
shortfall to the remaining eligible pool, so the result always has
``min(n, eligible)`` distinct ids. All randomness flows through the
injected ``random.Random``.
"""
from __future__ import annotations

import math
import random
from dataclasses import dataclass, field
from typing import Iterable, Optional

from loguru import logger

from stepwise.core.mastery import MasteryState, MasteryStateMachine
from stepwise.core.models import SelectionWeights, WordRecord

BUCKET_ORDER = ("struggling", "new", "revision")


@dataclass
class BucketSelection:
    """Result of one bucketed draw."""
    word_ids: list[str] = field(default_factory=list)
    requested: int = 0
    eligible: int = 0
    targets: dict[str, int] = field(default_factory=dict)
    drawn: dict[str, int] = field(default_factory=dict)
    cascaded: int = 0

    @property
    def size(self) -> int:
        return len(self.word_ids)

    @property
    def is_short(self) -> bool:
        """Fewer ids than requested."""
        return self.size < self.requested

    def summary(self) -> dict:
        return {
            "size": self.size,
            "requested": self.requested,
            "eligible": self.eligible,
            "targets": dict(self.targets),
            "drawn": dict(self.drawn),
            "cascaded": self.cascaded,
        }


class SessionBucketer:
    """
    Builds the word list for a new session.

    The algorithm:
    1. Partition the pool into struggling / new / revision buckets
    2. Compute a target per bucket from the weights
    3. Sample each bucket without replacement up to its target
    4. Cascade any shortfall from the rest of the eligible pool
    5. Shuffle so buckets are interleaved, not blocked
    """

    def __init__(self, mastery: Optional[MasteryStateMachine] = None):
        """
        Initialize bucketer.

        Args:
            mastery: State machine used to classify words
        """
        self.mastery = mastery or MasteryStateMachine()

    def partition(
        self,
        pool: Iterable[WordRecord],
        allow_revision: bool = True,
    ) -> dict[str, list[WordRecord]]:
        """
        Split a pool into the three buckets, each sorted by id.

        Args:
            pool: Candidate words
            allow_revision: False for subjects without revision support

        Returns:
            Bucket name -> words
        """
        buckets: dict[str, list[WordRecord]] = {name: [] for name in BUCKET_ORDER}
        for word in pool:
            state = self.mastery.state_of(word)
            if state is MasteryState.MASTERED_IDLE:
                if allow_revision:
                    buckets["revision"].append(word)
            elif state is MasteryState.MASTERED_ACTIVE:
                continue
            elif word.has_attempts:
                buckets["struggling"].append(word)
            else:
                buckets["new"].append(word)

        for words in buckets.values():
            words.sort(key=lambda w: w.id)
        return buckets

    @staticmethod
    def compute_targets(weights: SelectionWeights, n: int) -> dict[str, int]:
        """
        Per-bucket targets summing to ``n``.

        Args:
            weights: Bucket weights (negatives count as zero)
            n: Requested session size

        Returns:
            Bucket name -> target count
        """
        n = max(0, n)
        normalized = weights.as_dict()
        total = sum(normalized.values())
        targets = {
            name: int(math.floor(normalized[name] / total * n + 0.5))
            for name in BUCKET_ORDER
        }

        remainder = n - sum(targets.values())
        if remainder:
            # max() keeps the first of equal weights, so ties follow BUCKET_ORDER
            heaviest = max(BUCKET_ORDER, key=lambda name: normalized[name])
            targets[heaviest] = max(0, targets[heaviest] + remainder)
        return targets

    def select(
        self,
        pool: Iterable[WordRecord],
        weights: SelectionWeights,
        n: int,
        rng: random.Random,
        allow_revision: bool = True,
    ) -> BucketSelection:
        """
        Draw a session's word ids.

        Args:
            pool: Candidate words, already filtered to subject and level
            weights: Bucket weights
            n: Requested session size
            rng: Injected random source
            allow_revision: Whether mastered idle words may be revised

        Returns:
            BucketSelection with ``min(n, eligible)`` distinct ids
        """
        buckets = self.partition(pool, allow_revision=allow_revision)
        eligible = sum(len(words) for words in buckets.values())
        n = max(0, n)
        targets = self.compute_targets(weights, n)

        selection = BucketSelection(requested=n, eligible=eligible, targets=targets)
        chosen: list[str] = []
        taken: set[str] = set()

        for name in BUCKET_ORDER:
            words = buckets[name]
            count = min(targets[name], len(words))
            picked = rng.sample(words, count) if count else []
            chosen.extend(word.id for word in picked)
            taken.update(word.id for word in picked)
            selection.drawn[name] = count

        shortfall = min(n, eligible) - len(chosen)
        if shortfall > 0:
            leftovers = sorted(
                (w for name in BUCKET_ORDER for w in buckets[name] if w.id not in taken),
                key=lambda w: w.id,
            )
            extra = rng.sample(leftovers, shortfall)
            chosen.extend(word.id for word in extra)
            selection.cascaded = shortfall

        rng.shuffle(chosen)
        selection.word_ids = chosen

        logger.debug(
            f"Bucketed {len(chosen)}/{n} words from {eligible} eligible "
            f"(drawn: {selection.drawn}, cascaded: {selection.cascaded})"
        )
        return selection
