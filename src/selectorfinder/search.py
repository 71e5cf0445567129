from __future__ import annotations

from dataclasses import dataclass
from itertools import product
import logging
from math import prod
from typing import Any, Iterator, Sequence

from .errors import InternalInconsistencyError
from .models import Identifier, LevelRecord, Path, SearchHit, SpecificityTier
from .renderer import render_selector
from .scoring import path_penalty, sort_paths
from .tree import QueryResult, TreeAdapter

logger = logging.getLogger(__name__)

SPECIFICITY_TIERS: tuple[SpecificityTier, ...] = ("all", "two", "one")


class UniquenessOracle:
    """Runs rendered paths against the live tree, one query per distinct selector.

    Results are memoized for the lifetime of the oracle, which is a single
    finder call, so the tree must not change while it is in use.
    """

    def __init__(self, adapter: TreeAdapter, scope: Any) -> None:
        self.adapter = adapter
        self.scope = scope
        self.queries = 0
        self._cache: dict[str, QueryResult] = {}

    def resolve(self, path: Sequence[Identifier]) -> QueryResult:
        selector = render_selector(path)
        result = self._cache.get(selector)
        if result is None:
            result = self.adapter.query(self.scope, selector)
            self.queries += 1
            self._cache[selector] = result
        if result.count == 0:
            raise InternalInconsistencyError(selector)
        return result

    def is_unique(self, path: Sequence[Identifier], target: Any | None = None) -> bool:
        result = self.resolve(path)
        if result.count != 1:
            return False
        if target is None:
            return True
        return self.adapter.same_node(result.first, target)


@dataclass(frozen=True, slots=True)
class TierAttempt:
    tier: SpecificityTier
    combinations: int
    path: Path | None = None
    exceeded: bool = False


def tier_candidates(levels: Sequence[LevelRecord], tier: SpecificityTier) -> list[list[Identifier]]:
    return [record.candidates(tier) for record in levels]


def combination_count(candidate_lists: Sequence[Sequence[Identifier]]) -> int:
    return prod(len(candidates) for candidates in candidate_lists)


def iter_combinations(candidate_lists: Sequence[Sequence[Identifier]]) -> Iterator[Path]:
    """Yield one identifier per level, target-most level varying fastest."""
    for combination in product(*reversed(candidate_lists)):
        yield tuple(reversed(combination))


def try_tier(
    levels: Sequence[LevelRecord],
    tier: SpecificityTier,
    oracle: UniquenessOracle,
    threshold: int,
    target: Any | None = None,
) -> TierAttempt:
    candidate_lists = tier_candidates(levels, tier)
    total = combination_count(candidate_lists)
    if total > threshold:
        return TierAttempt(tier=tier, combinations=total, exceeded=True)

    for path in sort_paths(iter_combinations(candidate_lists)):
        if oracle.is_unique(path, target):
            return TierAttempt(tier=tier, combinations=total, path=path)
    return TierAttempt(tier=tier, combinations=total)


def search_unique_path(
    levels: Sequence[LevelRecord],
    oracle: UniquenessOracle,
    threshold: int,
    target: Any | None = None,
    tiers: Sequence[SpecificityTier] = SPECIFICITY_TIERS,
) -> SearchHit | None:
    """Return the lowest-penalty unique path of the widest tier that fits the threshold.

    A tier only hands over to the next, narrower one when its combination
    count exceeds ``threshold``. Narrower tiers offer subsets of the wider
    ones, so a tier that was searched in full and failed ends the search.
    """
    if not levels:
        return None

    for tier in tiers:
        attempt = try_tier(levels, tier, oracle, threshold, target)
        if attempt.exceeded:
            logger.debug(
                "Tier %s skipped: %d combinations over threshold %d across %d level(s).",
                tier,
                attempt.combinations,
                threshold,
                len(levels),
            )
            continue
        if attempt.path is None:
            return None
        logger.debug(
            "Tier %s found %r with penalty %s.",
            tier,
            render_selector(attempt.path),
            path_penalty(attempt.path),
        )
        return SearchHit(path=attempt.path, tier=tier)
    return None
