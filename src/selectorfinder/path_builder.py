from __future__ import annotations

import logging
from typing import Any

from .config import FinderConfig
from .extractor import extract_level
from .models import LevelRecord
from .search import UniquenessOracle, search_unique_path
from .tree import TreeAdapter

logger = logging.getLogger(__name__)


def collect_levels(
    adapter: TreeAdapter,
    target: Any,
    scope: Any,
    config: FinderConfig,
    oracle: UniquenessOracle,
) -> list[LevelRecord]:
    """Walk from ``target`` up to ``scope``, stopping once the levels so far admit a unique path."""
    levels: list[LevelRecord] = []
    current = target
    level = 0
    while current is not None:
        record = extract_level(adapter, current, level, config)
        levels.append(record)
        logger.debug(
            "Level %d: %s",
            level,
            " ".join(identifier.token for identifier in record.identifiers),
        )

        if len(levels) >= config.seed_min_length:
            hit = search_unique_path(levels, oracle, config.combination_threshold, target)
            if hit is not None:
                break

        if adapter.same_node(current, scope):
            break
        current = adapter.parent(current)
        level += 1
    return levels
