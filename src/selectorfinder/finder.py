from __future__ import annotations

import logging
from typing import Any

from .config import FinderConfig
from .errors import InvalidTargetError, SelectorNotFoundError
from .extractor import HTML_TAG
from .minimizer import minimize_path
from .models import ElementProfile, LevelRecord, SelectorResult
from .path_builder import collect_levels
from .renderer import render_selector
from .scoring import path_penalty, penalty_for
from .search import UniquenessOracle, search_unique_path
from .tree import LxmlTreeAdapter, TreeAdapter

logger = logging.getLogger(__name__)


def compute_unique_selector(
    target: Any,
    config: FinderConfig | None = None,
    adapter: TreeAdapter | None = None,
) -> str:
    """Return the lowest-penalty CSS selector that matches only ``target`` inside the root scope."""
    return find_unique_selector(target, config=config, adapter=adapter).selector


def find_unique_selector(
    target: Any,
    config: FinderConfig | None = None,
    adapter: TreeAdapter | None = None,
) -> SelectorResult:
    config = config or FinderConfig()
    adapter = adapter or LxmlTreeAdapter()
    scope = resolve_scope(adapter, target, config)

    if adapter.tag_name(target) == HTML_TAG:
        return SelectorResult(selector=HTML_TAG, penalty=penalty_for("tag_name"), tier=None, levels=1)

    oracle = UniquenessOracle(adapter, scope)
    levels = collect_levels(adapter, target, scope, config, oracle)
    return _select(levels, oracle, config, target)


def element_profile(
    target: Any,
    config: FinderConfig | None = None,
    adapter: TreeAdapter | None = None,
) -> ElementProfile:
    """Capture the ancestor levels of ``target`` so a selector can be built later."""
    config = config or FinderConfig()
    adapter = adapter or LxmlTreeAdapter()
    scope = resolve_scope(adapter, target, config)

    oracle = UniquenessOracle(adapter, scope)
    levels = collect_levels(adapter, target, scope, config, oracle)
    return ElementProfile(levels=tuple(levels), tag=adapter.tag_name(target))


def selector_from_profile(
    profile: ElementProfile,
    scope: Any,
    config: FinderConfig | None = None,
    adapter: TreeAdapter | None = None,
) -> str:
    """Build a selector from a stored profile against a live ``scope``.

    The element the profile describes is not available here, so the node
    matched by the winning full path stands in for it while minimizing.
    """
    config = config or FinderConfig()
    adapter = adapter or LxmlTreeAdapter()
    if not adapter.is_element(scope):
        raise InvalidTargetError("Profile scope is not an element.")

    levels = list(profile.levels)
    oracle = UniquenessOracle(adapter, scope)
    hit = search_unique_path(levels, oracle, config.combination_threshold)
    if hit is None:
        logger.info("Selector was not found for a %d level profile.", len(levels))
        raise SelectorNotFoundError(len(levels))

    anchor = oracle.resolve(hit.path).first
    path = minimize_path(
        hit.path,
        oracle,
        anchor,
        min_length=config.optimized_min_length,
        max_tries=config.max_minimization_tries,
    )
    return render_selector(path)


def resolve_scope(adapter: TreeAdapter, target: Any, config: FinderConfig) -> Any:
    if not adapter.is_element(target):
        raise InvalidTargetError("Can't generate CSS selector for non-element node.")

    scope = config.root if config.root is not None else adapter.document_root(target)
    if not adapter.is_element(scope):
        raise InvalidTargetError("Root scope is not an element.")

    node = target
    while node is not None:
        if adapter.same_node(node, scope):
            return scope
        node = adapter.parent(node)
    raise InvalidTargetError("Target is not inside the root scope.")


def _select(
    levels: list[LevelRecord],
    oracle: UniquenessOracle,
    config: FinderConfig,
    target: Any,
) -> SelectorResult:
    hit = search_unique_path(levels, oracle, config.combination_threshold, target)
    if hit is None:
        logger.info("Selector was not found after %d level(s).", len(levels))
        raise SelectorNotFoundError(len(levels))

    path = minimize_path(
        hit.path,
        oracle,
        target,
        min_length=config.optimized_min_length,
        max_tries=config.max_minimization_tries,
    )
    return SelectorResult(
        selector=render_selector(path),
        penalty=path_penalty(path),
        tier=hit.tier,
        levels=len(levels),
        minimized=len(path) < len(hit.path),
        queries=oracle.queries,
    )
