from __future__ import annotations

from dataclasses import dataclass, field
import logging
from typing import Any, Iterator

from .models import Path
from .renderer import render_selector
from .scoring import path_penalty
from .search import UniquenessOracle

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class MinimizeContext:
    """Per-call state shared by the recursive minimization passes."""

    target: Any
    max_tries: int
    min_length: int
    tries: int = 0
    visited: set[str] = field(default_factory=set)

    @property
    def exhausted(self) -> bool:
        return self.tries >= self.max_tries


def shortened_paths(path: Path, oracle: UniquenessOracle, context: MinimizeContext) -> Iterator[Path]:
    """Yield every accepted path reachable by dropping interior levels of ``path``."""
    if len(path) <= 2 or len(path) <= context.min_length:
        return

    for position in range(1, len(path) - 1):
        if context.exhausted:
            return
        context.tries += 1

        candidate = path[:position] + path[position + 1 :]
        key = render_selector(candidate)
        if key in context.visited:
            continue
        context.visited.add(key)

        if oracle.is_unique(candidate, context.target):
            yield candidate
            yield from shortened_paths(candidate, oracle, context)


def minimize_path(
    path: Path,
    oracle: UniquenessOracle,
    target: Any,
    *,
    min_length: int,
    max_tries: int,
) -> Path:
    context = MinimizeContext(target=target, max_tries=max_tries, min_length=min_length)
    best = path
    for candidate in shortened_paths(path, oracle, context):
        if path_penalty(candidate) < path_penalty(best) or best is path:
            best = candidate

    if context.exhausted:
        logger.debug("Minimizer stopped after %d tries.", context.tries)
    if best is not path:
        logger.debug("Minimized %r to %r.", render_selector(path), render_selector(best))
    return best
