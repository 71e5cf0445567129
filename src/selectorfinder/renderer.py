from __future__ import annotations

from typing import Sequence

from .models import Identifier


def render_selector(path: Sequence[Identifier]) -> str:
    """Render a target-to-root path as a selector string.

    Levels one apart join with the child combinator; a gap left by the
    minimizer joins with the descendant combinator.
    """
    if not path:
        raise ValueError("Cannot render an empty path.")

    previous = path[0]
    query = previous.token
    for identifier in path[1:]:
        if identifier.level == previous.level + 1:
            query = f"{identifier.token} > {query}"
        else:
            query = f"{identifier.token} {query}"
        previous = identifier
    return query
