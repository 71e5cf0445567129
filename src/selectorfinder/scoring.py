from __future__ import annotations

from typing import Iterable, Sequence

from .models import Identifier, IdKind, Path

BASE_PENALTIES: dict[IdKind, float] = {
    "id": 0.0,
    "attribute": 0.5,
    "class_name": 1.0,
    "tag_name": 2.0,
    "any": 3.0,
}


def penalty_for(kind: IdKind) -> float:
    return BASE_PENALTIES[kind]


def path_penalty(path: Sequence[Identifier]) -> float:
    return sum(identifier.penalty for identifier in path)


def sort_identifiers(identifiers: Iterable[Identifier]) -> tuple[Identifier, ...]:
    # sorted() is stable: equal penalties keep extraction order.
    return tuple(sorted(identifiers, key=lambda item: item.penalty))


def sort_paths(paths: Iterable[Path]) -> list[Path]:
    return sorted(paths, key=path_penalty)
