from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal, Mapping

IdKind = Literal["id", "attribute", "class_name", "tag_name", "any", "nth_child"]
SpecificityTier = Literal["all", "two", "one"]

PROFILE_FORMAT_VERSION = 1
NTH_CHILD_PENALTY = 1.0

_NTH_CHILD_BASE_KINDS: frozenset[str] = frozenset({"attribute", "class_name", "tag_name"})


@dataclass(frozen=True, slots=True)
class Identifier:
    token: str
    penalty: float
    kind: IdKind
    level: int = 0

    @property
    def nth_child_capable(self) -> bool:
        return self.kind in _NTH_CHILD_BASE_KINDS and self.token != "html"

    def with_nth_child(self, index: int) -> Identifier:
        return Identifier(
            token=f"{self.token}:nth-child({index})",
            penalty=self.penalty + NTH_CHILD_PENALTY,
            kind="nth_child",
            level=self.level,
        )


Path = tuple[Identifier, ...]


@dataclass(frozen=True, slots=True)
class LevelRecord:
    """Candidate identifiers for one ancestor depth.

    ``identifiers`` holds the base identifiers sorted by penalty, ending with
    the wildcard. Sibling-position variants are derived on demand from
    ``index`` so the specificity tiers can decide how many to offer.
    """

    level: int
    identifiers: tuple[Identifier, ...]
    index: int | None = None
    sibling_count: int = 0

    def __post_init__(self) -> None:
        if not self.identifiers:
            raise ValueError(f"Level {self.level} has no identifiers.")

    @property
    def id_anchored(self) -> bool:
        return any(item.kind == "id" for item in self.identifiers)

    @property
    def best(self) -> Identifier:
        return self.identifiers[0]

    def allows_nth_child(self, identifier: Identifier) -> bool:
        if self.index is None or self.id_anchored:
            return False
        return identifier.nth_child_capable

    def nth_child_of(self, identifier: Identifier) -> Identifier:
        if self.index is None:
            raise ValueError(f"Level {self.level} has no sibling position.")
        return identifier.with_nth_child(self.index)

    def candidates(self, tier: SpecificityTier) -> list[Identifier]:
        if tier == "all":
            base = list(self.identifiers)
            return base + [self.nth_child_of(item) for item in base if self.allows_nth_child(item)]

        best = self.best
        if tier == "two":
            if self.allows_nth_child(best):
                return [best, self.nth_child_of(best)]
            return [best]

        if tier == "one":
            if self.allows_nth_child(best):
                return [self.nth_child_of(best)]
            return [best]

        raise ValueError(f"Unknown specificity tier: {tier!r}")

    def to_dict(self) -> dict[str, Any]:
        return {
            "level": self.level,
            "index": self.index,
            "sibling_count": self.sibling_count,
            "identifiers": [
                {"token": item.token, "penalty": item.penalty, "kind": item.kind}
                for item in self.identifiers
            ],
        }

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> LevelRecord:
        level = int(payload["level"])
        raw_index = payload.get("index")
        identifiers = tuple(
            Identifier(
                token=str(item["token"]),
                penalty=float(item["penalty"]),
                kind=item["kind"],
                level=level,
            )
            for item in payload.get("identifiers", [])
        )
        return cls(
            level=level,
            identifiers=identifiers,
            index=int(raw_index) if raw_index is not None else None,
            sibling_count=int(payload.get("sibling_count", 0) or 0),
        )


@dataclass(frozen=True, slots=True)
class ElementProfile:
    levels: tuple[LevelRecord, ...]
    tag: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "version": PROFILE_FORMAT_VERSION,
            "tag": self.tag,
            "levels": [record.to_dict() for record in self.levels],
        }

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> ElementProfile:
        version = payload.get("version")
        if version != PROFILE_FORMAT_VERSION:
            raise ValueError(f"Unsupported element profile version: {version!r}")
        levels = tuple(LevelRecord.from_dict(item) for item in payload.get("levels", []))
        return cls(levels=levels, tag=str(payload.get("tag", "") or ""))


@dataclass(frozen=True, slots=True)
class SearchHit:
    path: Path
    tier: SpecificityTier


@dataclass(slots=True)
class SelectorResult:
    selector: str
    penalty: float
    tier: SpecificityTier | None
    levels: int
    minimized: bool = False
    queries: int = 0
