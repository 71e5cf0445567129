from __future__ import annotations

from dataclasses import asdict, dataclass, field
import json
from pathlib import Path
import re
import tempfile
from typing import Any, Mapping

from .selector_rules import (
    AttributePredicate,
    NamePredicate,
    all_of,
    pattern_blocklist,
    stable_class_predicate,
    stable_id_predicate,
)

CONFIG_DIR = Path.home() / ".selectorfinder"
CONFIG_PATH = CONFIG_DIR / "config.json"

DEFAULT_SEED_MIN_LENGTH = 1
DEFAULT_OPTIMIZED_MIN_LENGTH = 2
DEFAULT_COMBINATION_THRESHOLD = 1000
DEFAULT_MAX_MINIMIZATION_TRIES = 10000


def accept_name(_name: str) -> bool:
    return True


def reject_attribute(_name: str, _value: str) -> bool:
    return False


@dataclass(slots=True)
class FinderConfig:
    root: Any | None = None
    id_predicate: NamePredicate = accept_name
    class_predicate: NamePredicate = accept_name
    tag_predicate: NamePredicate = accept_name
    attr_predicate: AttributePredicate = reject_attribute
    seed_min_length: int = DEFAULT_SEED_MIN_LENGTH
    optimized_min_length: int = DEFAULT_OPTIMIZED_MIN_LENGTH
    combination_threshold: int = DEFAULT_COMBINATION_THRESHOLD
    max_minimization_tries: int = DEFAULT_MAX_MINIMIZATION_TRIES

    def __post_init__(self) -> None:
        if self.seed_min_length < 1:
            raise ValueError("seed_min_length must be at least 1.")
        if self.optimized_min_length < 1:
            raise ValueError("optimized_min_length must be at least 1.")
        if self.combination_threshold < 1:
            raise ValueError("combination_threshold must be at least 1.")
        if self.max_minimization_tries < 0:
            raise ValueError("max_minimization_tries must not be negative.")


def picker_config(*, target_has_id: bool, data_attribute: str | None = None, root: Any | None = None) -> FinderConfig:
    """Preset used when a user clicks an element in the page picker."""

    def _attr(name: str, _value: str) -> bool:
        return data_attribute is not None and name == data_attribute

    return FinderConfig(
        root=root,
        attr_predicate=_attr,
        seed_min_length=6,
        optimized_min_length=2 if target_has_id else 10,
        combination_threshold=2000,
    )


@dataclass(slots=True)
class FinderSettings:
    attributes: list[str] = field(default_factory=list)
    ignore_ids: list[str] = field(default_factory=list)
    ignore_classes: list[str] = field(default_factory=list)
    ignore_tags: list[str] = field(default_factory=list)
    stable_only: bool = False
    seed_min_length: int = DEFAULT_SEED_MIN_LENGTH
    optimized_min_length: int = DEFAULT_OPTIMIZED_MIN_LENGTH
    combination_threshold: int = DEFAULT_COMBINATION_THRESHOLD
    max_minimization_tries: int = DEFAULT_MAX_MINIMIZATION_TRIES

    def to_config(self, root: Any | None = None) -> FinderConfig:
        id_predicate = pattern_blocklist(self.ignore_ids)
        class_predicate = pattern_blocklist(self.ignore_classes)
        if self.stable_only:
            id_predicate = all_of(id_predicate, stable_id_predicate)
            class_predicate = all_of(class_predicate, stable_class_predicate)

        ignored_tags = frozenset(tag.strip().lower() for tag in self.ignore_tags if tag.strip())
        accepted_attributes = frozenset(self.attributes)

        def _tag(name: str) -> bool:
            return name not in ignored_tags

        def _attr(name: str, _value: str) -> bool:
            return name in accepted_attributes

        return FinderConfig(
            root=root,
            id_predicate=id_predicate,
            class_predicate=class_predicate,
            tag_predicate=_tag,
            attr_predicate=_attr,
            seed_min_length=self.seed_min_length,
            optimized_min_length=self.optimized_min_length,
            combination_threshold=self.combination_threshold,
            max_minimization_tries=self.max_minimization_tries,
        )

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any]) -> FinderSettings:
        defaults = cls()
        return cls(
            attributes=_string_list(payload.get("attributes")),
            ignore_ids=_string_list(payload.get("ignore_ids")),
            ignore_classes=_string_list(payload.get("ignore_classes")),
            ignore_tags=_string_list(payload.get("ignore_tags")),
            stable_only=bool(payload.get("stable_only", False)),
            seed_min_length=_positive_int(payload.get("seed_min_length"), defaults.seed_min_length),
            optimized_min_length=_positive_int(payload.get("optimized_min_length"), defaults.optimized_min_length),
            combination_threshold=_positive_int(payload.get("combination_threshold"), defaults.combination_threshold),
            max_minimization_tries=_non_negative_int(
                payload.get("max_minimization_tries"), defaults.max_minimization_tries
            ),
        )


def load_finder_settings(config_path: Path | None = None) -> FinderSettings | None:
    path = config_path or CONFIG_PATH
    if not path.exists() or not path.is_file():
        return None

    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError, TypeError):
        return None

    if not isinstance(payload, dict):
        return None

    settings = FinderSettings.from_mapping(payload)
    try:
        for pattern in (*settings.ignore_ids, *settings.ignore_classes):
            re.compile(pattern)
    except re.error:
        return None
    return settings


def save_finder_settings(settings: FinderSettings, config_path: Path | None = None) -> tuple[bool, str | None]:
    path = config_path or CONFIG_PATH

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        return False, f"Could not create config folder: {exc}"

    payload = json.dumps(asdict(settings), ensure_ascii=True, indent=2, sort_keys=True)
    temp_path: Path | None = None
    try:
        with tempfile.NamedTemporaryFile(
            mode="w",
            encoding="utf-8",
            dir=str(path.parent),
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
        ) as handle:
            handle.write(payload)
            handle.flush()
            temp_path = Path(handle.name)

        temp_path.replace(path)
    except OSError as exc:
        if temp_path and temp_path.exists():
            temp_path.unlink(missing_ok=True)
        return False, f"Could not write finder settings: {exc}"

    return True, None


def _string_list(raw: Any) -> list[str]:
    if not isinstance(raw, (list, tuple)):
        return []
    return [str(item) for item in raw if str(item).strip()]


def _positive_int(raw: Any, default: int) -> int:
    try:
        value = int(raw)
    except (TypeError, ValueError):
        return default
    return value if value >= 1 else default


def _non_negative_int(raw: Any, default: int) -> int:
    try:
        value = int(raw)
    except (TypeError, ValueError):
        return default
    return value if value >= 0 else default
