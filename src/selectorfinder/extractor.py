from __future__ import annotations

from typing import Any, Sequence

from .config import FinderConfig
from .css_escape import escape_css_identifier, escape_css_string
from .models import Identifier, LevelRecord
from .scoring import penalty_for, sort_identifiers
from .tree import TreeAdapter

HTML_TAG = "html"
WILDCARD = "*"


def normalize_classes(raw: str | None) -> list[str]:
    seen: set[str] = set()
    classes: list[str] = []
    for token in (raw or "").split():
        if token in seen:
            continue
        seen.add(token)
        classes.append(token)
    return classes


def id_identifier(attributes: Sequence[tuple[str, str]], config: FinderConfig, level: int) -> Identifier | None:
    element_id = _attribute_value(attributes, "id")
    if not element_id or not config.id_predicate(element_id):
        return None
    return Identifier(
        token="#" + escape_css_identifier(element_id),
        penalty=penalty_for("id"),
        kind="id",
        level=level,
    )


def attribute_identifiers(
    attributes: Sequence[tuple[str, str]], config: FinderConfig, level: int
) -> list[Identifier]:
    return [
        Identifier(
            token=f'[{escape_css_identifier(name)}="{escape_css_string(value)}"]',
            penalty=penalty_for("attribute"),
            kind="attribute",
            level=level,
        )
        for name, value in attributes
        if config.attr_predicate(name, value)
    ]


def class_identifiers(
    attributes: Sequence[tuple[str, str]], config: FinderConfig, level: int
) -> list[Identifier]:
    return [
        Identifier(
            token="." + escape_css_identifier(name),
            penalty=penalty_for("class_name"),
            kind="class_name",
            level=level,
        )
        for name in normalize_classes(_attribute_value(attributes, "class"))
        if config.class_predicate(name)
    ]


def tag_identifier(tag: str, config: FinderConfig, level: int) -> Identifier | None:
    if not config.tag_predicate(tag):
        return None
    return Identifier(
        token=escape_css_identifier(tag),
        penalty=penalty_for("tag_name"),
        kind="tag_name",
        level=level,
    )


def any_identifier(level: int) -> Identifier:
    return Identifier(token=WILDCARD, penalty=penalty_for("any"), kind="any", level=level)


def extract_level(adapter: TreeAdapter, node: Any, level: int, config: FinderConfig) -> LevelRecord:
    """Collect every candidate identifier for ``node`` at ancestor distance ``level``."""
    tag = adapter.tag_name(node)
    position = adapter.element_index(node)
    index, sibling_count = position if position is not None else (None, 0)

    if tag == HTML_TAG:
        html = Identifier(token=HTML_TAG, penalty=penalty_for("tag_name"), kind="tag_name", level=level)
        return LevelRecord(level=level, identifiers=(html,), index=index, sibling_count=sibling_count)

    attributes = adapter.attributes(node)
    identifiers: list[Identifier] = []

    element_id = id_identifier(attributes, config, level)
    if element_id is not None:
        identifiers.append(element_id)
    identifiers.extend(attribute_identifiers(attributes, config, level))
    identifiers.extend(class_identifiers(attributes, config, level))
    tag_name = tag_identifier(tag, config, level)
    if tag_name is not None:
        identifiers.append(tag_name)
    identifiers.append(any_identifier(level))

    return LevelRecord(
        level=level,
        identifiers=sort_identifiers(identifiers),
        index=index,
        sibling_count=sibling_count,
    )


def _attribute_value(attributes: Sequence[tuple[str, str]], name: str) -> str | None:
    for key, value in attributes:
        if key == name:
            return value
    return None
