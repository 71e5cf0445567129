from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from math import log2
from typing import Callable, Iterable

NamePredicate = Callable[[str], bool]
AttributePredicate = Callable[[str, str], bool]

logger = logging.getLogger(__name__)

ROOT_ID_BLOCKLIST = frozenset({"__next", "root", "app", "__nuxt", "gatsby-focus-wrapper"})

TEST_ATTRIBUTES = frozenset({"data-testid", "data-test", "data-qa", "data-cy", "data-e2e"})

_DYNAMIC_VALUE_PATTERNS = (
    re.compile(r"^[0-9]{4,}$"),
    re.compile(r"^[a-f0-9]{8,}$", re.IGNORECASE),
    re.compile(r"^[a-f0-9]{8}-[a-f0-9]{4}-[a-f0-9]{4}-[a-f0-9]{4}-[a-f0-9]{12}$", re.IGNORECASE),
    re.compile(r".*\d{4,}.*"),
)

_FRAMEWORK_TOKEN_PATTERNS = (
    re.compile(r"(^|[-_:])(mui|css|ng|react|vue|ember|svelte|jdt|j_idt|sc)([-_:]|$)", re.IGNORECASE),
    re.compile(r"^ant-[a-z0-9_-]+$", re.IGNORECASE),
)

_DYNAMIC_CLASS_PATTERNS = (
    re.compile(r"^css-[a-z0-9_-]{4,}$", re.IGNORECASE),
    re.compile(r"^jss\d+$", re.IGNORECASE),
    re.compile(r"^sc-[a-z0-9]+$", re.IGNORECASE),
    re.compile(r"^[a-f0-9]{8,}$", re.IGNORECASE),
    re.compile(r"^[a-z]+__[a-z]+___[a-z0-9]{5,}$", re.IGNORECASE),
)

_GENERATED_ID_PATTERN = re.compile(r"(:\d+:|:j_idt\d+|:jdt_\d+)", re.IGNORECASE)


@dataclass(frozen=True, slots=True)
class ValueStability:
    reasons: tuple[str, ...]

    @property
    def dynamic(self) -> bool:
        return bool(self.reasons)


def shannon_entropy(value: str) -> float:
    text = value.strip()
    if not text:
        return 0.0
    total = len(text)
    frequencies: dict[str, int] = {}
    for char in text:
        frequencies[char] = frequencies.get(char, 0) + 1

    entropy = 0.0
    for count in frequencies.values():
        probability = count / total
        entropy -= probability * log2(probability)
    return entropy


def digit_ratio(value: str) -> float:
    text = value.strip()
    if not text:
        return 0.0
    digits = sum(1 for char in text if char.isdigit())
    return digits / len(text)


def has_framework_fingerprint(value: str) -> bool:
    text = value.strip()
    return bool(text) and any(pattern.search(text) for pattern in _FRAMEWORK_TOKEN_PATTERNS)


def has_hash_like_pattern(value: str) -> bool:
    text = value.strip()
    if not text:
        return False
    if re.fullmatch(r"[a-f0-9]{8,}", text, flags=re.IGNORECASE):
        return True
    return bool(re.search(r"[a-f0-9]{10,}", text, flags=re.IGNORECASE))


def analyze_value_stability(value: str) -> ValueStability:
    text = value.strip()
    if not text:
        return ValueStability(reasons=("empty",))

    entropy_value = shannon_entropy(text)
    digit_value = digit_ratio(text)
    reasons: list[str] = []

    if digit_value > 0.4:
        reasons.append("digit-ratio>40%")
    if entropy_value >= 4.2 and len(text) >= 8:
        reasons.append("high-entropy")
    if has_framework_fingerprint(text):
        reasons.append("framework-token")
    if has_hash_like_pattern(text):
        reasons.append("hash-like")
    if re.search(r"[_:-]\d{3,}$", text):
        reasons.append("numeric-drift-suffix")
    if any(pattern.match(text) for pattern in _DYNAMIC_VALUE_PATTERNS):
        reasons.append("dynamic-pattern")

    return ValueStability(reasons=tuple(reasons))


def is_blocked_root_id(id_value: str) -> bool:
    return id_value.strip().lower() in ROOT_ID_BLOCKLIST


def is_dynamic_id_value(id_value: str) -> bool:
    value = id_value.strip()
    if not value:
        return True
    # JSF / PrimeFaces row ids
    if ":" in value and _GENERATED_ID_PATTERN.search(value):
        return True
    return _looks_generated(value)


def _looks_generated(value: str) -> bool:
    report = analyze_value_stability(value)
    if report.dynamic:
        logger.debug("Skipping generated-looking value %r: %s", value, ", ".join(report.reasons))
    return report.dynamic


def is_dynamic_class_token(token: str) -> bool:
    value = token.strip()
    if not value:
        return True
    if any(pattern.match(value) for pattern in _DYNAMIC_CLASS_PATTERNS):
        return True
    if len(value) > 18 and re.search(r"\d", value):
        return True
    return value.count("-") >= 3 and bool(re.search(r"\d", value))


def stable_id_predicate(id_value: str) -> bool:
    return not is_blocked_root_id(id_value) and not is_dynamic_id_value(id_value)


def stable_class_predicate(class_name: str) -> bool:
    return not is_dynamic_class_token(class_name)


def data_attribute_predicate(names: Iterable[str] = TEST_ATTRIBUTES) -> AttributePredicate:
    accepted = frozenset(name.lower() for name in names)

    def _predicate(name: str, value: str) -> bool:
        if name.lower() not in accepted:
            return False
        return not _looks_generated(value)

    return _predicate


def pattern_blocklist(patterns: Iterable[str]) -> NamePredicate:
    compiled = tuple(re.compile(pattern) for pattern in patterns)

    def _predicate(name: str) -> bool:
        return not any(pattern.search(name) for pattern in compiled)

    return _predicate


def all_of(*predicates: NamePredicate) -> NamePredicate:
    def _predicate(name: str) -> bool:
        return all(predicate(name) for predicate in predicates)

    return _predicate
