import json
from pathlib import Path

import pytest

from selectorfinder.config import (
    FinderConfig,
    FinderSettings,
    load_finder_settings,
    picker_config,
    save_finder_settings,
)


def test_finder_config_defaults() -> None:
    config = FinderConfig()

    assert config.root is None
    assert config.seed_min_length == 1
    assert config.optimized_min_length == 2
    assert config.combination_threshold == 1000
    assert config.max_minimization_tries == 10000
    assert config.id_predicate("anything")
    assert config.class_predicate("anything")
    assert config.tag_predicate("div")
    assert not config.attr_predicate("data-testid", "x")


@pytest.mark.parametrize(
    "overrides",
    [
        {"seed_min_length": 0},
        {"optimized_min_length": 0},
        {"combination_threshold": 0},
        {"max_minimization_tries": -1},
    ],
)
def test_finder_config_rejects_invalid_limits(overrides: dict[str, int]) -> None:
    with pytest.raises(ValueError):
        FinderConfig(**overrides)


def test_picker_preset_depends_on_target_id() -> None:
    with_id = picker_config(target_has_id=True, data_attribute="data-qa")
    without_id = picker_config(target_has_id=False)

    assert with_id.seed_min_length == 6
    assert with_id.optimized_min_length == 2
    assert with_id.combination_threshold == 2000
    assert with_id.attr_predicate("data-qa", "save")
    assert not with_id.attr_predicate("data-testid", "save")

    assert without_id.optimized_min_length == 10
    assert not without_id.attr_predicate("data-qa", "save")


def test_settings_roundtrip(tmp_path: Path) -> None:
    config_path = tmp_path / "nested" / "config.json"
    original = FinderSettings(
        attributes=["data-testid"],
        ignore_ids=["^ember"],
        ignore_classes=["^css-"],
        ignore_tags=["svg"],
        stable_only=True,
        combination_threshold=500,
    )

    ok, error = save_finder_settings(original, config_path)

    assert ok
    assert error is None
    assert load_finder_settings(config_path) == original
    assert list(config_path.parent.glob("*.tmp")) == []


def test_settings_load_fallbacks(tmp_path: Path) -> None:
    config_path = tmp_path / "config.json"
    assert load_finder_settings(config_path) is None

    config_path.write_text("{invalid", encoding="utf-8")
    assert load_finder_settings(config_path) is None

    config_path.write_text("[1, 2]", encoding="utf-8")
    assert load_finder_settings(config_path) is None


def test_settings_from_mapping_ignores_bad_values() -> None:
    settings = FinderSettings.from_mapping(
        {
            "attributes": "data-testid",
            "ignore_tags": ["svg", "  "],
            "seed_min_length": "3",
            "combination_threshold": -4,
            "max_minimization_tries": "many",
        }
    )

    assert settings.attributes == []
    assert settings.ignore_tags == ["svg"]
    assert settings.seed_min_length == 3
    assert settings.combination_threshold == 1000
    assert settings.max_minimization_tries == 10000


def test_settings_build_predicates(tmp_path: Path) -> None:
    config_path = tmp_path / "config.json"
    config_path.write_text(
        json.dumps(
            {
                "attributes": ["data-testid"],
                "ignore_ids": ["^tmp-"],
                "ignore_classes": ["^is-"],
                "ignore_tags": ["SVG"],
                "stable_only": True,
            }
        ),
        encoding="utf-8",
    )
    settings = load_finder_settings(config_path)
    assert settings is not None

    config = settings.to_config(root="scope")

    assert config.root == "scope"
    assert config.attr_predicate("data-testid", "save")
    assert not config.attr_predicate("title", "save")
    assert not config.id_predicate("tmp-panel")
    assert not config.id_predicate("ember1234")
    assert config.id_predicate("login-button")
    assert not config.class_predicate("is-active")
    assert not config.class_predicate("css-1x2y3z")
    assert config.class_predicate("btn-primary")
    assert not config.tag_predicate("svg")
    assert config.tag_predicate("div")


def test_settings_with_invalid_pattern_are_unreadable(tmp_path: Path) -> None:
    config_path = tmp_path / "config.json"
    config_path.write_text(json.dumps({"ignore_classes": ["^css-", "([unclosed"]}), encoding="utf-8")

    assert load_finder_settings(config_path) is None


def test_settings_allow_zero_minimization_tries() -> None:
    settings = FinderSettings.from_mapping({"max_minimization_tries": 0})

    assert settings.max_minimization_tries == 0
    assert settings.to_config().max_minimization_tries == 0
