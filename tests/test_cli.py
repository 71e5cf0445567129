import json
import logging
from pathlib import Path
from typing import Iterator

from click.testing import CliRunner
import pytest

from selectorfinder.__main__ import cli


PAGE = """
<html><body>
  <section class="panel"><button class="go" data-testid="first">A</button></section>
  <section class="panel"><button class="go" data-testid="second">B</button></section>
</body></html>
"""


@pytest.fixture(autouse=True)
def _reset_cli_logger() -> Iterator[None]:
    yield
    logger = logging.getLogger("selectorfinder")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


def _write_page(tmp_path: Path) -> Path:
    page = tmp_path / "page.html"
    page.write_text(PAGE, encoding="utf-8")
    return page


def _empty_config(tmp_path: Path) -> Path:
    config_path = tmp_path / "config.json"
    config_path.write_text("{}", encoding="utf-8")
    return config_path


def test_prints_one_selector_per_match(tmp_path: Path) -> None:
    page = _write_page(tmp_path)
    runner = CliRunner()

    result = runner.invoke(cli, [str(page), "--select", "button", "--config", str(_empty_config(tmp_path))])

    assert result.exit_code == 0, result.output
    assert result.stdout.splitlines() == [
        ".panel:nth-child(1) > .go",
        ".panel:nth-child(2) > .go",
    ]


def test_attribute_and_root_options(tmp_path: Path) -> None:
    page = _write_page(tmp_path)
    config_path = _empty_config(tmp_path)
    runner = CliRunner()

    with_attr = runner.invoke(
        cli, [str(page), "--select", "button", "--attr", "data-testid", "--config", str(config_path)]
    )
    scoped = runner.invoke(
        cli,
        [str(page), "--select", "section:nth-child(2) button", "--root", "section:nth-child(2)",
         "--config", str(config_path)],
    )

    assert with_attr.exit_code == 0, with_attr.output
    assert with_attr.stdout.splitlines() == ['[data-testid="first"]', '[data-testid="second"]']
    assert scoped.exit_code == 0, scoped.output
    assert scoped.stdout.splitlines() == [".go"]


def test_profile_output_is_json(tmp_path: Path) -> None:
    page = _write_page(tmp_path)
    runner = CliRunner()

    result = runner.invoke(
        cli, [str(page), "--select", "button", "--profile", "--config", str(_empty_config(tmp_path))]
    )

    assert result.exit_code == 0, result.output
    profiles = [json.loads(line) for line in result.stdout.splitlines()]
    assert len(profiles) == 2
    assert all(profile["tag"] == "button" for profile in profiles)
    assert all(profile["version"] == 1 for profile in profiles)


def test_settings_file_is_applied(tmp_path: Path) -> None:
    page = _write_page(tmp_path)
    config_path = tmp_path / "config.json"
    config_path.write_text(json.dumps({"attributes": ["data-testid"]}), encoding="utf-8")
    runner = CliRunner()

    result = runner.invoke(cli, [str(page), "--select", "button", "--config", str(config_path)])

    assert result.exit_code == 0, result.output
    assert result.stdout.splitlines()[0] == '[data-testid="first"]'


def test_errors_exit_non_zero(tmp_path: Path) -> None:
    page = _write_page(tmp_path)
    config_path = _empty_config(tmp_path)
    runner = CliRunner()

    no_match = runner.invoke(cli, [str(page), "--select", "table", "--config", str(config_path)])
    missing = runner.invoke(cli, [str(tmp_path / "missing.html"), "--select", "p", "--config", str(config_path)])
    bad_config = tmp_path / "bad.json"
    bad_config.write_text("{oops", encoding="utf-8")
    unreadable = runner.invoke(cli, [str(page), "--select", "button", "--config", str(bad_config)])
    bad_threshold = runner.invoke(cli, [str(page), "--select", "button", "--threshold", "0"])

    assert no_match.exit_code == 1
    assert "Selector matched nothing: table" in no_match.output
    assert missing.exit_code == 1
    assert "Source file not found" in missing.output
    assert unreadable.exit_code == 1
    assert "Could not read finder settings" in unreadable.output
    assert bad_threshold.exit_code == 2


def test_invalid_select_is_reported(tmp_path: Path) -> None:
    page = _write_page(tmp_path)
    runner = CliRunner()

    result = runner.invoke(cli, [str(page), "--select", "button[", "--config", str(_empty_config(tmp_path))])

    assert result.exit_code == 1
    assert "Invalid CSS selector" in result.output


def test_verbose_logging_goes_to_log_file(tmp_path: Path) -> None:
    page = _write_page(tmp_path)
    log_file = tmp_path / "logs" / "finder.log"
    runner = CliRunner()

    result = runner.invoke(
        cli,
        [str(page), "--select", "button", "--verbose", "--log-file", str(log_file),
         "--config", str(_empty_config(tmp_path))],
    )

    assert result.exit_code == 0, result.output
    content = log_file.read_text(encoding="utf-8")
    assert "Describing 2 element(s)" in content
    assert "DEBUG" in content


def test_settings_with_invalid_pattern_are_reported(tmp_path: Path) -> None:
    page = _write_page(tmp_path)
    config_path = tmp_path / "config.json"
    config_path.write_text(json.dumps({"ignore_ids": ["(oops"]}), encoding="utf-8")
    runner = CliRunner()

    result = runner.invoke(cli, [str(page), "--select", "button", "--config", str(config_path)])

    assert result.exit_code == 1
    assert "Could not read finder settings" in result.output
