from __future__ import annotations

from contextlib import contextmanager
import json
import logging
from pathlib import Path
import sys
from typing import Any, Iterator

import click
from lxml import html as lxml_html
from lxml.cssselect import CSSSelector, SelectorError

from . import __version__
from .config import CONFIG_PATH, FinderConfig, FinderSettings, load_finder_settings
from .errors import FinderError
from .finder import element_profile, find_unique_selector
from .tree import LxmlTreeAdapter, TreeAdapter

LOG_FORMAT = "%(asctime)s %(levelname)s %(message)s"


def _build_logger(verbose: bool, log_file: Path | None) -> logging.Logger:
    logger = logging.getLogger("selectorfinder")
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    logger.propagate = False
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    stream_handler = logging.StreamHandler(sys.stderr)
    stream_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(stream_handler)

    if log_file is not None:
        try:
            log_file.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(log_file, encoding="utf-8")
        except OSError as exc:
            logger.warning("Could not open log file %s: %s", log_file, exc)
        else:
            file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
            logger.addHandler(file_handler)
    return logger


def _is_url(source: str) -> bool:
    return source.startswith("http://") or source.startswith("https://")


def _load_settings(config_path: Path | None) -> FinderSettings:
    if config_path is None:
        return load_finder_settings(CONFIG_PATH) or FinderSettings()
    settings = load_finder_settings(config_path)
    if settings is None:
        raise click.ClickException(f"Could not read finder settings from {config_path}.")
    return settings


@contextmanager
def _open_file_source(source: Path, select: str, root_css: str | None) -> Iterator[tuple[TreeAdapter, list[Any], Any]]:
    try:
        document = lxml_html.document_fromstring(source.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, ValueError) as exc:
        raise click.ClickException(f"Could not parse {source}: {exc}") from exc

    root = None
    if root_css:
        roots = _select_all(document, root_css)
        if not roots:
            raise click.ClickException(f"Root selector matched nothing: {root_css}")
        root = roots[0]
    yield LxmlTreeAdapter(), _select_all(document, select), root


def _select_all(document: Any, selector: str) -> list[Any]:
    try:
        return CSSSelector(selector, translator="html")(document)
    except SelectorError as exc:
        raise click.ClickException(f"Invalid CSS selector {selector!r}: {exc}") from exc


@contextmanager
def _open_url_source(url: str, select: str, root_css: str | None) -> Iterator[tuple[TreeAdapter, list[Any], Any]]:
    from playwright.sync_api import Error as PlaywrightError
    from playwright.sync_api import sync_playwright

    from .playwright_tree import PlaywrightTreeAdapter, is_missing_browser_error

    with sync_playwright() as playwright:
        try:
            browser = playwright.chromium.launch(headless=True)
        except PlaywrightError as exc:
            if is_missing_browser_error(exc):
                raise click.ClickException(
                    "Chromium is not installed for Playwright. Run `playwright install chromium`."
                ) from exc
            raise click.ClickException(f"Failed to launch Chromium: {exc}") from exc

        try:
            page = browser.new_page()
            try:
                page.goto(url, wait_until="domcontentloaded")
                root = page.query_selector(root_css) if root_css else None
                targets = page.query_selector_all(select)
            except PlaywrightError as exc:
                raise click.ClickException(f"Could not load {url}: {exc}") from exc
            if root_css and root is None:
                raise click.ClickException(f"Root selector matched nothing: {root_css}")
            yield PlaywrightTreeAdapter(), targets, root
        finally:
            browser.close()


@click.command()
@click.version_option(version=__version__, prog_name="selectorfinder")
@click.argument("source")
@click.option("--select", "select_css", required=True, help="CSS selector of the element(s) to describe.")
@click.option("--root", "root_css", default=None, help="CSS selector of the scope element (first match).")
@click.option("--attr", "attributes", multiple=True, help="Attribute name allowed in selectors. Repeatable.")
@click.option("--stable-only", is_flag=True, help="Skip ids and classes that look generated.")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Finder settings JSON (default: ~/.selectorfinder/config.json).",
)
@click.option("--threshold", type=click.IntRange(min=1), default=None, help="Combination threshold per tier.")
@click.option("--seed-min-length", type=click.IntRange(min=1), default=None, help="Levels collected before early stop.")
@click.option(
    "--optimized-min-length", type=click.IntRange(min=1), default=None, help="Shortest path the minimizer shortens."
)
@click.option("--max-tries", type=click.IntRange(min=0), default=None, help="Minimizer attempt cap.")
@click.option("--profile", "as_profile", is_flag=True, help="Print element profiles as JSON instead of selectors.")
@click.option("--verbose", is_flag=True, help="Log search details.")
@click.option("--log-file", type=click.Path(dir_okay=False, path_type=Path), default=None, help="Also log to this file.")
def cli(
    source: str,
    select_css: str,
    root_css: str | None,
    attributes: tuple[str, ...],
    stable_only: bool,
    config_path: Path | None,
    threshold: int | None,
    seed_min_length: int | None,
    optimized_min_length: int | None,
    max_tries: int | None,
    as_profile: bool,
    verbose: bool,
    log_file: Path | None,
) -> None:
    """Print a unique CSS selector for every element in SOURCE matched by --select.

    SOURCE is an HTML file or an http(s) URL loaded in headless Chromium.
    """
    logger = _build_logger(verbose, log_file)

    settings = _load_settings(config_path)
    if attributes:
        settings.attributes = [*settings.attributes, *attributes]
    if stable_only:
        settings.stable_only = True
    if threshold is not None:
        settings.combination_threshold = threshold
    if seed_min_length is not None:
        settings.seed_min_length = seed_min_length
    if optimized_min_length is not None:
        settings.optimized_min_length = optimized_min_length
    if max_tries is not None:
        settings.max_minimization_tries = max_tries

    if _is_url(source):
        opened = _open_url_source(source, select_css, root_css)
    else:
        path = Path(source)
        if not path.is_file():
            raise click.ClickException(f"Source file not found: {source}")
        opened = _open_file_source(path, select_css, root_css)

    with opened as (adapter, targets, root):
        if not targets:
            raise click.ClickException(f"Selector matched nothing: {select_css}")
        logger.info("Describing %d element(s) from %s", len(targets), source)
        config = settings.to_config(root=root)
        for target in targets:
            click.echo(_describe(target, config, adapter, as_profile))


def _describe(target: Any, config: FinderConfig, adapter: TreeAdapter, as_profile: bool) -> str:
    try:
        if as_profile:
            profile = element_profile(target, config=config, adapter=adapter)
            return json.dumps(profile.to_dict(), ensure_ascii=False, sort_keys=True)
        return find_unique_selector(target, config=config, adapter=adapter).selector
    except FinderError as exc:
        raise click.ClickException(str(exc)) from exc


def main() -> None:
    cli(prog_name="selectorfinder")


if __name__ == "__main__":
    main()
