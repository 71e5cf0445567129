from __future__ import annotations

from typing import Any

from playwright.sync_api import ElementHandle, JSHandle

from .tree import QueryResult

IS_ELEMENT_JS = "(el) => Boolean(el) && el.nodeType === Node.ELEMENT_NODE"
TAG_NAME_JS = "(el) => (el.tagName || '').toLowerCase()"
ATTRIBUTES_JS = "(el) => Array.from(el.attributes || []).map((attr) => [attr.name, attr.value])"
PARENT_JS = "(el) => el.parentElement"
DOCUMENT_ROOT_JS = "(el) => el.ownerDocument.documentElement"
SAME_NODE_JS = "(el, other) => el === other"
ELEMENT_INDEX_JS = """
(el) => {
  const parent = el.parentElement;
  if (!parent) {
    return null;
  }
  const siblings = Array.from(parent.children);
  return [siblings.indexOf(el) + 1, siblings.length];
}
"""
QUERY_COUNT_JS = """
(scope, selector) => {
  const self = scope.matches(selector) ? 1 : 0;
  return self + scope.querySelectorAll(selector).length;
}
"""
QUERY_FIRST_JS = """
(scope, selector) => (scope.matches(selector) ? scope : scope.querySelector(selector))
"""

_MISSING_BROWSER_ERROR_HINTS = (
    "executable doesn't exist",
    "executable does not exist",
    "download new browsers",
    "playwright install",
    "could not find browser",
    "failed to launch chromium because executable",
)


def is_missing_browser_error(exc: Exception) -> bool:
    message = str(exc).lower()
    return any(hint in message for hint in _MISSING_BROWSER_ERROR_HINTS)


class PlaywrightTreeAdapter:
    """Adapter over live ``ElementHandle`` objects of a Playwright page.

    Every capability is a single round trip into the page, so the finder
    sees the document exactly as the browser renders it.
    """

    def is_element(self, node: JSHandle | Any) -> bool:
        as_element = getattr(node, "as_element", None)
        if as_element is None:
            return False
        element = as_element()
        if element is None:
            return False
        return bool(element.evaluate(IS_ELEMENT_JS))

    def tag_name(self, node: ElementHandle) -> str:
        return str(node.evaluate(TAG_NAME_JS))

    def attributes(self, node: ElementHandle) -> list[tuple[str, str]]:
        pairs = node.evaluate(ATTRIBUTES_JS) or []
        return [(str(name), str(value)) for name, value in pairs]

    def parent(self, node: ElementHandle) -> ElementHandle | None:
        return _as_element(node.evaluate_handle(PARENT_JS))

    def element_index(self, node: ElementHandle) -> tuple[int, int] | None:
        payload = node.evaluate(ELEMENT_INDEX_JS)
        if not payload:
            return None
        index, count = payload
        return int(index), int(count)

    def document_root(self, node: ElementHandle) -> ElementHandle:
        root = _as_element(node.evaluate_handle(DOCUMENT_ROOT_JS))
        if root is None:
            raise ValueError("Element is not attached to a document.")
        return root

    def same_node(self, left: ElementHandle, right: ElementHandle) -> bool:
        return bool(left.evaluate(SAME_NODE_JS, right))

    def query(self, scope: ElementHandle, selector: str) -> QueryResult:
        count = int(scope.evaluate(QUERY_COUNT_JS, selector))
        if count == 0:
            return QueryResult(count=0)
        first = _as_element(scope.evaluate_handle(QUERY_FIRST_JS, selector))
        return QueryResult(count=count, first=first)


def _as_element(handle: JSHandle | None) -> ElementHandle | None:
    if handle is None:
        return None
    return handle.as_element()
