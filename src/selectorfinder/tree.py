from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol, Sequence

from lxml import etree
from lxml import html as lxml_html
from lxml.cssselect import CSSSelector

from .errors import InvalidTargetError


@dataclass(frozen=True, slots=True)
class QueryResult:
    count: int
    first: Any | None = None


class TreeAdapter(Protocol):
    """Read-only view of a host document.

    ``query`` is the live uniqueness oracle: it runs a selector against a
    scope node and reports how many nodes inside the scope matched, plus
    the first match in document order.
    """

    def is_element(self, node: Any) -> bool: ...

    def tag_name(self, node: Any) -> str: ...

    def attributes(self, node: Any) -> Sequence[tuple[str, str]]: ...

    def parent(self, node: Any) -> Any | None: ...

    def element_index(self, node: Any) -> tuple[int, int] | None: ...

    def document_root(self, node: Any) -> Any: ...

    def same_node(self, left: Any, right: Any) -> bool: ...

    def query(self, scope: Any, selector: str) -> QueryResult: ...


class LxmlTreeAdapter:
    """Adapter for trees parsed with ``lxml.html`` or ``lxml.etree``.

    HTML trees are matched case-insensitively, the way browsers match them.
    Other trees keep the tag case of the source. Namespaced elements
    are rejected.
    """

    def is_element(self, node: Any) -> bool:
        return isinstance(node, etree._Element) and isinstance(node.tag, str)

    def tag_name(self, node: Any) -> str:
        qname = etree.QName(node)
        if qname.namespace is not None:
            raise InvalidTargetError(f"Can't generate CSS selector for namespaced element: {qname.text}")
        if _is_html(node):
            return str(qname.localname).lower()
        return str(qname.localname)

    def attributes(self, node: Any) -> list[tuple[str, str]]:
        # Namespaced attribute names come back in "{uri}name" form.
        return [(str(name), str(value)) for name, value in node.items() if not str(name).startswith("{")]

    def parent(self, node: Any) -> Any | None:
        return node.getparent()

    def element_index(self, node: Any) -> tuple[int, int] | None:
        parent = node.getparent()
        if parent is None:
            return None
        siblings = [child for child in parent if isinstance(child.tag, str)]
        for position, child in enumerate(siblings, start=1):
            if child is node:
                return position, len(siblings)
        return None

    def document_root(self, node: Any) -> Any:
        return node.getroottree().getroot()

    def same_node(self, left: Any, right: Any) -> bool:
        return left is right

    def query(self, scope: Any, selector: str) -> QueryResult:
        root = self.document_root(scope)
        matcher = CSSSelector(selector, translator="html" if _is_html(root) else "xml")
        count = 0
        first = None
        for node in matcher(root):
            if not self._within(node, scope):
                continue
            if first is None:
                first = node
            count += 1
        return QueryResult(count=count, first=first)

    @staticmethod
    def _within(node: Any, scope: Any) -> bool:
        if node is scope:
            return True
        return any(ancestor is scope for ancestor in node.iterancestors())


def _is_html(node: Any) -> bool:
    return isinstance(node, lxml_html.HtmlElement)
