"""
Read-only markup snapshot

Extractors never touch a live parser tree. HTML is parsed once with
BeautifulSoup (lxml backend) and copied into a small immutable element tree
exposing only what extraction needs: tag name, attributes, children, text
content and the parent link.
"""

import logging
from types import MappingProxyType
from typing import Callable, Iterator, List, Mapping, Optional, Protocol, Sequence, Union
from urllib.parse import urljoin

from bs4 import BeautifulSoup
from bs4.element import (
    Comment,
    Declaration,
    Doctype,
    NavigableString,
    ProcessingInstruction,
    Tag,
)

from sdvalidator.exceptions import MarkupError

logger = logging.getLogger(__name__)

# Strings that never contribute to textContent
_SKIPPED_STRINGS = (Comment, Declaration, Doctype, ProcessingInstruction)


class MarkupNode(Protocol):
    """The narrow tree interface extractors depend on."""

    @property
    def tag_name(self) -> str: ...

    @property
    def attributes(self) -> Mapping[str, str]: ...

    @property
    def children(self) -> Sequence["MarkupNode"]: ...

    @property
    def text_content(self) -> str: ...

    @property
    def parent(self) -> Optional["MarkupNode"]: ...


class ElementNode:
    """Immutable in-memory element.

    Args:
        tag_name: Element name, stored lower case
        attributes: Attribute name to raw string value
        contents: Ordered text and element children
    """

    def __init__(
        self,
        tag_name: str,
        attributes: Optional[Mapping[str, str]] = None,
        contents: Optional[Sequence[Union[str, "ElementNode"]]] = None,
    ):
        self._tag_name = tag_name.lower()
        self._attributes = MappingProxyType(dict(attributes or {}))
        self._contents = tuple(contents or ())
        self._parent: Optional[ElementNode] = None

        for child in self._contents:
            if isinstance(child, ElementNode):
                child._parent = self

    @property
    def tag_name(self) -> str:
        return self._tag_name

    @property
    def attributes(self) -> Mapping[str, str]:
        return self._attributes

    @property
    def contents(self) -> Sequence[Union[str, "ElementNode"]]:
        return self._contents

    @property
    def children(self) -> Sequence["ElementNode"]:
        return tuple(c for c in self._contents if isinstance(c, ElementNode))

    @property
    def parent(self) -> Optional["ElementNode"]:
        return self._parent

    @property
    def text_content(self) -> str:
        parts: List[str] = []
        stack: List[Union[str, ElementNode]] = [self]
        while stack:
            node = stack.pop()
            if isinstance(node, str):
                parts.append(node)
            else:
                stack.extend(reversed(node._contents))
        return "".join(parts)

    def has_attribute(self, name: str) -> bool:
        return name in self._attributes

    def get_attribute(self, name: str, default: Optional[str] = None) -> Optional[str]:
        return self._attributes.get(name, default)

    def iter_descendants(self) -> Iterator["ElementNode"]:
        """Yield descendant elements in document order."""
        stack = list(reversed(self.children))
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    def iter_ancestors(self) -> Iterator["ElementNode"]:
        node = self._parent
        while node is not None:
            yield node
            node = node._parent

    def outer_html(self) -> str:
        """Approximate serialization used for diagnostics only."""
        attrs = "".join(f' {k}="{v}"' for k, v in self._attributes.items())
        return f"<{self._tag_name}{attrs}>{self.text_content}</{self._tag_name}>"

    def __repr__(self) -> str:
        return f"ElementNode({self._tag_name!r}, {dict(self._attributes)!r})"

    @classmethod
    def from_soup(cls, tag: Tag) -> "ElementNode":
        """Snapshot a BeautifulSoup tag and its subtree.

        The walk keeps its own stack, so nesting depth is bounded by memory
        rather than by the interpreter recursion limit.
        """
        # (tag, remaining children, collected contents)
        stack = [(tag, iter(tag.contents), [])]
        while True:
            current, pending, contents = stack[-1]
            child = next(pending, None)
            if child is None:
                stack.pop()
                node = cls(current.name, _raw_attributes(current), contents)
                if not stack:
                    return node
                stack[-1][2].append(node)
            elif isinstance(child, Tag):
                stack.append((child, iter(child.contents), []))
            elif isinstance(child, NavigableString) and not isinstance(child, _SKIPPED_STRINGS):
                contents.append(str(child))


def _raw_attributes(tag: Tag) -> dict:
    return {
        name: " ".join(value) if isinstance(value, list) else str(value)
        for name, value in tag.attrs.items()
    }


class MarkupDocument:
    """A parsed document: root element plus URL resolution.

    Args:
        root: Root element (normally <html>)
        base_url: URL the document was served from, if known
    """

    def __init__(self, root: ElementNode, base_url: Optional[str] = None):
        self.root = root
        self.base_url = self._effective_base(root, base_url)

    @staticmethod
    def _effective_base(root: ElementNode, base_url: Optional[str]) -> Optional[str]:
        for node in _iter_with_root(root):
            if node.tag_name == "base" and node.get_attribute("href"):
                href = node.get_attribute("href").strip()
                return urljoin(base_url, href) if base_url else href
        return base_url

    @property
    def head(self) -> Optional[ElementNode]:
        return self._first_child("head")

    @property
    def body(self) -> Optional[ElementNode]:
        return self._first_child("body")

    def _first_child(self, tag_name: str) -> Optional[ElementNode]:
        for child in self.root.children:
            if child.tag_name == tag_name:
                return child
        return None

    def iter_elements(self) -> Iterator[ElementNode]:
        """Yield every element, root included, in document order."""
        return _iter_with_root(self.root)

    def find_all(self, predicate: Callable[[ElementNode], bool]) -> List[ElementNode]:
        return [node for node in self.iter_elements() if predicate(node)]

    def resolve_url(self, value: Optional[str]) -> str:
        """Resolve a URL attribute the way a browser's `href`/`src` would."""
        if value is None:
            return ""
        value = value.strip()
        if not self.base_url:
            return value
        return urljoin(self.base_url, value)


def _iter_with_root(root: ElementNode) -> Iterator[ElementNode]:
    yield root
    yield from root.iter_descendants()


def parse_html(html: str, base_url: Optional[str] = None) -> MarkupDocument:
    """Parse HTML into a read-only document snapshot.

    Args:
        html: HTML source text
        base_url: URL used to resolve relative links

    Returns:
        MarkupDocument for the extractors

    Raises:
        MarkupError: If the input is empty or not text
    """
    if not html or not isinstance(html, str):
        raise MarkupError("Invalid HTML input")

    try:
        # Raw attribute strings; `class`/`rel` stay unsplit like the DOM
        soup = BeautifulSoup(html, "lxml", multi_valued_attributes=None)
    except Exception as e:
        logger.error(f"BeautifulSoup parse failed: {e}")
        raise MarkupError("HTML parsing failed") from e

    root_tag = soup.find("html")
    if root_tag is None:
        raise MarkupError("HTML parsing produced no document element")

    return MarkupDocument(ElementNode.from_soup(root_tag), base_url=base_url)
