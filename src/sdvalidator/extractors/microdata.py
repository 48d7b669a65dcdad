"""Microdata extractor (itemscope/itemtype/itemprop attributes)."""

import logging
from typing import Any, Dict, List, Optional, Tuple

from sdvalidator.constants import DEFAULT_CONTEXT
from sdvalidator.extractors.base import BaseExtractor, add_property, has_ancestor_between
from sdvalidator.markup import ElementNode, MarkupDocument
from sdvalidator.models import SemanticItem, SourceFormat

logger = logging.getLogger(__name__)


def type_name_from_url(itemtype: str) -> str:
    """Last path segment of an itemtype URL, after any `#` fragment.

    Examples:
        https://schema.org/Product -> Product
        http://example.com/vocab#Widget -> Widget
    """
    if not itemtype:
        return ""
    last_segment = itemtype.rstrip().split("/")[-1]
    return last_segment.split("#")[-1]


def vocabulary_from_url(itemtype: str) -> Optional[str]:
    """Vocabulary part of an itemtype URL (everything before the type name)."""
    if not itemtype or "://" not in itemtype:
        return None
    if "#" in itemtype:
        vocabulary = itemtype.rsplit("#", 1)[0]
    else:
        vocabulary = itemtype.rsplit("/", 1)[0]
    # "https:/" is what is left of a bare host URL
    return vocabulary if "://" in vocabulary else None


class MicrodataExtractor(BaseExtractor):
    """Extract Microdata items from outermost itemscope elements."""

    source_format = SourceFormat.MICRODATA

    def detect(self, document: MarkupDocument) -> bool:
        return any(
            node.has_attribute("itemscope") or node.has_attribute("itemtype")
            for node in document.iter_elements()
        )

    def find_islands(self, document: MarkupDocument) -> List[ElementNode]:
        return [
            node
            for node in document.iter_elements()
            if node.has_attribute("itemscope")
            and not has_ancestor_between(node, None, "itemscope")
        ]

    def extract_island(
        self, document: MarkupDocument, node: ElementNode, index: int
    ) -> List[SemanticItem]:
        return [self._build_item(document, node, index, depth=0)]

    def _build_item(
        self, document: MarkupDocument, node: ElementNode, index: int, depth: int
    ) -> SemanticItem:
        types, context = self._parse_itemtype(node.get_attribute("itemtype"))

        properties: Dict[str, Any] = {}
        for prop_node in node.iter_descendants():
            if not prop_node.has_attribute("itemprop"):
                continue
            if has_ancestor_between(prop_node, node, "itemscope"):
                # Belongs to a nested item
                continue

            names = (prop_node.get_attribute("itemprop") or "").split()
            if not names:
                continue
            value = self._property_value(document, prop_node, index, depth)
            for name in names:
                add_property(properties, name, value)

        return self.make_item(node, index, types, properties, node.get_attribute("itemid"), context)

    @staticmethod
    def _parse_itemtype(itemtype: Optional[str]) -> Tuple[tuple, str]:
        urls = (itemtype or "").split()
        types = tuple(name for name in (type_name_from_url(url) for url in urls) if name)
        context = (vocabulary_from_url(urls[0]) if urls else None) or DEFAULT_CONTEXT
        return types, context

    def _property_value(
        self, document: MarkupDocument, node: ElementNode, index: int, depth: int
    ) -> Any:
        if node.has_attribute("itemscope"):
            if depth + 1 > self.max_depth:
                logger.debug(
                    f"Microdata nesting ceiling reached at <{node.tag_name}>; using literal value"
                )
                return self.element_value(document, node)
            return self._build_item(document, node, index, depth + 1)
        if node.has_attribute("content"):
            return node.get_attribute("content")
        return self.element_value(document, node)
