"""Shared extraction loop for markup-attribute based formats."""

import logging
import weakref
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from sdvalidator.config import ValidationThresholds, default_thresholds
from sdvalidator.constants import HREF_TAGS, SRC_TAGS, VALUE_TAGS
from sdvalidator.markup import ElementNode, MarkupDocument
from sdvalidator.models import ExtractedItem, ExtractionError, SemanticItem, SourceFormat

logger = logging.getLogger(__name__)

# Characters of an island kept on placeholders and in log lines
RAW_MARKUP_LOG_LIMIT = 100


def add_property(properties: Dict[str, Any], name: str, value: Any) -> None:
    """Add a property value, coalescing duplicates into a list.

    The first duplicate turns the scalar into a two element list; later
    duplicates append. Document order is preserved.
    """
    if name in properties:
        existing = properties[name]
        if isinstance(existing, list):
            existing.append(value)
        else:
            properties[name] = [existing, value]
    else:
        properties[name] = value


def has_ancestor_between(node: ElementNode, stop: Optional[ElementNode], attribute: str) -> bool:
    """Whether an element strictly between `node` and `stop` carries `attribute`."""
    for ancestor in node.iter_ancestors():
        if ancestor is stop:
            return False
        if ancestor.has_attribute(attribute):
            return True
    return False


class BaseExtractor(ABC):
    """Extract items from every top-level island of one markup syntax.

    Subclasses find the islands and build one item per island. The base
    class owns the per-island error boundary: a failing island becomes an
    ExtractionError placeholder and extraction moves on to its siblings.
    """

    source_format: SourceFormat

    def __init__(self, thresholds: Optional[ValidationThresholds] = None):
        self.thresholds = thresholds or default_thresholds
        self.max_depth = self.thresholds.max_extraction_depth

    @abstractmethod
    def detect(self, document: MarkupDocument) -> bool:
        """Whether the document carries any markup of this syntax."""

    @abstractmethod
    def find_islands(self, document: MarkupDocument) -> List[ElementNode]:
        """Top-level nodes, each starting a fresh extraction scope."""

    @abstractmethod
    def extract_island(
        self, document: MarkupDocument, node: ElementNode, index: int
    ) -> List[SemanticItem]:
        """Build the items of one island (usually exactly one)."""

    def extract(self, document: MarkupDocument) -> List[ExtractedItem]:
        """Extract every island in document order.

        Args:
            document: Parsed markup snapshot

        Returns:
            Items and extraction-error placeholders
        """
        results: List[ExtractedItem] = []

        for index, node in enumerate(self.find_islands(document)):
            try:
                items = self.extract_island(document, node, index)
            except Exception as e:
                raw = self.raw_markup(node)
                logger.warning(
                    f"{self.source_format.value} parse error in island {index}: {e} "
                    f"({raw[:RAW_MARKUP_LOG_LIMIT]}...)"
                )
                results.append(ExtractionError.create(
                    self.source_format, index, str(e), raw_markup=raw, source_location=node,
                ))
                continue

            results.extend(item for item in items if item.is_retainable)

        logger.debug(f"{self.source_format.value}: extracted {len(results)} entries")
        return results

    def raw_markup(self, node: ElementNode) -> str:
        return node.outer_html()

    def make_item(
        self,
        node: ElementNode,
        index: int,
        types: tuple,
        properties: Dict[str, Any],
        item_id: Optional[str],
        context: Any,
    ) -> SemanticItem:
        return SemanticItem(
            types=types,
            properties=properties,
            source_format=self.source_format,
            id=item_id,
            context=context,
            index=index,
            source_ref=weakref.ref(node),
        )

    @staticmethod
    def element_value(document: MarkupDocument, node: ElementNode) -> str:
        """The literal a property element contributes, chosen by tag."""
        tag = node.tag_name

        if tag == "meta":
            return node.get_attribute("content") or ""
        if tag in HREF_TAGS:
            return document.resolve_url(node.get_attribute("href")) if node.has_attribute("href") else ""
        if tag in SRC_TAGS:
            return document.resolve_url(node.get_attribute("src")) if node.has_attribute("src") else ""
        if tag == "object":
            return document.resolve_url(node.get_attribute("data")) if node.has_attribute("data") else ""
        if tag == "time":
            return node.get_attribute("datetime") or node.text_content.strip()
        if tag in VALUE_TAGS:
            return node.get_attribute("value") or node.text_content.strip()

        return node.text_content.strip()
