"""RDFa extractor (vocab/typeof/property attributes)."""

import logging
from typing import Any, Dict, List, Optional

from sdvalidator.config import ValidationThresholds
from sdvalidator.constants import DEFAULT_CONTEXT, DEFAULT_NAMESPACES
from sdvalidator.extractors.base import BaseExtractor, add_property, has_ancestor_between
from sdvalidator.markup import ElementNode, MarkupDocument
from sdvalidator.models import SemanticItem, SourceFormat

logger = logging.getLogger(__name__)

RDFA_ATTRIBUTES = ("property", "typeof", "vocab", "resource", "about")


class RDFaExtractor(BaseExtractor):
    """Extract RDFa Lite style items.

    Prefixes declared with the `prefix` attribute on <html>, <head> and
    <body> are applied in that order on top of the default namespaces, so a
    later declaration of the same prefix wins regardless of nesting.
    """

    source_format = SourceFormat.RDFA

    def __init__(self, thresholds: Optional[ValidationThresholds] = None):
        super().__init__(thresholds)
        self.namespaces: Dict[str, str] = dict(DEFAULT_NAMESPACES)

    def detect(self, document: MarkupDocument) -> bool:
        return any(
            any(node.has_attribute(attr) for attr in RDFA_ATTRIBUTES)
            for node in document.iter_elements()
        )

    def extract(self, document: MarkupDocument):
        self.namespaces = self.parse_document_namespaces(document)
        return super().extract(document)

    def parse_document_namespaces(self, document: MarkupDocument) -> Dict[str, str]:
        """Default namespaces overlaid by root, head and body declarations."""
        namespaces = dict(DEFAULT_NAMESPACES)
        for node in (document.root, document.head, document.body):
            if node is not None and node.has_attribute("prefix"):
                namespaces.update(self.parse_prefix_attribute(node.get_attribute("prefix")))
        return namespaces

    @staticmethod
    def parse_prefix_attribute(value: Optional[str]) -> Dict[str, str]:
        """Parse 'og: http://ogp.me/ns# fb: http://ogp.me/ns/fb#' pairs."""
        declarations: Dict[str, str] = {}
        if not value:
            return declarations

        parts = value.split()
        for i in range(0, len(parts) - 1, 2):
            prefix = parts[i].replace(":", "")
            uri = parts[i + 1]
            if prefix and uri:
                declarations[prefix] = uri
        return declarations

    def find_islands(self, document: MarkupDocument) -> List[ElementNode]:
        """Nodes with vocab, outermost typeof nodes, and nodes with about."""
        islands = []
        for node in document.iter_elements():
            if node.has_attribute("vocab") or node.has_attribute("about"):
                islands.append(node)
            elif node.has_attribute("typeof") and not has_ancestor_between(node, None, "typeof"):
                islands.append(node)
        return islands

    def extract_island(
        self, document: MarkupDocument, node: ElementNode, index: int
    ) -> List[SemanticItem]:
        return [self._build_item(document, node, index, depth=0)]

    def _build_item(
        self, document: MarkupDocument, node: ElementNode, index: int, depth: int
    ) -> SemanticItem:
        context = node.get_attribute("vocab") or DEFAULT_CONTEXT

        types: tuple = ()
        if node.has_attribute("typeof"):
            types = tuple(
                self.expand_term(term) for term in (node.get_attribute("typeof") or "").split()
            )

        if node.has_attribute("about"):
            item_id = node.get_attribute("about")
        elif node.has_attribute("resource"):
            item_id = node.get_attribute("resource")
        else:
            item_id = None

        properties: Dict[str, Any] = {}
        for prop_node in self._property_elements(node):
            names = (prop_node.get_attribute("property") or "").split()
            if not names:
                continue
            value = self._property_value(document, prop_node, index, depth)
            for name in names:
                add_property(properties, self.expand_term(name), value)

        return self.make_item(node, index, types, properties, item_id, context)

    def _property_elements(self, node: ElementNode) -> List[ElementNode]:
        """Property descendants not owned by a nested typeof boundary."""
        return [
            candidate
            for candidate in node.iter_descendants()
            if candidate.has_attribute("property")
            and not has_ancestor_between(candidate, node, "typeof")
        ]

    def _property_value(
        self, document: MarkupDocument, node: ElementNode, index: int, depth: int
    ) -> Any:
        if node.has_attribute("typeof"):
            if depth + 1 > self.max_depth:
                logger.debug(f"RDFa nesting ceiling reached at <{node.tag_name}>; using literal value")
                return self.element_value(document, node)
            return self._build_item(document, node, index, depth + 1)
        if node.has_attribute("content"):
            return node.get_attribute("content")
        if node.has_attribute("resource"):
            # URI reference, never dereferenced
            return node.get_attribute("resource")
        return self.element_value(document, node)

    def expand_term(self, term: str) -> str:
        """Reduce `prefix:local` to `local` when the prefix is known.

        Full URIs and terms with unknown prefixes are returned unchanged.
        """
        if not term:
            return ""
        if "://" in term:
            return term

        parts = term.split(":")
        if len(parts) == 2 and parts[0] in self.namespaces:
            return parts[1]
        return term
