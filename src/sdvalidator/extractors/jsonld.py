"""JSON-LD extractor (<script type="application/ld+json"> blocks)."""

import json
import logging
import re
from typing import Any, Iterator, List

from sdvalidator.constants import CONTEXT_KEY, GRAPH_KEY, JSONLD_MIME_TYPE
from sdvalidator.extractors.base import BaseExtractor
from sdvalidator.markup import ElementNode, MarkupDocument
from sdvalidator.models import SemanticItem, SourceFormat

logger = logging.getLogger(__name__)

# Wrappers some CMSs put around inline JSON
_WRAPPER_PATTERNS = (
    (re.compile(r"^\s*<!--"), re.compile(r"-->\s*$")),
    (re.compile(r"^\s*(?://\s*)?<!\[CDATA\["), re.compile(r"(?://\s*)?\]\]>\s*$")),
)


def is_jsonld_script(node: ElementNode) -> bool:
    """Script elements whose MIME type is application/ld+json (parameters ignored)."""
    if node.tag_name != "script":
        return False
    mime_type = (node.get_attribute("type") or "").split(";")[0].strip().lower()
    return mime_type == JSONLD_MIME_TYPE


def strip_wrappers(text: str) -> str:
    """Remove HTML comment and CDATA wrappers around a script body."""
    text = text.strip()
    for opening, closing in _WRAPPER_PATTERNS:
        if opening.search(text) and closing.search(text):
            text = closing.sub("", opening.sub("", text, count=1), count=1).strip()
    return text


class JSONLDExtractor(BaseExtractor):
    """Extract items from JSON-LD script blocks.

    A block may hold one object, an array of objects, or an object with a
    `@graph` array; each object becomes its own item.
    """

    source_format = SourceFormat.JSONLD

    def detect(self, document: MarkupDocument) -> bool:
        return any(is_jsonld_script(node) for node in document.iter_elements())

    def find_islands(self, document: MarkupDocument) -> List[ElementNode]:
        return document.find_all(is_jsonld_script)

    def raw_markup(self, node: ElementNode) -> str:
        return node.text_content

    def extract_island(
        self, document: MarkupDocument, node: ElementNode, index: int
    ) -> List[SemanticItem]:
        content = strip_wrappers(node.text_content)
        if not content:
            logger.debug(f"Skipping empty JSON-LD script {index}")
            return []

        data = json.loads(content)
        if not isinstance(data, (dict, list)):
            raise ValueError(f"JSON-LD root must be an object or array, got {type(data).__name__}")

        return [
            SemanticItem.from_dict(
                obj,
                source_format=self.source_format,
                index=index,
                source_location=node,
                max_depth=self.max_depth,
            )
            for obj in self._iter_objects(data)
        ]

    def _iter_objects(self, data: Any, context: Any = None) -> Iterator[dict]:
        """Flatten top-level arrays and `@graph` containers into objects."""
        if isinstance(data, list):
            for entry in data:
                yield from self._iter_objects(entry, context)
            return
        if not isinstance(data, dict):
            return

        context = data.get(CONTEXT_KEY, context)
        graph = data.get(GRAPH_KEY)

        if isinstance(graph, list):
            # The container itself only counts when it describes something
            yield data
            for node in graph:
                if isinstance(node, dict) and CONTEXT_KEY not in node and context is not None:
                    node = {CONTEXT_KEY: context, **node}
                if isinstance(node, dict):
                    yield node
            return

        if CONTEXT_KEY not in data and context is not None:
            data = {CONTEXT_KEY: context, **data}
        yield data
