"""Format extractors for embedded structured data."""

import logging
from typing import Dict, List, Optional

from sdvalidator.config import ValidationThresholds
from sdvalidator.extractors.base import BaseExtractor, add_property
from sdvalidator.extractors.jsonld import JSONLDExtractor
from sdvalidator.extractors.microdata import MicrodataExtractor
from sdvalidator.extractors.rdfa import RDFaExtractor
from sdvalidator.markup import MarkupDocument
from sdvalidator.models import ExtractedItem, SourceFormat

logger = logging.getLogger(__name__)

# Run order; results are concatenated in this order
EXTRACTOR_CLASSES = (JSONLDExtractor, MicrodataExtractor, RDFaExtractor)


def create_extractors(thresholds: Optional[ValidationThresholds] = None) -> List[BaseExtractor]:
    return [cls(thresholds) for cls in EXTRACTOR_CLASSES]


def extract_by_format(
    document: MarkupDocument,
    thresholds: Optional[ValidationThresholds] = None,
) -> Dict[SourceFormat, List[ExtractedItem]]:
    """Run every extractor and keep results grouped by format.

    Formats not detected in the document map to an empty list.
    """
    results: Dict[SourceFormat, List[ExtractedItem]] = {}
    for extractor in create_extractors(thresholds):
        if extractor.detect(document):
            results[extractor.source_format] = extractor.extract(document)
        else:
            results[extractor.source_format] = []
    return results


def extract_all(
    document: MarkupDocument,
    thresholds: Optional[ValidationThresholds] = None,
) -> List[ExtractedItem]:
    """Extract JSON-LD, Microdata and RDFa items, in that order."""
    items: List[ExtractedItem] = []
    for format_items in extract_by_format(document, thresholds).values():
        items.extend(format_items)
    logger.info(f"Extracted {len(items)} structured data entries")
    return items


__all__ = [
    "BaseExtractor",
    "JSONLDExtractor",
    "MicrodataExtractor",
    "RDFaExtractor",
    "add_property",
    "create_extractors",
    "extract_all",
    "extract_by_format",
]
