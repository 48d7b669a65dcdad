"""
Structured Data Analyzer

Page-level orchestration:
- detect and extract JSON-LD, Microdata and RDFa
- validate every item (schema + business rules)
- count schema types
- produce prioritized recommendations
"""

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Union

from sdvalidator.config import ValidationThresholds, default_thresholds
from sdvalidator.constants import COMMON_SCHEMA_TYPES, SUGGESTED_TYPES_LIMIT
from sdvalidator.engine import ValidationEngine
from sdvalidator.extractors import extract_by_format
from sdvalidator.markup import MarkupDocument, parse_html
from sdvalidator.models import (
    EngineResult,
    ExtractedItem,
    Recommendation,
    SemanticItem,
    SourceFormat,
)
from sdvalidator.special_validators import dedupe_recommendations, sort_recommendations

logger = logging.getLogger(__name__)


@dataclass
class FormatPresence:
    """Whether a format was detected and how many entries it produced."""

    found: bool = False
    items: int = 0

    def to_dict(self) -> dict:
        return {"found": self.found, "items": self.items}


@dataclass
class AnalysisReport:
    """Structured data analysis results for one page."""

    has_structured_data: bool = False
    formats: Dict[str, FormatPresence] = field(
        default_factory=lambda: {fmt.value: FormatPresence() for fmt in
                                 (SourceFormat.JSONLD, SourceFormat.MICRODATA, SourceFormat.RDFA)}
    )
    items: List[ExtractedItem] = field(default_factory=list)
    schema_types: Dict[str, int] = field(default_factory=dict)
    validation: EngineResult = field(default_factory=EngineResult)
    recommendations: List[Recommendation] = field(default_factory=list)

    @property
    def score(self) -> int:
        return self.validation.score

    @property
    def valid(self) -> bool:
        return self.validation.valid

    def to_dict(self) -> dict:
        return {
            "hasStructuredData": self.has_structured_data,
            "formats": {k: v.to_dict() for k, v in self.formats.items()},
            "items": [item.to_dict() for item in self.items],
            "schemaTypes": dict(self.schema_types),
            "validation": self.validation.to_dict(),
            "recommendations": [r.to_dict() for r in self.recommendations],
        }


class StructuredDataAnalyzer:
    """Analyze structured data markup on web pages.

    Args:
        engine: Validation engine; built from `thresholds` when omitted
        thresholds: Limits used by extraction, validation and recommendations
    """

    def __init__(
        self,
        engine: Optional[ValidationEngine] = None,
        thresholds: Optional[ValidationThresholds] = None,
    ):
        self.thresholds = thresholds or (engine.thresholds if engine else default_thresholds)
        self.engine = engine or ValidationEngine(thresholds=self.thresholds)

    def analyze(
        self, source: Union[str, MarkupDocument], base_url: Optional[str] = None
    ) -> AnalysisReport:
        """
        Analyze structured data on a page.

        Args:
            source: HTML text or an already parsed MarkupDocument
            base_url: Page URL used to resolve relative links

        Returns:
            AnalysisReport

        Raises:
            MarkupError: If `source` is HTML that cannot be parsed
        """
        document = source if isinstance(source, MarkupDocument) else parse_html(source, base_url)
        logger.debug(f"Analyzing structured data for {base_url or document.base_url or 'document'}")

        report = AnalysisReport()
        self._detect_and_extract(document, report)
        report.schema_types = self._collect_schema_types(report.items)

        if report.has_structured_data and report.items:
            report.validation = self.engine.validate_items(report.items)
        else:
            logger.debug("No structured data to validate")
            report.validation = self.engine.validate_items([])

        report.recommendations = self._generate_recommendations(report)

        logger.info(
            f"Structured data analysis complete: {len(report.items)} items, "
            f"{len(report.schema_types)} types, score {report.score}"
        )
        return report

    def _detect_and_extract(self, document: MarkupDocument, report: AnalysisReport) -> None:
        by_format = extract_by_format(document, self.thresholds)

        for source_format, entries in by_format.items():
            presence = report.formats[source_format.value]
            presence.found = bool(entries)
            presence.items = len(entries)
            report.items.extend(entries)

        report.has_structured_data = any(p.found for p in report.formats.values())
        logger.debug(
            "Detected formats: "
            + ", ".join(f"{name}={p.items}" for name, p in report.formats.items())
        )

    @staticmethod
    def _collect_schema_types(items: List[ExtractedItem]) -> Dict[str, int]:
        counts: Counter = Counter()
        for item in items:
            if isinstance(item, SemanticItem):
                counts.update(t for t in item.types if t)
        return dict(counts)

    def _generate_recommendations(self, report: AnalysisReport) -> List[Recommendation]:
        recommendations: List[Recommendation] = []

        if not report.has_structured_data:
            recommendations.append(Recommendation(
                message="Add structured data to the page using the schema.org vocabulary "
                        "in JSON-LD, Microdata or RDFa.",
                importance="high",
                code="add-structured-data",
            ))
            recommendations.append(Recommendation(
                message="Start with JSON-LD, the format search engines recommend.",
                importance="medium",
                code="start-with-jsonld",
            ))
            return recommendations

        if not report.formats[SourceFormat.JSONLD.value].found:
            recommendations.append(Recommendation(
                message="Consider adding JSON-LD; it is the recommended format and is "
                        "maintained separately from the HTML.",
                importance="medium",
                code="add-jsonld",
            ))

        total_errors = report.validation.stats.total_errors
        if total_errors > 0:
            recommendations.append(Recommendation(
                message=f"Fix {total_errors} structured data errors; search engines may "
                        f"ignore invalid structured data.",
                importance="high",
                code="fix-errors",
            ))

        special = [
            recommendation
            for entry in report.validation.validation_results
            for special_result in entry.special
            for recommendation in special_result.recommendations
        ]
        recommendations.extend(dedupe_recommendations(special))

        missing_types = [t for t in COMMON_SCHEMA_TYPES if t not in report.schema_types]
        if missing_types:
            suggested = ", ".join(missing_types[:SUGGESTED_TYPES_LIMIT])
            recommendations.append(Recommendation(
                message=f"If relevant to the page content, consider adding these schema types: {suggested}",
                importance="low",
                code="add-common-types",
            ))

        recommendations.append(Recommendation(
            message="Make sure all structured data matches the visible page content.",
            importance="medium",
            code="match-page-content",
        ))

        return sort_recommendations(recommendations)[: self.thresholds.max_recommendations]


def analyze_html(html: str, base_url: Optional[str] = None, **kwargs) -> AnalysisReport:
    """Analyze HTML with a fresh StructuredDataAnalyzer."""
    return StructuredDataAnalyzer(**kwargs).analyze(html, base_url=base_url)
