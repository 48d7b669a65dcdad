"""Tests for the page-level structured data analyzer."""

import pytest

from sdvalidator.analyzer import StructuredDataAnalyzer, analyze_html
from sdvalidator.config import ValidationThresholds
from sdvalidator.exceptions import MarkupError
from sdvalidator.markup import parse_html

from conftest import MICRODATA_HTML, PRODUCT_JSONLD_HTML, RDFA_HTML


def _codes(recommendations):
    return [r.code for r in recommendations]


class TestStructuredDataAnalyzer:
    """Test cases for StructuredDataAnalyzer."""

    def test_analyze_product_page(self):
        """Test a JSON-LD product page is detected, counted and validated."""
        report = StructuredDataAnalyzer().analyze(PRODUCT_JSONLD_HTML, base_url="https://example.com/w")

        assert report.has_structured_data
        assert report.formats["jsonld"].found
        assert report.formats["jsonld"].items == 1
        assert not report.formats["microdata"].found
        assert report.schema_types == {"Product": 1}
        assert report.validation.stats.total_items == 1
        assert report.valid

    def test_accepts_parsed_document(self, rdfa_document):
        """Test a MarkupDocument can be passed instead of HTML."""
        report = StructuredDataAnalyzer().analyze(rdfa_document)

        assert report.formats["rdfa"].items == 1
        assert report.schema_types == {"Organization": 1}

    def test_page_without_structured_data(self):
        """Test pages without markup get the getting-started recommendations."""
        report = StructuredDataAnalyzer().analyze("<html><body><p>Plain page</p></body></html>")

        assert not report.has_structured_data
        assert report.items == []
        assert report.score == 0
        assert _codes(report.recommendations) == ["add-structured-data", "start-with-jsonld"]
        assert "no-structured-data" in report.validation.summary.codes()

    def test_missing_jsonld_recommendation(self):
        """Test Microdata-only pages are pointed to JSON-LD."""
        report = StructuredDataAnalyzer().analyze(MICRODATA_HTML)

        assert "add-jsonld" in _codes(report.recommendations)
        assert "consider-jsonld-format" in report.validation.summary.codes()

    def test_error_recommendation_and_order(self):
        """Test errors produce a high priority recommendation first."""
        html = """
            <script type="application/ld+json">{"@context": "https://schema.org",
              "@type": "Product", "name": "Widget"}</script>
        """
        report = StructuredDataAnalyzer().analyze(html)

        importances = [r.importance for r in report.recommendations]
        order = {"high": 0, "medium": 1, "low": 2}
        assert importances == sorted(importances, key=order.get)
        assert "fix-errors" in _codes(report.recommendations)
        assert any(r.schema_type == "Product" for r in report.recommendations)

    def test_recommendations_are_capped(self):
        """Test the number of recommendations follows max_recommendations."""
        html = '<script type="application/ld+json">{"@type": "Product"}</script>'
        analyzer = StructuredDataAnalyzer(thresholds=ValidationThresholds(max_recommendations=3))

        report = analyzer.analyze(html)

        assert len(report.recommendations) == 3

    def test_common_types_suggestion(self):
        """Test missing common types are suggested, at most three."""
        report = StructuredDataAnalyzer().analyze(RDFA_HTML)

        suggestion = [r for r in report.recommendations if r.code == "add-common-types"][0]
        assert suggestion.importance == "low"
        assert "Organization" not in suggestion.message
        assert suggestion.message.endswith("LocalBusiness, Product, Article")

    def test_malformed_jsonld_is_reported(self):
        """Test a broken JSON-LD block still yields a report with an error."""
        report = StructuredDataAnalyzer().analyze(
            '<script type="application/ld+json">{"@type": </script>'
        )

        assert report.has_structured_data
        assert report.validation.stats.total_errors == 1
        assert report.schema_types == {}

    def test_markup_errors_propagate(self):
        """Test unparseable input raises MarkupError."""
        with pytest.raises(MarkupError):
            StructuredDataAnalyzer().analyze("")

    def test_to_dict(self):
        """Test the report serializes with camelCase keys."""
        data = analyze_html(PRODUCT_JSONLD_HTML).to_dict()

        assert set(data) == {
            "hasStructuredData", "formats", "items", "schemaTypes", "validation", "recommendations",
        }
        assert data["formats"]["jsonld"] == {"found": True, "items": 1}
        assert data["items"][0]["@type"] == "Product"

    def test_custom_engine_thresholds_are_used(self):
        """Test the analyzer picks up thresholds from an injected engine."""
        from sdvalidator.engine import ValidationEngine

        thresholds = ValidationThresholds(max_recommendations=1)
        analyzer = StructuredDataAnalyzer(engine=ValidationEngine(thresholds=thresholds))

        report = analyzer.analyze(parse_html(MICRODATA_HTML))
        assert len(report.recommendations) == 1


class TestDeeplyNestedPages:
    """Test cases for pages nested deeper than the recursion limit."""

    def test_analyze_deep_page(self):
        """Test the analyzer reports on deeply nested markup instead of crashing."""
        html = (
            "<html><body>" + "<div>" * 3000
            + '<span itemscope itemtype="https://schema.org/Thing"><span itemprop="name">x</span></span>'
            + "</div>" * 3000 + "</body></html>"
        )

        report = analyze_html(html)

        assert report.validation.stats.total_items == len(report.items)
