"""Tests for the RDFa extractor."""

from sdvalidator.config import ValidationThresholds
from sdvalidator.extractors.rdfa import RDFaExtractor
from sdvalidator.markup import ElementNode, MarkupDocument, parse_html
from sdvalidator.models import SemanticItem, SourceFormat


def _document(*body_children, body_attrs=None, html_attrs=None):
    body = ElementNode("body", body_attrs or {}, list(body_children))
    return MarkupDocument(ElementNode("html", html_attrs or {}, [body]))


class TestRDFaExtraction:
    """Test cases for RDFaExtractor.extract."""

    def test_detect(self, rdfa_document, product_document):
        """Test detection by RDFa attributes."""
        extractor = RDFaExtractor()
        assert extractor.detect(rdfa_document)
        assert not extractor.detect(product_document)

    def test_organization(self, rdfa_document):
        """Test a vocab/typeof island becomes one item."""
        items = RDFaExtractor().extract(rdfa_document)

        assert len(items) == 1
        item = items[0]
        assert item.types == ("Organization",)
        assert item.context == "https://schema.org/"
        assert item.source_format == SourceFormat.RDFA
        assert item.get("name") == "Acme Corp"
        assert item.get("url") == "https://acme.example"

    def test_repeated_typeof_terms(self):
        """Test a typeof naming the same type twice yields it once."""
        document = parse_html(
            '<html><body><div vocab="https://schema.org/" typeof="Product schema:Product">'
            '<span property="name">Widget</span></div></body></html>'
        )

        assert RDFaExtractor().extract(document)[0].types == ("Product",)

    def test_duplicate_properties_become_list(self, rdfa_document):
        """Test repeated properties coalesce into a list in document order."""
        item = RDFaExtractor().extract(rdfa_document)[0]

        assert item.get("sameAs") == [
            "https://social.example/acme",
            "https://video.example/acme",
        ]

    def test_three_duplicates_append(self):
        """Test a third duplicate appends to the existing list."""
        document = _document(
            ElementNode("div", {"vocab": "https://schema.org/", "typeof": "Thing"}, [
                ElementNode("span", {"property": "keywords"}, ["a"]),
                ElementNode("span", {"property": "keywords"}, ["b"]),
                ElementNode("span", {"property": "keywords"}, ["c"]),
            ])
        )

        item = RDFaExtractor().extract(document)[0]
        assert item.get("keywords") == ["a", "b", "c"]

    def test_nested_typeof(self):
        """Test nested typeof becomes a nested item and does not leak properties."""
        document = parse_html("""
            <div vocab="https://schema.org/" typeof="Event">
              <span property="name">Launch</span>
              <div property="location" typeof="Place">
                <span property="name">Hall A</span>
              </div>
            </div>
        """)

        items = RDFaExtractor().extract(document)

        assert len(items) == 1
        event = items[0]
        assert event.get("name") == "Launch"
        location = event.get("location")
        assert isinstance(location, SemanticItem)
        assert location.types == ("Place",)
        assert location.get("name") == "Hall A"

    def test_value_precedence(self):
        """Test content, then resource, then the element value."""
        document = _document(
            ElementNode("div", {"vocab": "https://schema.org/", "typeof": "Product"}, [
                ElementNode("span", {"property": "price", "content": "10.00"}, ["$10"]),
                ElementNode("span", {"property": "sameAs", "resource": "https://ref.example"}),
                ElementNode("meta", {"property": "sku", "content": "X1"}),
                ElementNode("time", {"property": "releaseDate", "datetime": "2024-01-01"}, ["Jan 1"]),
            ])
        )

        item = RDFaExtractor().extract(document)[0]

        assert item.get("price") == "10.00"
        assert item.get("sameAs") == "https://ref.example"
        assert item.get("sku") == "X1"
        assert item.get("releaseDate") == "2024-01-01"

    def test_about_sets_id(self):
        """Test about (or resource) becomes the item id."""
        document = _document(
            ElementNode("div", {"about": "#me", "typeof": "Person"}, [
                ElementNode("span", {"property": "name"}, ["Jane"]),
            ])
        )

        item = RDFaExtractor().extract(document)[0]
        assert item.id == "#me"
        assert item.context == "https://schema.org"

    def test_empty_islands_are_dropped(self):
        """Test islands with neither type nor properties are not returned."""
        document = _document(ElementNode("div", {"vocab": "https://schema.org/"}, ["text"]))
        assert RDFaExtractor().extract(document) == []

    def test_nesting_ceiling_uses_literal(self):
        """Test nesting beyond the extraction ceiling falls back to text."""
        document = parse_html("""
            <div vocab="https://schema.org/" typeof="Person">
              <div property="worksFor" typeof="Organization">
                <span property="name">Acme</span>
              </div>
            </div>
        """)

        item = RDFaExtractor(ValidationThresholds(max_extraction_depth=0)).extract(document)[0]
        assert item.get("worksFor") == "Acme"


class TestPrefixes:
    """Test cases for prefix handling."""

    def test_parse_prefix_attribute(self):
        """Test whitespace separated prefix/URI pairs."""
        assert RDFaExtractor.parse_prefix_attribute(
            "og: http://ogp.me/ns# ex: https://example.com/ns#"
        ) == {"og": "http://ogp.me/ns#", "ex": "https://example.com/ns#"}
        assert RDFaExtractor.parse_prefix_attribute(None) == {}

    def test_known_prefix_is_stripped(self):
        """Test schema:name and og:title reduce to their local names."""
        document = _document(
            ElementNode("div", {"typeof": "schema:Article"}, [
                ElementNode("span", {"property": "schema:headline"}, ["Hello"]),
                ElementNode("meta", {"property": "og:title", "content": "Hello OG"}),
                ElementNode("span", {"property": "dc:creator"}, ["Jane"]),
            ])
        )

        item = RDFaExtractor().extract(document)[0]

        assert item.types == ("Article",)
        assert item.get("headline") == "Hello"
        assert item.get("title") == "Hello OG"
        assert item.get("dc:creator") == "Jane"

    def test_declared_prefix(self):
        """Test prefixes declared on body are known."""
        document = _document(
            ElementNode("div", {"typeof": "ex:Widget"}, [
                ElementNode("span", {"property": "ex:color"}, ["red"]),
            ]),
            body_attrs={"prefix": "ex: https://example.com/ns#"},
        )

        item = RDFaExtractor().extract(document)[0]
        assert item.types == ("Widget",)
        assert item.get("color") == "red"

    def test_full_uri_terms_unchanged(self):
        """Test full URIs are not treated as prefixed names."""
        assert RDFaExtractor().expand_term("https://schema.org/name") == "https://schema.org/name"
