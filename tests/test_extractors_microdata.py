"""Tests for the Microdata extractor."""

from sdvalidator.extractors.microdata import (
    MicrodataExtractor,
    type_name_from_url,
    vocabulary_from_url,
)
from sdvalidator.markup import ElementNode, MarkupDocument, parse_html
from sdvalidator.models import SemanticItem, SourceFormat


class TestItemtypeParsing:
    """Test cases for itemtype URL helpers."""

    def test_type_name_from_url(self):
        """Test the type is the last path segment after any fragment."""
        assert type_name_from_url("https://schema.org/Product") == "Product"
        assert type_name_from_url("http://example.com/vocab#Widget") == "Widget"
        assert type_name_from_url("") == ""

    def test_vocabulary_from_url(self):
        """Test the vocabulary is the URL without the type name."""
        assert vocabulary_from_url("https://schema.org/Product") == "https://schema.org"
        assert vocabulary_from_url("http://example.com/vocab#Widget") == "http://example.com/vocab"
        assert vocabulary_from_url("Product") is None


class TestMicrodataExtraction:
    """Test cases for MicrodataExtractor.extract."""

    def test_detect(self, microdata_document, rdfa_document):
        """Test detection by itemscope/itemtype."""
        extractor = MicrodataExtractor()
        assert extractor.detect(microdata_document)
        assert not extractor.detect(rdfa_document)

    def test_person_with_nested_address(self, microdata_document):
        """Test nested itemscope becomes a nested item."""
        items = MicrodataExtractor().extract(microdata_document)

        assert len(items) == 1
        person = items[0]
        assert person.types == ("Person",)
        assert person.context == "https://schema.org"
        assert person.source_format == SourceFormat.MICRODATA
        assert person.get("name") == "Jane Doe"

        address = person.get("address")
        assert isinstance(address, SemanticItem)
        assert address.types == ("PostalAddress",)
        assert address.get("streetAddress") == "1 Main St"

    def test_nested_properties_do_not_leak(self, microdata_document):
        """Test properties of the nested item stay on the nested item."""
        person = MicrodataExtractor().extract(microdata_document)[0]
        assert "streetAddress" not in person.properties

    def test_links_resolve_against_base_url(self, microdata_document):
        """Test href values are resolved like the DOM does."""
        person = MicrodataExtractor().extract(microdata_document)[0]
        assert person.get("url") == "https://example.com/about/jane"

    def test_value_rules(self):
        """Test content attribute, meta, img and plain text values."""
        document = parse_html("""
            <div itemscope itemtype="https://schema.org/Product" itemid="urn:sku:1">
              <span itemprop="name">  Widget  </span>
              <meta itemprop="sku" content="W-1">
              <img itemprop="image" src="https://example.com/w.png">
              <span itemprop="price" content="19.99">$19.99</span>
              <data itemprop="gtin13" value="0123456789012">Code</data>
            </div>
        """)

        item = MicrodataExtractor().extract(document)[0]

        assert item.id == "urn:sku:1"
        assert item.get("name") == "Widget"
        assert item.get("sku") == "W-1"
        assert item.get("image") == "https://example.com/w.png"
        assert item.get("price") == "19.99"
        assert item.get("gtin13") == "0123456789012"

    def test_multiple_names_and_duplicates(self):
        """Test space separated itemprop names and repeated properties."""
        root = ElementNode("html", {}, [
            ElementNode("div", {"itemscope": "", "itemtype": "https://schema.org/Thing"}, [
                ElementNode("span", {"itemprop": "name alternateName"}, ["Acme"]),
                ElementNode("span", {"itemprop": "keywords"}, ["a"]),
                ElementNode("span", {"itemprop": "keywords"}, ["b"]),
            ]),
        ])

        item = MicrodataExtractor().extract(MarkupDocument(root))[0]

        assert item.get("name") == "Acme"
        assert item.get("alternateName") == "Acme"
        assert item.get("keywords") == ["a", "b"]

    def test_multiple_itemtypes(self):
        """Test every itemtype URL contributes a type."""
        root = ElementNode("html", {}, [
            ElementNode("div", {
                "itemscope": "",
                "itemtype": "https://schema.org/Product https://schema.org/Offer",
            }, [ElementNode("span", {"itemprop": "name"}, ["Widget"])]),
        ])

        item = MicrodataExtractor().extract(MarkupDocument(root))[0]
        assert item.types == ("Product", "Offer")

    def test_sibling_islands_in_document_order(self):
        """Test each top-level itemscope is its own island."""
        document = parse_html("""
            <div itemscope itemtype="https://schema.org/Person"><span itemprop="name">A</span></div>
            <div itemscope itemtype="https://schema.org/Person"><span itemprop="name">B</span></div>
        """)

        items = MicrodataExtractor().extract(document)

        assert [i.get("name") for i in items] == ["A", "B"]
        assert [i.index for i in items] == [0, 1]

    def test_untyped_empty_scope_is_dropped(self):
        """Test a bare itemscope without properties yields nothing."""
        document = parse_html("<div itemscope></div>")
        assert MicrodataExtractor().extract(document) == []
