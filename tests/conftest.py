"""Shared fixtures for the structured data validator tests."""

import pytest

from sdvalidator.config import ValidationThresholds
from sdvalidator.markup import parse_html
from sdvalidator.models import SemanticItem, SourceFormat
from sdvalidator.schema_registry import default_registry


PRODUCT_JSONLD_HTML = """
<!DOCTYPE html>
<html lang="en">
<head>
    <title>Widget</title>
    <script type="application/ld+json">
    {
      "@context": "https://schema.org",
      "@type": "Product",
      "name": "Widget",
      "image": "https://example.com/widget.png",
      "description": "A sturdy widget for every workshop, made of recycled aluminium.",
      "sku": "W-1",
      "gtin13": "0123456789012",
      "brand": {"@type": "Brand", "name": "Acme"},
      "offers": {
        "@type": "Offer",
        "price": "19.99",
        "priceCurrency": "USD",
        "availability": "https://schema.org/InStock",
        "url": "https://example.com/widget"
      },
      "aggregateRating": {
        "@type": "AggregateRating",
        "ratingValue": "4.5",
        "reviewCount": "12"
      }
    }
    </script>
</head>
<body>
    <h1>Widget</h1>
</body>
</html>
"""

MICRODATA_HTML = """
<html>
<body>
  <div itemscope itemtype="https://schema.org/Person">
    <span itemprop="name">Jane Doe</span>
    <a itemprop="url" href="/about/jane">Profile</a>
    <div itemprop="address" itemscope itemtype="https://schema.org/PostalAddress">
      <span itemprop="streetAddress">1 Main St</span>
      <span itemprop="addressLocality">Springfield</span>
    </div>
  </div>
</body>
</html>
"""

RDFA_HTML = """
<html>
<body>
  <div vocab="https://schema.org/" typeof="Organization">
    <span property="name">Acme Corp</span>
    <a property="url" href="https://acme.example">Home</a>
    <a property="sameAs" href="https://social.example/acme">Social</a>
    <a property="sameAs" href="https://video.example/acme">Video</a>
  </div>
</body>
</html>
"""


@pytest.fixture
def thresholds():
    """Fresh default thresholds."""
    return ValidationThresholds()


@pytest.fixture
def registry():
    """The built-in schema registry."""
    return default_registry()


@pytest.fixture
def product_document():
    """Page with one valid Product in JSON-LD."""
    return parse_html(PRODUCT_JSONLD_HTML, base_url="https://example.com/widget")


@pytest.fixture
def microdata_document():
    """Page with a Person (and nested PostalAddress) in Microdata."""
    return parse_html(MICRODATA_HTML, base_url="https://example.com/team")


@pytest.fixture
def rdfa_document():
    """Page with an Organization in RDFa."""
    return parse_html(RDFA_HTML)


@pytest.fixture
def make_item():
    """Factory for SemanticItems built from JSON-LD-like mappings."""

    def _make(data, source_format=SourceFormat.JSONLD):
        data = dict(data)
        data.setdefault("@context", "https://schema.org")
        return SemanticItem.from_dict(data, source_format=source_format)

    return _make


@pytest.fixture
def valid_product(make_item):
    """Product item that passes schema and business-rule validation."""
    return make_item({
        "@type": "Product",
        "name": "Widget",
        "image": "https://example.com/widget.png",
        "description": "A sturdy widget for every workshop, made of recycled aluminium.",
        "sku": "W-1",
        "gtin13": "0123456789012",
        "brand": {"@type": "Brand", "name": "Acme"},
        "url": "https://example.com/widget",
        "offers": {
            "@type": "Offer",
            "price": "19.99",
            "priceCurrency": "USD",
            "availability": "https://schema.org/InStock",
            "url": "https://example.com/widget",
        },
        "aggregateRating": {
            "@type": "AggregateRating",
            "ratingValue": "4.5",
            "reviewCount": "12",
            "ratingCount": "12",
            "bestRating": "5",
            "worstRating": "1",
        },
    })
