# src/sdvalidator/constants.py
"""Centralized constants for the structured data validator.

This module contains vocabulary values and fixed lists that are used across
multiple modules. For user-configurable thresholds, see config.py and
ValidationThresholds.
"""

# =============================================================================
# Item Keys
# =============================================================================

# Keys with special meaning on JSON-LD-like item mappings
TYPE_KEY = "@type"
ID_KEY = "@id"
CONTEXT_KEY = "@context"
GRAPH_KEY = "@graph"
VALUE_KEY = "@value"

# Placeholder markers carried by extraction-error mappings
ERROR_MARKER = "_error"
FORMAT_MARKER = "_format"
INDEX_MARKER = "_index"
MESSAGE_MARKER = "_message"
RAW_MARKER = "_raw"

# Bucket for items without any type
UNKNOWN_TYPE = "UnknownType"

# Context applied to RDFa and Microdata items without an explicit vocabulary
DEFAULT_CONTEXT = "https://schema.org"


# =============================================================================
# RDFa
# =============================================================================

# Prefixes every RDFa document starts with, before `prefix` declarations
DEFAULT_NAMESPACES = {
    "": "http://schema.org/",
    "schema": "http://schema.org/",
    "og": "http://ogp.me/ns#",
    "fb": "http://ogp.me/ns/fb#",
    "rdfs": "http://www.w3.org/2000/01/rdf-schema#",
}


# =============================================================================
# Element Values
# =============================================================================

# Elements whose value is their resolved `href`
HREF_TAGS = frozenset({"a", "area", "link"})

# Elements whose value is their resolved `src`
SRC_TAGS = frozenset({"audio", "embed", "iframe", "img", "source", "track", "video"})

# Elements whose value is their `value` attribute, falling back to text
VALUE_TAGS = frozenset({"data", "meter"})

JSONLD_MIME_TYPE = "application/ld+json"


# =============================================================================
# Engine Summary
# =============================================================================

# Types whose errors get their own summary warning, in reporting order
WATCHED_TYPES = (
    "Organization",
    "LocalBusiness",
    "Product",
    "BreadcrumbList",
    "Article",
    "BlogPosting",
    "FAQPage",
    "WebPage",
)

# Human readable format names for messages
FORMAT_DISPLAY_NAMES = {
    "jsonld": "JSON-LD",
    "microdata": "Microdata",
    "rdfa": "RDFa",
}


# =============================================================================
# Special Validators
# =============================================================================

PRODUCT_AVAILABILITY = frozenset({
    "https://schema.org/InStock",
    "https://schema.org/OutOfStock",
    "https://schema.org/PreOrder",
    "https://schema.org/Discontinued",
    "http://schema.org/InStock",
    "http://schema.org/OutOfStock",
    "http://schema.org/PreOrder",
    "http://schema.org/Discontinued",
})

# Any one of these counts as a standard product identifier
GTIN_PROPERTIES = ("gtin", "gtin8", "gtin12", "gtin13", "gtin14", "isbn", "mpn")

IMPORTANCE_ORDER = {"high": 0, "medium": 1, "low": 2}


# =============================================================================
# Analyzer
# =============================================================================

# Types suggested to pages that do not carry them yet
COMMON_SCHEMA_TYPES = (
    "Organization",
    "LocalBusiness",
    "Product",
    "Article",
    "BreadcrumbList",
    "FAQPage",
    "HowTo",
    "Recipe",
    "Event",
    "Person",
    "WebSite",
)

# Number of missing common types named in a single recommendation
SUGGESTED_TYPES_LIMIT = 3
