"""Structured data (JSON-LD, Microdata, RDFa) extractor and validator."""

__version__ = "0.1.0"

from sdvalidator.markup import MarkupDocument, ElementNode, parse_html
from sdvalidator.extractors import (
    JSONLDExtractor,
    MicrodataExtractor,
    RDFaExtractor,
    extract_all,
    extract_by_format,
)
from sdvalidator.schema_registry import (
    SchemaRegistry,
    TypeDefinition,
    default_registry,
    load_registry,
)
from sdvalidator.schema_validator import SchemaValidator, validate_item
from sdvalidator.special_validators import SpecialValidatorRegistry, default_special_validators
from sdvalidator.engine import ValidationEngine, compute_score, validate_items
from sdvalidator.analyzer import AnalysisReport, StructuredDataAnalyzer, analyze_html
from sdvalidator.models import (
    SemanticItem,
    ExtractionError,
    SourceFormat,
    ValidationIssue,
    ValidationResult,
    EngineResult,
    Recommendation,
)
from sdvalidator.config import ValidationThresholds, default_thresholds, settings
from sdvalidator.exceptions import MarkupError, RegistryLoadError, StructuredDataError

__all__ = [
    "MarkupDocument",
    "ElementNode",
    "parse_html",
    "JSONLDExtractor",
    "MicrodataExtractor",
    "RDFaExtractor",
    "extract_all",
    "extract_by_format",
    "SchemaRegistry",
    "TypeDefinition",
    "default_registry",
    "load_registry",
    "SchemaValidator",
    "validate_item",
    "SpecialValidatorRegistry",
    "default_special_validators",
    "ValidationEngine",
    "compute_score",
    "validate_items",
    "AnalysisReport",
    "StructuredDataAnalyzer",
    "analyze_html",
    "SemanticItem",
    "ExtractionError",
    "SourceFormat",
    "ValidationIssue",
    "ValidationResult",
    "EngineResult",
    "Recommendation",
    "ValidationThresholds",
    "default_thresholds",
    "settings",
    "MarkupError",
    "RegistryLoadError",
    "StructuredDataError",
]
