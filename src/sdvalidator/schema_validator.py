"""
Schema validator

Validates one SemanticItem against an injected SchemaRegistry:

1. structure (context, type, emptiness)
2. required/recommended properties per known type
3. expected property kinds
4. unknown properties
5. nested typed items, recursively, with path-prefixed issues
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

from sdvalidator.config import ValidationThresholds, default_thresholds
from sdvalidator.models import SemanticItem, ValidationResult
from sdvalidator.schema_registry import SchemaRegistry, default_registry
from sdvalidator.values import matches_any

logger = logging.getLogger(__name__)


class SchemaValidator:
    """Validate items against a schema registry.

    Args:
        registry: Type table; defaults to the built-in schema.org table
        max_depth: Nested items validated below the root before giving up
    """

    def __init__(self, registry: Optional[SchemaRegistry] = None, max_depth: Optional[int] = None):
        self.registry = registry if registry is not None else default_registry()
        self.max_depth = (
            max_depth if max_depth is not None else default_thresholds.max_validation_depth
        )

    @classmethod
    def from_thresholds(
        cls, thresholds: ValidationThresholds, registry: Optional[SchemaRegistry] = None
    ) -> "SchemaValidator":
        return cls(registry=registry, max_depth=thresholds.max_validation_depth)

    def validate(self, item: Any) -> ValidationResult:
        """Validate one item and everything nested in it.

        Args:
            item: SemanticItem, or a JSON-LD-like mapping

        Returns:
            ValidationResult with path-located errors and warnings
        """
        if isinstance(item, dict):
            item = SemanticItem.from_dict(item)
        if not isinstance(item, SemanticItem):
            result = ValidationResult()
            result.add_error("Structured data is not a valid item", "invalid-data")
            return result

        return self._validate(item, depth=0)

    def _validate(self, item: SemanticItem, depth: int) -> ValidationResult:
        result = ValidationResult()
        known_types = [t for t in item.types if t in self.registry]

        self._check_structure(item, result, depth)
        for type_name in known_types:
            self._check_required(item, type_name, result)

        if known_types:
            expected = self.registry.property_types_for(known_types)
            self._check_property_kinds(item, known_types, expected, result)
            self._check_unknown_properties(item, known_types, expected, result)

        self._check_nested(item, result, depth)
        return result

    def _check_structure(self, item: SemanticItem, result: ValidationResult, depth: int) -> None:
        # Nested items share their parent's context
        if depth == 0 and not item.context:
            result.add_warning("@context is missing", "missing-context")

        if not item.has_type:
            result.add_error(
                "@type is missing; most structured data needs a schema.org type",
                "missing-type",
            )
        else:
            for type_name in item.types:
                if type_name not in self.registry:
                    result.add_warning(
                        f"'{type_name}' is not a known schema.org type",
                        "unknown-type",
                        type=type_name,
                    )

        if not item.has_properties:
            result.add_error("Structured data has no properties", "empty-schema")

    def _check_required(self, item: SemanticItem, type_name: str, result: ValidationResult) -> None:
        definition = self.registry.get(type_name)

        for prop in definition.required:
            if prop not in item.properties:
                result.add_error(
                    f"'{type_name}' is missing required property '{prop}'",
                    "missing-required-property",
                    type=type_name,
                    property=prop,
                )

        for prop in definition.recommended:
            if prop not in item.properties:
                result.add_warning(
                    f"'{type_name}' is missing recommended property '{prop}'",
                    "missing-recommended-property",
                    type=type_name,
                    property=prop,
                )

    def _owner_type(self, prop: str, known_types: List[str]) -> str:
        """First assigned type that declares `prop`."""
        for type_name in known_types:
            if prop in self.registry.property_types(type_name):
                return type_name
        return known_types[0]

    def _check_property_kinds(
        self,
        item: SemanticItem,
        known_types: List[str],
        expected: Dict[str, Tuple[str, ...]],
        result: ValidationResult,
    ) -> None:
        for prop, value in item.properties.items():
            kinds = expected.get(prop)
            if not kinds:
                continue

            values = value if isinstance(value, list) else [value]
            for entry in values:
                if matches_any(entry, kinds):
                    continue
                owner = self._owner_type(prop, known_types)
                result.add_warning(
                    f"'{owner}' property '{prop}' does not match the expected types "
                    f"({', '.join(kinds)})",
                    "invalid-property-type",
                    type=owner,
                    property=prop,
                    expected=kinds,
                )

    def _check_unknown_properties(
        self,
        item: SemanticItem,
        known_types: List[str],
        expected: Dict[str, Tuple[str, ...]],
        result: ValidationResult,
    ) -> None:
        for prop in item.properties:
            if prop not in expected:
                result.add_warning(
                    f"'{prop}' is not a standard property of '{known_types[0]}'",
                    "unknown-property",
                    type=known_types[0],
                    property=prop,
                )

    def _check_nested(self, item: SemanticItem, result: ValidationResult, depth: int) -> None:
        for prop, value in item.properties.items():
            if isinstance(value, SemanticItem):
                self._descend(value, f"{prop}.", result, depth)
            elif isinstance(value, list):
                for i, entry in enumerate(value):
                    if isinstance(entry, SemanticItem):
                        self._descend(entry, f"{prop}[{i}].", result, depth)

    def _descend(self, nested: SemanticItem, prefix: str, result: ValidationResult, depth: int) -> None:
        # Untyped nested items are plain value holders
        if not nested.has_type:
            return

        if depth + 1 > self.max_depth:
            logger.debug(f"Validation depth ceiling {self.max_depth} reached at {prefix}")
            result.add_warning(
                f"Nesting deeper than {self.max_depth} levels was not validated",
                "max-depth-exceeded",
                path=prefix,
            )
            return

        result.merge(self._validate(nested, depth + 1), prefix)


def validate_item(item: Any, registry: Optional[SchemaRegistry] = None) -> ValidationResult:
    """Validate a single item with a fresh SchemaValidator."""
    return SchemaValidator(registry).validate(item)
