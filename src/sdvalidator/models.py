"""Data models for structured data extraction and validation."""

import weakref
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Optional, Union

from sdvalidator.constants import (
    CONTEXT_KEY,
    ERROR_MARKER,
    FORMAT_MARKER,
    ID_KEY,
    INDEX_MARKER,
    MESSAGE_MARKER,
    RAW_MARKER,
    TYPE_KEY,
    VALUE_KEY,
)


class SourceFormat(str, Enum):
    """Markup syntax an item was extracted from."""

    RDFA = "rdfa"
    MICRODATA = "microdata"
    JSONLD = "jsonld"

    @classmethod
    def parse(cls, value: Any) -> Optional["SourceFormat"]:
        """Accept enum members, canonical names and the `json-ld` spelling."""
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return None
        normalized = value.strip().lower().replace("-", "")
        for member in cls:
            if member.value == normalized:
                return member
        return None


def _make_ref(node: Any) -> Optional[weakref.ref]:
    if node is None:
        return None
    try:
        return weakref.ref(node)
    except TypeError:
        # Some node types (e.g. plain strings) cannot be weakly referenced
        return None


@dataclass(frozen=True)
class SemanticItem:
    """One structured data record, independent of its source syntax."""

    types: tuple[str, ...] = ()
    properties: dict[str, Any] = field(default_factory=dict)
    source_format: Optional[SourceFormat] = None
    id: Optional[str] = None
    context: Any = None
    index: int = 0
    source_ref: Optional[weakref.ref] = field(default=None, repr=False, compare=False)

    def __post_init__(self):
        # Type names are distinct, first occurrence wins
        object.__setattr__(self, "types", tuple(dict.fromkeys(self.types)))

    @property
    def source_location(self) -> Any:
        """The originating markup node, if it is still alive."""
        return self.source_ref() if self.source_ref is not None else None

    @property
    def has_type(self) -> bool:
        return any(t for t in self.types)

    @property
    def has_properties(self) -> bool:
        return bool(self.properties)

    @property
    def is_retainable(self) -> bool:
        """Items with neither a type nor a property are dropped silently."""
        return self.has_type or self.has_properties

    def get(self, name: str, default: Any = None) -> Any:
        return self.properties.get(name, default)

    def to_dict(self) -> dict:
        """Serialize into the JSON-LD-like shape consumed by reports."""
        data: dict[str, Any] = {}
        if self.context is not None:
            data[CONTEXT_KEY] = self.context
        if self.types:
            data[TYPE_KEY] = self.types[0] if len(self.types) == 1 else list(self.types)
        if self.id is not None:
            data[ID_KEY] = self.id
        for name, value in self.properties.items():
            data[name] = _serialize_value(value)
        if self.source_format is not None:
            data[FORMAT_MARKER] = self.source_format.value
            data[INDEX_MARKER] = self.index
        return data

    @classmethod
    def from_dict(
        cls,
        data: dict,
        source_format: Optional[SourceFormat] = None,
        index: int = 0,
        source_location: Any = None,
        max_depth: int = 32,
    ) -> "SemanticItem":
        """Build an item from a JSON-LD-like mapping.

        `@type`, `@id` and `@context` become item metadata; other `@`-keywords
        and `_`-prefixed markers are not properties. Nested mappings become
        nested items down to `max_depth`.

        Args:
            data: Mapping to convert
            source_format: Format recorded on the item (and nested items)
            index: Source island index
            source_location: Originating markup node
            max_depth: Nesting ceiling for nested item conversion

        Returns:
            SemanticItem
        """
        if source_format is None:
            source_format = SourceFormat.parse(data.get(FORMAT_MARKER))
        if INDEX_MARKER in data and isinstance(data[INDEX_MARKER], int):
            index = data[INDEX_MARKER]
        return _item_from_mapping(data, source_format, index, _make_ref(source_location), 0, max_depth)


def normalize_types(value: Any) -> tuple[str, ...]:
    """Turn a `@type` value (string, list or missing) into a tuple."""
    if value is None:
        return ()
    if isinstance(value, (list, tuple)):
        return tuple(dict.fromkeys(str(t) for t in value if t not in (None, "")))
    if value == "":
        return ()
    return (str(value),)


def _item_from_mapping(
    data: dict,
    source_format: Optional[SourceFormat],
    index: int,
    source_ref: Optional[weakref.ref],
    depth: int,
    max_depth: int,
) -> SemanticItem:
    properties: dict[str, Any] = {}
    for key, value in data.items():
        if not isinstance(key, str) or key.startswith("@") or key.startswith("_"):
            continue
        properties[key] = _value_from_json(value, source_format, index, source_ref, depth, max_depth)

    item_id = data.get(ID_KEY)
    return SemanticItem(
        types=normalize_types(data.get(TYPE_KEY)),
        properties=properties,
        source_format=source_format,
        id=str(item_id) if item_id is not None else None,
        context=data.get(CONTEXT_KEY),
        index=index,
        source_ref=source_ref,
    )


def _value_from_json(
    value: Any,
    source_format: Optional[SourceFormat],
    index: int,
    source_ref: Optional[weakref.ref],
    depth: int,
    max_depth: int,
) -> Any:
    if isinstance(value, SemanticItem):
        return value
    if isinstance(value, dict):
        if VALUE_KEY in value:
            return value[VALUE_KEY]
        if depth + 1 > max_depth:
            # Beyond the ceiling only identity survives
            return SemanticItem(
                types=normalize_types(value.get(TYPE_KEY)),
                source_format=source_format,
                id=value.get(ID_KEY),
                index=index,
                source_ref=source_ref,
            )
        return _item_from_mapping(value, source_format, index, source_ref, depth + 1, max_depth)
    if isinstance(value, (list, tuple)):
        return [
            _value_from_json(v, source_format, index, source_ref, depth, max_depth)
            for v in value
        ]
    return value


def _serialize_value(value: Any) -> Any:
    if isinstance(value, SemanticItem):
        return value.to_dict()
    if isinstance(value, list):
        return [_serialize_value(v) for v in value]
    return value


@dataclass(frozen=True)
class ExtractionError:
    """Placeholder for a markup island that failed to parse."""

    format: Optional[SourceFormat]
    index: int
    message: str
    raw_markup: str = ""
    source_ref: Optional[weakref.ref] = field(default=None, repr=False, compare=False)

    @property
    def source_location(self) -> Any:
        return self.source_ref() if self.source_ref is not None else None

    def to_dict(self) -> dict:
        return {
            ERROR_MARKER: True,
            FORMAT_MARKER: self.format.value if self.format is not None else None,
            INDEX_MARKER: self.index,
            MESSAGE_MARKER: self.message,
            RAW_MARKER: self.raw_markup,
        }

    @classmethod
    def create(
        cls,
        source_format: Optional[SourceFormat],
        index: int,
        message: str,
        raw_markup: str = "",
        source_location: Any = None,
    ) -> "ExtractionError":
        return cls(
            format=source_format,
            index=index,
            message=message,
            raw_markup=raw_markup,
            source_ref=_make_ref(source_location),
        )

    @classmethod
    def from_dict(cls, data: dict) -> "ExtractionError":
        """Coerce a `{"_error": true, ...}` marker mapping."""
        index = data.get(INDEX_MARKER)
        return cls(
            format=SourceFormat.parse(data.get(FORMAT_MARKER)),
            index=index if isinstance(index, int) else 0,
            message=str(data.get(MESSAGE_MARKER) or "Extraction failed"),
            raw_markup=str(data.get(RAW_MARKER) or ""),
        )


def coerce_item(value: Any) -> Any:
    """Turn JSON-LD-like mappings into SemanticItem or ExtractionError.

    Items and placeholders pass through; other values are returned as-is.
    """
    if isinstance(value, (SemanticItem, ExtractionError)):
        return value
    if isinstance(value, dict):
        if value.get(ERROR_MARKER):
            return ExtractionError.from_dict(value)
        return SemanticItem.from_dict(value)
    return value


ExtractedItem = Union[SemanticItem, ExtractionError]


@dataclass(frozen=True)
class ValidationIssue:
    """A single error or warning located by its path from the item root."""

    # Declared before the `property` field, which shadows the builtin below it
    @property
    def location(self) -> str:
        """Path plus property name, e.g. `offers[1].price`."""
        return f"{self.path}{self.property}" if self.property else self.path

    message: str
    code: str
    path: str = ""
    type: Optional[str] = None
    property: Optional[str] = None
    expected: Optional[tuple[str, ...]] = None

    def with_prefix(self, prefix: str) -> "ValidationIssue":
        return replace(self, path=f"{prefix}{self.path}")

    def to_dict(self) -> dict:
        data: dict[str, Any] = {
            "message": self.message,
            "code": self.code,
            "path": self.path,
        }
        if self.type is not None:
            data["type"] = self.type
        if self.property is not None:
            data["property"] = self.property
        if self.expected is not None:
            data["expectedTypes"] = list(self.expected)
        return data


@dataclass
class ValidationResult:
    """Errors and warnings for one item; valid iff there are no errors."""

    errors: list[ValidationIssue] = field(default_factory=list)
    warnings: list[ValidationIssue] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.errors

    def add_error(self, message: str, code: str, **details) -> None:
        self.errors.append(ValidationIssue(message=message, code=code, **details))

    def add_warning(self, message: str, code: str, **details) -> None:
        self.warnings.append(ValidationIssue(message=message, code=code, **details))

    def merge(self, other: "ValidationResult", prefix: str = "") -> None:
        """Append another result's issues, prefixing their paths."""
        self.errors.extend(issue.with_prefix(prefix) for issue in other.errors)
        self.warnings.extend(issue.with_prefix(prefix) for issue in other.warnings)

    def to_dict(self) -> dict:
        return {
            "valid": self.valid,
            "errors": [e.to_dict() for e in self.errors],
            "warnings": [w.to_dict() for w in self.warnings],
        }


@dataclass
class Recommendation:
    """A prioritized improvement hint."""

    message: str
    importance: str = "medium"  # high/medium/low
    code: Optional[str] = None
    schema_type: Optional[str] = None

    def to_dict(self) -> dict:
        data: dict[str, Any] = {"message": self.message, "importance": self.importance}
        if self.code is not None:
            data["code"] = self.code
        if self.schema_type is not None:
            data["schemaType"] = self.schema_type
        return data


@dataclass
class SpecialValidationResult(ValidationResult):
    """Business-rule validation output for one item of a special type."""

    schema_type: str = ""
    stats: dict = field(default_factory=dict)
    recommendations: list[Recommendation] = field(default_factory=list)

    def to_dict(self) -> dict:
        data = super().to_dict()
        data["schemaType"] = self.schema_type
        data["stats"] = self.stats
        data["recommendations"] = [r.to_dict() for r in self.recommendations]
        return data


@dataclass
class IssueTally:
    """Item, error and warning counts for one format or type bucket."""

    items: int = 0
    errors: int = 0
    warnings: int = 0

    def to_dict(self) -> dict:
        return {"items": self.items, "errors": self.errors, "warnings": self.warnings}


@dataclass
class AggregateStats:
    """Running tallies across one validation pass."""

    total_items: int = 0
    valid_items: int = 0
    total_errors: int = 0
    total_warnings: int = 0
    format_stats: dict[str, IssueTally] = field(
        default_factory=lambda: {fmt.value: IssueTally() for fmt in SourceFormat}
    )
    type_stats: dict[str, IssueTally] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "totalItems": self.total_items,
            "validItems": self.valid_items,
            "totalErrors": self.total_errors,
            "totalWarnings": self.total_warnings,
            "formatStats": {k: v.to_dict() for k, v in self.format_stats.items()},
            "typeStats": {k: v.to_dict() for k, v in self.type_stats.items()},
        }


@dataclass
class ItemValidation:
    """Validation outcome of one engine input."""

    index: int
    format: Optional[str]
    types: list[str]
    result: ValidationResult
    item: Any
    special: list[SpecialValidationResult] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return self.result.valid

    @property
    def errors(self) -> list[ValidationIssue]:
        return self.result.errors

    @property
    def warnings(self) -> list[ValidationIssue]:
        return self.result.warnings

    def to_dict(self) -> dict:
        if isinstance(self.item, (SemanticItem, ExtractionError)):
            item = self.item.to_dict()
        else:
            item = self.item
        data = {
            "index": self.index,
            "format": self.format,
            "types": list(self.types),
            "valid": self.valid,
            "errors": [e.to_dict() for e in self.errors],
            "warnings": [w.to_dict() for w in self.warnings],
            "item": item,
        }
        if self.special:
            data["special"] = [s.to_dict() for s in self.special]
        return data


@dataclass
class SummaryEntry:
    """One line of the engine summary."""

    message: str
    code: str
    count: Optional[int] = None
    format: Optional[str] = None
    type: Optional[str] = None
    properties: Optional[list[str]] = None

    def to_dict(self) -> dict:
        data: dict[str, Any] = {"message": self.message, "code": self.code}
        for key in ("count", "format", "type", "properties"):
            value = getattr(self, key)
            if value is not None:
                data[key] = value
        return data


@dataclass
class Summary:
    """Deterministic issue summary of a validation pass."""

    errors: list[SummaryEntry] = field(default_factory=list)
    warnings: list[SummaryEntry] = field(default_factory=list)
    suggestions: list[SummaryEntry] = field(default_factory=list)

    def codes(self) -> list[str]:
        return [e.code for e in self.errors + self.warnings + self.suggestions]

    def to_dict(self) -> dict:
        return {
            "errors": [e.to_dict() for e in self.errors],
            "warnings": [w.to_dict() for w in self.warnings],
            "suggestions": [s.to_dict() for s in self.suggestions],
        }


@dataclass
class EngineResult:
    """Aggregated output of ValidationEngine.validate_items."""

    valid: bool = False
    score: int = 0
    validation_results: list[ItemValidation] = field(default_factory=list)
    stats: AggregateStats = field(default_factory=AggregateStats)
    summary: Summary = field(default_factory=Summary)

    def to_dict(self) -> dict:
        return {
            "valid": self.valid,
            "score": self.score,
            "validationResults": [r.to_dict() for r in self.validation_results],
            "stats": self.stats.to_dict(),
            "summary": self.summary.to_dict(),
        }
