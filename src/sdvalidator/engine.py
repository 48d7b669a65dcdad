"""
Validation engine

Runs every extracted item through the schema validator and the matching
special validators, keeps per-format and per-type tallies, and turns them
into a score and a deterministic summary.
"""

import logging
import math
from collections import OrderedDict
from typing import Any, Iterable, List, Optional

from sdvalidator.config import ValidationThresholds, default_thresholds
from sdvalidator.constants import FORMAT_DISPLAY_NAMES, UNKNOWN_TYPE, WATCHED_TYPES
from sdvalidator.models import (
    AggregateStats,
    EngineResult,
    ExtractionError,
    IssueTally,
    ItemValidation,
    SemanticItem,
    SourceFormat,
    Summary,
    SummaryEntry,
    ValidationResult,
    coerce_item,
)
from sdvalidator.schema_registry import SchemaRegistry
from sdvalidator.schema_validator import SchemaValidator
from sdvalidator.special_validators import SpecialValidatorRegistry, default_special_validators

logger = logging.getLogger(__name__)


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def compute_score(stats: AggregateStats, thresholds: ValidationThresholds = default_thresholds) -> int:
    """Score 0-100 from the valid ratio minus capped error and warning penalties.

    Examples:
        10 items, 7 valid, 2 errors, 3 warnings -> 70 - 10 - 6 = 54
    """
    base = 100.0 * stats.valid_items / stats.total_items if stats.total_items > 0 else 0.0
    error_penalty = min(thresholds.error_penalty_cap, stats.total_errors * thresholds.error_penalty)
    warning_penalty = min(
        thresholds.warning_penalty_cap, stats.total_warnings * thresholds.warning_penalty
    )
    score = max(0.0, min(100.0, base - error_penalty - warning_penalty))
    return round_half_up(score)


def nesting_depth(item: Any, ceiling: int, depth: int = 0) -> int:
    """Deepest nested-item level below `item`, never exceeding `ceiling` + 1."""
    if not isinstance(item, SemanticItem) or depth > ceiling:
        return depth

    deepest = depth
    for value in item.properties.values():
        entries = value if isinstance(value, list) else [value]
        for entry in entries:
            if isinstance(entry, SemanticItem):
                deepest = max(deepest, nesting_depth(entry, ceiling, depth + 1))
    return deepest


def item_types(item: SemanticItem) -> List[str]:
    """Assigned types, or the UnknownType bucket."""
    types = [t for t in item.types if t]
    return types or [UNKNOWN_TYPE]


class ValidationEngine:
    """Validate a batch of extracted items.

    The engine holds configuration only; each validate_items call starts
    from fresh tallies.

    Args:
        registry: Schema table for the schema validator
        special_validators: Business-rule validators by type
        thresholds: Depth ceilings, penalties and summary thresholds
    """

    def __init__(
        self,
        registry: Optional[SchemaRegistry] = None,
        special_validators: Optional[SpecialValidatorRegistry] = None,
        thresholds: Optional[ValidationThresholds] = None,
    ):
        self.thresholds = thresholds or default_thresholds
        self.schema_validator = SchemaValidator.from_thresholds(self.thresholds, registry)
        self.special_validators = (
            special_validators
            if special_validators is not None
            else default_special_validators(self.thresholds)
        )

    @property
    def registry(self) -> SchemaRegistry:
        return self.schema_validator.registry

    def validate_items(self, items: Optional[Iterable[Any]]) -> EngineResult:
        """Validate items and aggregate statistics, score and summary.

        Args:
            items: SemanticItems, ExtractionError placeholders or JSON-LD-like
                dicts; None or empty yields a zeroed result

        Returns:
            EngineResult
        """
        result = EngineResult()
        items = self._as_list(items)

        if not items:
            logger.info("No structured data to validate")
            result.summary.errors.append(SummaryEntry(
                message="No structured data found to validate",
                code="no-structured-data",
            ))
            self._suggest_format_mix(result)
            return result

        stats = result.stats
        for index, raw in enumerate(items):
            entry = coerce_item(raw)
            stats.total_items += 1

            if isinstance(entry, ExtractionError):
                result.validation_results.append(self._record_placeholder(entry, index, stats))
            else:
                result.validation_results.append(self._validate_entry(entry, index, stats))

        result.score = compute_score(stats, self.thresholds)
        result.valid = stats.valid_items > 0 and stats.total_errors == 0
        self._build_summary(result)

        logger.info(
            f"Validated {stats.total_items} items: {stats.valid_items} valid, "
            f"{stats.total_errors} errors, {stats.total_warnings} warnings, score {result.score}"
        )
        return result

    @staticmethod
    def _as_list(items: Any) -> List[Any]:
        """Batch input as a list; anything that is not a batch counts as empty."""
        if items is None or isinstance(items, (str, bytes, dict)):
            return []
        try:
            return list(items)
        except TypeError:
            logger.warning(f"Ignoring non-iterable validation input of type {type(items).__name__}")
            return []

    def _record_placeholder(
        self, placeholder: ExtractionError, index: int, stats: AggregateStats
    ) -> ItemValidation:
        stats.total_errors += 1
        fmt = placeholder.format.value if placeholder.format is not None else None
        if fmt in stats.format_stats:
            stats.format_stats[fmt].items += 1
            stats.format_stats[fmt].errors += 1

        outcome = ValidationResult()
        outcome.add_error(placeholder.message, "extraction-error")
        return ItemValidation(index=index, format=fmt, types=[], result=outcome, item=placeholder)

    def _validate_entry(self, item: Any, index: int, stats: AggregateStats) -> ItemValidation:
        fmt = None
        if isinstance(item, SemanticItem) and item.source_format is not None:
            fmt = item.source_format.value
        types = item_types(item) if isinstance(item, SemanticItem) else [UNKNOWN_TYPE]

        if fmt in stats.format_stats:
            stats.format_stats[fmt].items += 1
        for type_name in types:
            stats.type_stats.setdefault(type_name, IssueTally()).items += 1

        outcome = self.schema_validator.validate(item)

        special = []
        if isinstance(item, SemanticItem):
            for validator in self.special_validators.validators_for(item.types):
                special_result = validator.validate(item)
                outcome.merge(special_result)
                special.append(special_result)

        if outcome.valid:
            stats.valid_items += 1

        n_errors = len(outcome.errors)
        n_warnings = len(outcome.warnings)
        stats.total_errors += n_errors
        stats.total_warnings += n_warnings

        if fmt in stats.format_stats:
            stats.format_stats[fmt].errors += n_errors
            stats.format_stats[fmt].warnings += n_warnings
        for type_name in types:
            stats.type_stats[type_name].errors += n_errors
            stats.type_stats[type_name].warnings += n_warnings

        return ItemValidation(
            index=index,
            format=fmt,
            types=types,
            result=outcome,
            item=item,
            special=special,
        )

    def _build_summary(self, result: EngineResult) -> None:
        self._summarize_error_codes(result)
        self._summarize_formats(result)
        self._summarize_missing_required(result)
        self._summarize_types(result)
        self._suggest_format_mix(result)
        self._suggest_performance(result)

    def _summarize_error_codes(self, result: EngineResult) -> None:
        codes = {error.code for entry in result.validation_results for error in entry.errors}
        if codes:
            result.summary.errors.append(SummaryEntry(
                message=f"Found {len(codes)} distinct error types",
                code="multiple-error-types",
                count=len(codes),
            ))

    def _summarize_formats(self, result: EngineResult) -> None:
        for fmt, tally in result.stats.format_stats.items():
            if tally.items > 0 and tally.errors > 0:
                result.summary.errors.append(SummaryEntry(
                    message=f"{FORMAT_DISPLAY_NAMES.get(fmt, fmt)} produced {tally.errors} errors",
                    code=f"{fmt}-errors",
                    format=fmt,
                    count=tally.errors,
                ))

    def _summarize_missing_required(self, result: EngineResult) -> None:
        missing: "OrderedDict[str, List[str]]" = OrderedDict()
        for entry in result.validation_results:
            for error in entry.errors:
                if error.code != "missing-required-property" or not error.type or not error.property:
                    continue
                props = missing.setdefault(error.type, [])
                if error.property not in props:
                    props.append(error.property)

        for type_name, props in missing.items():
            result.summary.warnings.append(SummaryEntry(
                message=f"'{type_name}' is missing required properties: {', '.join(props)}",
                code="missing-required-property",
                type=type_name,
                properties=props,
            ))

    def _summarize_types(self, result: EngineResult) -> None:
        type_stats = result.stats.type_stats
        for type_name in WATCHED_TYPES:
            tally = type_stats.get(type_name)
            if tally is not None and tally.items > 0 and tally.errors > 0:
                result.summary.warnings.append(SummaryEntry(
                    message=f"{type_name} items have {tally.errors} errors",
                    code=f"{type_name.lower()}-errors",
                    type=type_name,
                    count=tally.errors,
                ))

        unknown = type_stats.get(UNKNOWN_TYPE)
        if unknown is not None and unknown.items > 0:
            result.summary.warnings.append(SummaryEntry(
                message=f"{unknown.items} structured data items have no type",
                code="unknown-type-items",
                count=unknown.items,
            ))

    def _suggest_format_mix(self, result: EngineResult) -> None:
        counts = {
            fmt: tally.items for fmt, tally in result.stats.format_stats.items() if tally.items > 0
        }
        total = sum(counts.values())
        jsonld = counts.get(SourceFormat.JSONLD.value, 0)
        suggestions = result.summary.suggestions

        if total == 0:
            suggestions.append(SummaryEntry(
                message="Add structured data to qualify for rich results; JSON-LD is recommended",
                code="add-structured-data",
            ))
        elif len(counts) > 1 and 0 < jsonld < total / 2:
            suggestions.append(SummaryEntry(
                message="Several structured data formats are mixed; consolidate on JSON-LD",
                code="use-jsonld-format",
            ))
        elif jsonld == 0 and (
            counts.get(SourceFormat.MICRODATA.value, 0) > 0 or counts.get(SourceFormat.RDFA.value, 0) > 0
        ):
            suggestions.append(SummaryEntry(
                message="JSON-LD is not used; search engines recommend the JSON-LD format",
                code="consider-jsonld-format",
            ))

    def _suggest_performance(self, result: EngineResult) -> None:
        thresholds = self.thresholds
        suggestions = result.summary.suggestions

        if result.stats.total_items > thresholds.many_items_threshold:
            suggestions.append(SummaryEntry(
                message="There are many structured data items; remove duplicates and keep only what is needed",
                code="optimize-structured-data-count",
            ))

        deepest = max(
            (
                nesting_depth(entry.item, thresholds.max_validation_depth)
                for entry in result.validation_results
            ),
            default=0,
        )
        if deepest > thresholds.deep_nesting_threshold:
            suggestions.append(SummaryEntry(
                message="Some structured data is deeply nested; a flatter structure is easier to parse",
                code="reduce-nesting-depth",
            ))


def validate_items(items: Optional[Iterable[Any]], **kwargs) -> EngineResult:
    """Validate items with a fresh ValidationEngine (kwargs go to its constructor)."""
    return ValidationEngine(**kwargs).validate_items(items)
