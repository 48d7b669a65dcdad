"""Business-rule validators keyed by schema type."""

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Optional, Type

from sdvalidator.config import ValidationThresholds, default_thresholds
from sdvalidator.constants import IMPORTANCE_ORDER
from sdvalidator.models import Recommendation, SemanticItem, ValidationIssue
from sdvalidator.special_validators.base import SpecialValidator
from sdvalidator.special_validators.breadcrumb import BreadcrumbValidator
from sdvalidator.special_validators.faq import FAQValidator
from sdvalidator.special_validators.product import ProductValidator

logger = logging.getLogger(__name__)

DEFAULT_VALIDATORS: Mapping[str, Type[SpecialValidator]] = MappingProxyType({
    "BreadcrumbList": BreadcrumbValidator,
    "FAQPage": FAQValidator,
    "Product": ProductValidator,
})


def sort_recommendations(recommendations: List[Recommendation]) -> List[Recommendation]:
    """Stable sort by importance (high, medium, low)."""
    return sorted(recommendations, key=lambda r: IMPORTANCE_ORDER.get(r.importance, len(IMPORTANCE_ORDER)))


def dedupe_recommendations(recommendations: Iterable[Recommendation]) -> List[Recommendation]:
    """Drop repeats of the same message for the same type, keeping the first."""
    seen = set()
    unique = []
    for recommendation in recommendations:
        key = (recommendation.message, recommendation.schema_type)
        if key not in seen:
            seen.add(key)
            unique.append(recommendation)
    return unique


@dataclass
class TypeReport:
    """Special validation tallies for one schema type."""

    total: int = 0
    valid: int = 0
    errors: List[ValidationIssue] = field(default_factory=list)
    warnings: List[ValidationIssue] = field(default_factory=list)
    stats: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "total": self.total,
            "valid": self.valid,
            "errors": [e.to_dict() for e in self.errors],
            "warnings": [w.to_dict() for w in self.warnings],
            "stats": self.stats,
        }


@dataclass
class SpecialValidationReport:
    """Aggregate of special validation across many items."""

    validated_items: int = 0
    valid_items: int = 0
    invalid_items: int = 0
    by_type: Dict[str, TypeReport] = field(default_factory=dict)
    errors: List[ValidationIssue] = field(default_factory=list)
    warnings: List[ValidationIssue] = field(default_factory=list)
    recommendations: List[Recommendation] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "validatedItems": self.validated_items,
            "validItems": self.valid_items,
            "invalidItems": self.invalid_items,
            "byType": {k: v.to_dict() for k, v in self.by_type.items()},
            "errors": [e.to_dict() for e in self.errors],
            "warnings": [w.to_dict() for w in self.warnings],
            "recommendations": [r.to_dict() for r in self.recommendations],
        }


class SpecialValidatorRegistry:
    """Map schema type names to business-rule validator classes.

    Args:
        validators: Type name to SpecialValidator subclass
        thresholds: Passed to every validator created
    """

    def __init__(
        self,
        validators: Optional[Mapping[str, Type[SpecialValidator]]] = None,
        thresholds: Optional[ValidationThresholds] = None,
    ):
        self._validators = MappingProxyType(dict(DEFAULT_VALIDATORS if validators is None else validators))
        self.thresholds = thresholds or default_thresholds

    @property
    def supported_types(self) -> List[str]:
        return list(self._validators)

    def has_validator_for(self, schema_type: str) -> bool:
        return schema_type in self._validators

    def create(self, schema_type: str) -> Optional[SpecialValidator]:
        """Fresh validator instance for `schema_type`, or None if unsupported."""
        validator_class = self._validators.get(schema_type)
        if validator_class is None:
            return None
        return validator_class(self.thresholds)

    def validators_for(self, types: Iterable[str]) -> List[SpecialValidator]:
        """One fresh validator per supported type, in the item's type order."""
        validators = []
        for schema_type in dict.fromkeys(types):
            validator = self.create(schema_type)
            if validator is not None:
                validators.append(validator)
        return validators

    def validate_items(self, items: Optional[Iterable[Any]]) -> SpecialValidationReport:
        """Run special validation over many items and aggregate the results.

        Items without a supported type are skipped. Recommendations are
        de-duplicated per type and sorted by importance.

        Args:
            items: SemanticItems (anything else is ignored)

        Returns:
            SpecialValidationReport
        """
        report = SpecialValidationReport()
        if not items:
            logger.debug("No items for special validation")
            return report

        recommendations: List[Recommendation] = []
        for item in items:
            if not isinstance(item, SemanticItem):
                continue

            for validator in self.validators_for(item.types):
                schema_type = validator.schema_type
                result = validator.validate(item)

                report.validated_items += 1
                if result.valid:
                    report.valid_items += 1
                else:
                    report.invalid_items += 1

                type_report = report.by_type.setdefault(schema_type, TypeReport(stats=result.stats))
                type_report.total += 1
                if result.valid:
                    type_report.valid += 1

                type_report.errors.extend(result.errors)
                type_report.warnings.extend(result.warnings)
                report.errors.extend(result.errors)
                report.warnings.extend(result.warnings)
                recommendations.extend(result.recommendations)

        report.recommendations = sort_recommendations(dedupe_recommendations(recommendations))

        logger.debug(
            f"Special validation finished: {report.valid_items} valid, "
            f"{report.invalid_items} invalid, {len(report.errors)} errors, "
            f"{len(report.warnings)} warnings"
        )
        return report


def default_special_validators(
    thresholds: Optional[ValidationThresholds] = None,
) -> SpecialValidatorRegistry:
    """Registry with the Product, BreadcrumbList and FAQPage validators."""
    return SpecialValidatorRegistry(thresholds=thresholds)


__all__ = [
    "BreadcrumbValidator",
    "DEFAULT_VALIDATORS",
    "FAQValidator",
    "ProductValidator",
    "SpecialValidationReport",
    "SpecialValidator",
    "SpecialValidatorRegistry",
    "TypeReport",
    "default_special_validators",
    "dedupe_recommendations",
    "sort_recommendations",
]
