"""Base class and helpers for business-rule validators of specific types."""

import copy
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from sdvalidator.config import ValidationThresholds, default_thresholds
from sdvalidator.models import (
    Recommendation,
    SemanticItem,
    SpecialValidationResult,
    ValidationIssue,
)

logger = logging.getLogger(__name__)


def is_blank(value: Any) -> bool:
    """Missing for business-rule purposes: None, empty string or empty list.

    Zero is a real value (a free offer has price 0).
    """
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple)):
        return len(value) == 0
    return False


def as_list(value: Any) -> List[Any]:
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]


def first_value(value: Any) -> Any:
    """First entry of a list value, or the value itself."""
    if isinstance(value, (list, tuple)):
        return value[0] if value else None
    return value


def text_value(value: Any) -> str:
    """Best-effort text of a property value (first entry of a list)."""
    value = first_value(value)
    if value is None or isinstance(value, SemanticItem):
        return ""
    return str(value)


def is_http_reference(url: str) -> bool:
    """Whether a URL is absolute in the http(s) sense."""
    return url.strip().lower().startswith(("http://", "https://"))


def has_type(value: Any, type_name: str) -> bool:
    return isinstance(value, SemanticItem) and type_name in value.types


def list_path(prop: str, index: int, is_list: bool) -> str:
    """`prop[i].` for array entries, `prop.` for a scalar value."""
    return f"{prop}[{index}]." if is_list else f"{prop}."


class SpecialValidator(ABC):
    """Validate one item of `schema_type` against business rules.

    Instances keep per-item errors, warnings and cumulative stats; the
    result is returned as a SpecialValidationResult.
    """

    schema_type: str = ""
    invalid_type_code: str = ""

    def __init__(self, thresholds: Optional[ValidationThresholds] = None):
        self.thresholds = thresholds or default_thresholds
        self.errors: List[ValidationIssue] = []
        self.warnings: List[ValidationIssue] = []
        self.stats: Dict[str, Any] = self.initial_stats()

    @abstractmethod
    def initial_stats(self) -> Dict[str, Any]:
        """Fresh per-field tallies."""

    @abstractmethod
    def check(self, item: SemanticItem) -> None:
        """Run the type's rules, recording issues and stats."""

    @abstractmethod
    def recommendations(self) -> List[Recommendation]:
        """Recommendations derived from the stats, in priority order."""

    def validate(self, item: Any) -> SpecialValidationResult:
        """Validate one item.

        Args:
            item: SemanticItem expected to carry `schema_type`

        Returns:
            SpecialValidationResult with stats and recommendations
        """
        self.errors = []
        self.warnings = []

        if not has_type(item, self.schema_type):
            self.add_error(
                f"Item must be of type {self.schema_type}",
                self.invalid_type_code,
            )
            return self.results()

        logger.debug(f"{self.schema_type} validation started")
        self.check(item)
        return self.results()

    def add_error(self, message: str, code: str, **details) -> None:
        self.errors.append(ValidationIssue(message=message, code=code, **details))

    def add_warning(self, message: str, code: str, **details) -> None:
        self.warnings.append(ValidationIssue(message=message, code=code, **details))

    def recommend(self, recommendations: List[Recommendation], message: str, importance: str) -> None:
        recommendations.append(
            Recommendation(message=message, importance=importance, schema_type=self.schema_type)
        )

    def results(self) -> SpecialValidationResult:
        return SpecialValidationResult(
            errors=list(self.errors),
            warnings=list(self.warnings),
            schema_type=self.schema_type,
            stats=copy.deepcopy(self.stats),
            recommendations=self.recommendations(),
        )
