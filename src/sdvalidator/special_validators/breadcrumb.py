"""Business rules for schema.org BreadcrumbList items."""

from typing import Any, Dict, List

from sdvalidator.models import Recommendation, SemanticItem
from sdvalidator.special_validators.base import (
    SpecialValidator,
    as_list,
    first_value,
    has_type,
    is_blank,
    is_http_reference,
    list_path,
    text_value,
)
from sdvalidator.values import parse_leading_int


def crumb_url(entry: SemanticItem) -> str:
    """URL of a breadcrumb entry: its `item` URL or id, else its own url."""
    target = first_value(entry.get("item"))
    if isinstance(target, SemanticItem):
        for candidate in (target.id, target.get("url")):
            if not is_blank(candidate):
                return text_value(candidate)
    elif not is_blank(target):
        return text_value(target)
    return text_value(entry.get("url"))


def crumb_name(entry: SemanticItem) -> str:
    name = text_value(entry.get("name"))
    if name.strip():
        return name
    target = first_value(entry.get("item"))
    if isinstance(target, SemanticItem):
        return text_value(target.get("name"))
    return ""


class BreadcrumbValidator(SpecialValidator):
    """Checks entry types, sequential positions, names and URLs."""

    schema_type = "BreadcrumbList"
    invalid_type_code = "invalid-breadcrumb-type"

    def initial_stats(self) -> Dict[str, Any]:
        return {
            "totalItems": 0,
            "validItems": 0,
            "itemPosition": {"correct": 0, "incorrect": 0, "missing": 0},
            "itemUrl": {"absolute": 0, "relative": 0, "missing": 0},
        }

    def check(self, item: SemanticItem) -> None:
        elements = item.get("itemListElement")
        if is_blank(elements):
            self.add_error(
                "BreadcrumbList needs an itemListElement list",
                "missing-item-list-element",
                property="itemListElement",
            )
            return

        entries = as_list(elements)
        is_list = isinstance(elements, list)
        self.stats["totalItems"] = len(entries)

        if len(entries) < self.thresholds.breadcrumb_min_items:
            self.add_warning(
                f"A breadcrumb trail needs at least {self.thresholds.breadcrumb_min_items} "
                f"entries to be useful",
                "insufficient-breadcrumb-items",
            )

        for index, entry in enumerate(entries):
            self._check_entry(entry, index, list_path("itemListElement", index, is_list))

        if not self.errors:
            self.stats["validItems"] = self.stats["totalItems"]

    def _check_entry(self, entry: Any, index: int, path: str) -> None:
        if not has_type(entry, "ListItem"):
            self.add_error(
                f"Breadcrumb entry #{index + 1} must be of type ListItem",
                "invalid-list-item-type",
                path=path,
            )
            return

        position = entry.get("position")
        if is_blank(position):
            self.stats["itemPosition"]["missing"] += 1
            self.add_error(
                f"Breadcrumb entry #{index + 1} has no position",
                "missing-position",
                path=path,
                property="position",
            )
        elif parse_leading_int(first_value(position)) != index + 1:
            self.stats["itemPosition"]["incorrect"] += 1
            self.add_error(
                f"Breadcrumb entry #{index + 1} has position {position}, expected {index + 1}",
                "incorrect-position",
                path=path,
                property="position",
            )
        else:
            self.stats["itemPosition"]["correct"] += 1

        if not crumb_name(entry).strip():
            self.add_warning(
                f"Breadcrumb entry #{index + 1} has no name",
                "missing-name",
                path=path,
                property="name",
            )

        url = crumb_url(entry).strip()
        if not url:
            self.stats["itemUrl"]["missing"] += 1
            self.add_warning(
                f"Breadcrumb entry #{index + 1} has no URL",
                "missing-url",
                path=path,
                property="item",
            )
        elif is_http_reference(url):
            self.stats["itemUrl"]["absolute"] += 1
        else:
            self.stats["itemUrl"]["relative"] += 1
            self.add_warning(
                f"Breadcrumb entry #{index + 1} uses a relative URL; prefer absolute URLs",
                "relative-url",
                path=path,
                property="item",
            )

    def recommendations(self) -> List[Recommendation]:
        stats = self.stats
        recommendations: List[Recommendation] = []

        if stats["itemPosition"]["incorrect"] > 0 or stats["itemPosition"]["missing"] > 0:
            self.recommend(
                recommendations,
                "Breadcrumb positions must start at 1 and increase by one per entry.",
                "high",
            )

        if stats["itemUrl"]["relative"] > 0:
            self.recommend(
                recommendations, "Use absolute URLs instead of relative URLs in breadcrumbs.", "medium"
            )

        if stats["itemUrl"]["missing"] > 0:
            self.recommend(recommendations, "Give every breadcrumb entry a URL.", "high")

        if stats["totalItems"] < self.thresholds.breadcrumb_min_items:
            self.recommend(
                recommendations,
                f"Build breadcrumbs from at least {self.thresholds.breadcrumb_min_items} entries "
                f"so the navigation path is clear.",
                "medium",
            )

        return recommendations
