"""Business rules for schema.org Product items."""

from typing import Any, Dict, List

from sdvalidator.constants import GTIN_PROPERTIES, PRODUCT_AVAILABILITY
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
from sdvalidator.values import parse_leading_float, parse_leading_int


def image_url(image: Any) -> str:
    """URL of an image entry: the string itself, or url/contentUrl/@id."""
    if isinstance(image, SemanticItem):
        for candidate in (image.get("url"), image.get("contentUrl"), image.id):
            if not is_blank(candidate):
                return text_value(candidate)
        return ""
    return text_value(image)


class ProductValidator(SpecialValidator):
    """Checks name, images, description, offers, rating, brand and identifiers."""

    schema_type = "Product"
    invalid_type_code = "invalid-product-type"

    def initial_stats(self) -> Dict[str, Any]:
        return {
            "totalProducts": 0,
            "validProducts": 0,
            "name": {"present": 0, "missing": 0},
            "image": {"present": 0, "missing": 0, "invalid": 0},
            "description": {"present": 0, "missing": 0, "tooShort": 0},
            "offers": {
                "present": 0,
                "missing": 0,
                "count": 0,
                "hasPrice": 0,
                "hasPriceCurrency": 0,
                "hasAvailability": 0,
                "invalidPrice": 0,
            },
            "aggregateRating": {"present": 0, "missing": 0, "valid": 0, "invalid": 0},
            "brand": {"present": 0, "missing": 0},
            "sku": {"present": 0, "missing": 0},
            "gtin": {"present": 0, "missing": 0},
        }

    def check(self, item: SemanticItem) -> None:
        self.stats["totalProducts"] += 1

        self._check_name(item)
        self._check_images(item)
        self._check_description(item)
        self._check_offers(item)
        self._check_rating(item)
        self._check_brand(item)
        self._check_identifiers(item)

        if not self.errors:
            self.stats["validProducts"] += 1

    def _check_name(self, item: SemanticItem) -> None:
        if is_blank(item.get("name")):
            self.stats["name"]["missing"] += 1
            self.add_error("Product has no name", "missing-name", property="name")
        else:
            self.stats["name"]["present"] += 1

    def _check_images(self, item: SemanticItem) -> None:
        images = as_list(item.get("image"))
        if is_blank(item.get("image")) or not images:
            self.stats["image"]["missing"] += 1
            self.add_error("Product has no image", "missing-image", property="image")
            return

        self.stats["image"]["present"] += 1
        is_list = isinstance(item.get("image"), list)

        for index, image in enumerate(images):
            url = image_url(image)
            path = list_path("image", index, is_list) if isinstance(image, SemanticItem) else ""
            if not url:
                self.stats["image"]["invalid"] += 1
                self.add_error(
                    f"Product image #{index + 1} has no URL", "missing-image-url", path=path
                )
            elif not is_http_reference(url):
                self.stats["image"]["invalid"] += 1
                self.add_warning(
                    f"Product image #{index + 1} uses a relative URL; prefer absolute URLs",
                    "relative-image-url",
                    path=path,
                )

    def _check_description(self, item: SemanticItem) -> None:
        description = item.get("description")
        if is_blank(description):
            self.stats["description"]["missing"] += 1
            self.add_warning(
                "Product has no description; adding one is recommended",
                "missing-description",
                property="description",
            )
            return

        self.stats["description"]["present"] += 1
        length = len(text_value(description))
        if length < self.thresholds.product_min_description_length:
            self.stats["description"]["tooShort"] += 1
            self.add_warning(
                f"Product description is too short ({length} characters)",
                "short-description",
                property="description",
            )

    def _check_offers(self, item: SemanticItem) -> None:
        offers_value = item.get("offers")
        if is_blank(offers_value):
            self.stats["offers"]["missing"] += 1
            self.add_error("Product has no offers", "missing-offers", property="offers")
            return

        self.stats["offers"]["present"] += 1
        is_list = isinstance(offers_value, list)

        for index, offer in enumerate(as_list(offers_value)):
            self.stats["offers"]["count"] += 1
            path = list_path("offers", index, is_list)
            properties = offer.properties if isinstance(offer, SemanticItem) else {}
            self._check_price(properties, index, path)
            self._check_availability(properties, index, path)

    def _check_price(self, offer: Dict[str, Any], index: int, path: str) -> None:
        price = offer.get("price")
        if is_blank(price):
            price = offer.get("lowPrice")

        if is_blank(price):
            self.add_error(
                f"Offer #{index + 1} has no price or lowPrice",
                "missing-price",
                path=path,
                property="price",
            )
        else:
            self.stats["offers"]["hasPrice"] += 1
            if parse_leading_float(first_value(price)) is None:
                self.stats["offers"]["invalidPrice"] += 1
                self.add_error(
                    f"Offer #{index + 1} price is not a valid number: {price}",
                    "invalid-price-format",
                    path=path,
                    property="price",
                )

        if is_blank(offer.get("priceCurrency")):
            self.add_error(
                f"Offer #{index + 1} has no priceCurrency",
                "missing-price-currency",
                path=path,
                property="priceCurrency",
            )
        else:
            self.stats["offers"]["hasPriceCurrency"] += 1

    def _check_availability(self, offer: Dict[str, Any], index: int, path: str) -> None:
        availability = offer.get("availability")
        if is_blank(availability):
            self.add_warning(
                f"Offer #{index + 1} has no availability",
                "missing-availability",
                path=path,
                property="availability",
            )
            return

        self.stats["offers"]["hasAvailability"] += 1
        if text_value(availability).strip() not in PRODUCT_AVAILABILITY:
            self.add_warning(
                f"Offer #{index + 1} availability is not a recognized value: {availability}",
                "invalid-availability",
                path=path,
                property="availability",
            )

    def _check_rating(self, item: SemanticItem) -> None:
        rating = item.get("aggregateRating")
        if is_blank(rating):
            self.stats["aggregateRating"]["missing"] += 1
            self.add_warning(
                "Product has no aggregateRating; ratings make search results stand out",
                "missing-rating",
                property="aggregateRating",
            )
            return

        self.stats["aggregateRating"]["present"] += 1
        path = "aggregateRating."

        if not has_type(rating, "AggregateRating"):
            self.stats["aggregateRating"]["invalid"] += 1
            self.add_error(
                "Product rating must be of type AggregateRating", "invalid-rating-type", path=path
            )
            return

        rating_value = rating.get("ratingValue")
        review_count = rating.get("reviewCount")
        if is_blank(rating_value) or is_blank(review_count):
            self.stats["aggregateRating"]["invalid"] += 1
            self.add_error(
                "Product rating needs both ratingValue and reviewCount",
                "incomplete-rating",
                path=path,
            )
            return

        self.stats["aggregateRating"]["valid"] += 1

        value = parse_leading_float(first_value(rating_value))
        if value is None or not (self.thresholds.rating_min <= value <= self.thresholds.rating_max):
            self.add_warning(
                f"Product rating value is out of range: {rating_value}",
                "invalid-rating-value",
                path=path,
                property="ratingValue",
            )

        count = parse_leading_int(first_value(review_count))
        if count is None or count <= 0:
            self.add_warning(
                f"Product review count is not valid: {review_count}",
                "invalid-review-count",
                path=path,
                property="reviewCount",
            )

    def _check_brand(self, item: SemanticItem) -> None:
        brand = item.get("brand")
        if is_blank(brand):
            self.stats["brand"]["missing"] += 1
            self.add_warning(
                "Product has no brand; adding brand information is recommended",
                "missing-brand",
                property="brand",
            )
            return

        self.stats["brand"]["present"] += 1
        if isinstance(brand, SemanticItem) and is_blank(brand.get("name")):
            self.add_warning("Product brand has no name", "missing-brand-name", path="brand.")

    def _check_identifiers(self, item: SemanticItem) -> None:
        if is_blank(item.get("sku")):
            self.stats["sku"]["missing"] += 1
            self.add_warning(
                "Product has no sku; a SKU helps identify the product",
                "missing-sku",
                property="sku",
            )
        else:
            self.stats["sku"]["present"] += 1

        if any(not is_blank(item.get(prop)) for prop in GTIN_PROPERTIES):
            self.stats["gtin"]["present"] += 1
        else:
            self.stats["gtin"]["missing"] += 1
            self.add_warning(
                "Product has no standard identifier such as GTIN, ISBN or MPN",
                "missing-product-identifier",
            )

    def recommendations(self) -> List[Recommendation]:
        stats = self.stats
        offers = stats["offers"]
        recommendations: List[Recommendation] = []

        if stats["name"]["missing"] > 0:
            self.recommend(recommendations, "Every product needs a name property.", "high")

        if stats["image"]["missing"] > 0 or stats["image"]["invalid"] > 0:
            self.recommend(
                recommendations,
                "Every product needs a valid image using an absolute URL (http:// or https://).",
                "high",
            )

        if offers["missing"] > 0:
            self.recommend(
                recommendations, "Every product needs price information in an offers property.", "high"
            )

        if offers["hasPrice"] < offers["count"] or offers["hasPriceCurrency"] < offers["count"]:
            self.recommend(
                recommendations, "Every offer needs both price and priceCurrency.", "high"
            )

        if stats["description"]["missing"] > 0 or stats["description"]["tooShort"] > 0:
            self.recommend(
                recommendations,
                f"Give every product a detailed description of at least "
                f"{self.thresholds.product_min_description_length} characters.",
                "medium",
            )

        if stats["aggregateRating"]["missing"] > 0:
            self.recommend(
                recommendations,
                "Add aggregateRating so review ratings can appear in search results.",
                "medium",
            )

        if stats["brand"]["missing"] > 0:
            self.recommend(recommendations, "Add a brand property to name the product's brand.", "medium")

        if stats["gtin"]["missing"] > 0:
            self.recommend(
                recommendations,
                "Where possible, add a standard product identifier such as gtin, isbn or mpn.",
                "medium",
            )

        if offers["hasAvailability"] < offers["count"]:
            self.recommend(
                recommendations, "Add availability to offers to show the stock status.", "medium"
            )

        self.recommend(
            recommendations,
            "Keep product structured data consistent with the visible page content.",
            "medium",
        )
        return recommendations
