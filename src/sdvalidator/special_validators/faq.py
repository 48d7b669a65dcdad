"""Business rules for schema.org FAQPage items."""

from typing import Any, Dict, List

from sdvalidator.models import Recommendation, SemanticItem
from sdvalidator.special_validators.base import (
    SpecialValidator,
    as_list,
    first_value,
    has_type,
    is_blank,
    list_path,
    text_value,
)


class FAQValidator(SpecialValidator):
    """Checks question/answer pairs and their lengths."""

    schema_type = "FAQPage"
    invalid_type_code = "invalid-faq-type"

    def initial_stats(self) -> Dict[str, Any]:
        return {
            "totalItems": 0,
            "validItems": 0,
            "questions": {"valid": 0, "tooShort": 0, "tooLong": 0, "missing": 0},
            "answers": {"valid": 0, "tooShort": 0, "missing": 0},
        }

    def check(self, item: SemanticItem) -> None:
        main_entity = item.get("mainEntity")
        if is_blank(main_entity):
            self.add_error(
                "FAQPage needs a mainEntity property",
                "missing-main-entity",
                property="mainEntity",
            )
            return

        questions = as_list(main_entity)
        is_list = isinstance(main_entity, list)
        self.stats["totalItems"] = len(questions)

        if len(questions) < self.thresholds.faq_min_items:
            self.add_warning(
                f"An FAQPage needs at least {self.thresholds.faq_min_items} questions to be useful",
                "insufficient-faq-items",
            )

        valid_items = 0
        for index, question in enumerate(questions):
            errors_before = len(self.errors)
            self._check_question(question, index, list_path("mainEntity", index, is_list))
            if len(self.errors) == errors_before:
                valid_items += 1
        self.stats["validItems"] = valid_items

    def _check_question(self, question: Any, index: int, path: str) -> None:
        if not has_type(question, "Question"):
            self.add_error(
                f"FAQ entry #{index + 1} must be of type Question",
                "invalid-question-type",
                path=path,
            )
            return

        thresholds = self.thresholds
        name = text_value(question.get("name")).strip()
        if not name:
            self.stats["questions"]["missing"] += 1
            self.add_error(
                f"FAQ entry #{index + 1} has no question (name)",
                "missing-question",
                path=path,
                property="name",
            )
        elif len(name) < thresholds.faq_min_question_length:
            self.stats["questions"]["tooShort"] += 1
            self.add_warning(
                f"FAQ entry #{index + 1} question is too short ({len(name)} characters)",
                "short-question",
                path=path,
                property="name",
            )
        elif len(name) > thresholds.faq_max_question_length:
            self.stats["questions"]["tooLong"] += 1
            self.add_warning(
                f"FAQ entry #{index + 1} question is too long ({len(name)} characters)",
                "long-question",
                path=path,
                property="name",
            )
        else:
            self.stats["questions"]["valid"] += 1

        answer = first_value(question.get("acceptedAnswer"))
        if is_blank(answer):
            self.stats["answers"]["missing"] += 1
            self.add_error(
                f"FAQ entry #{index + 1} has no acceptedAnswer",
                "missing-answer",
                path=path,
                property="acceptedAnswer",
            )
            return

        if not has_type(answer, "Answer"):
            self.add_error(
                f"FAQ entry #{index + 1} answer must be of type Answer",
                "invalid-answer-type",
                path=path,
                property="acceptedAnswer",
            )
            return

        answer_path = f"{path}acceptedAnswer."
        text = text_value(answer.get("text")).strip()
        if not text:
            self.add_error(
                f"FAQ entry #{index + 1} answer has no text",
                "missing-answer-text",
                path=answer_path,
                property="text",
            )
        elif len(text) < thresholds.faq_min_answer_length:
            self.stats["answers"]["tooShort"] += 1
            self.add_warning(
                f"FAQ entry #{index + 1} answer is too short ({len(text)} characters)",
                "short-answer",
                path=answer_path,
                property="text",
            )
        else:
            self.stats["answers"]["valid"] += 1

    def recommendations(self) -> List[Recommendation]:
        stats = self.stats
        thresholds = self.thresholds
        recommendations: List[Recommendation] = []

        if stats["questions"]["missing"] > 0:
            self.recommend(recommendations, "Every FAQ entry needs its question in a name property.", "high")

        if stats["questions"]["tooShort"] > 0:
            self.recommend(
                recommendations,
                f"Write specific questions of at least {thresholds.faq_min_question_length} characters.",
                "medium",
            )

        if stats["questions"]["tooLong"] > 0:
            self.recommend(
                recommendations,
                f"Keep questions under {thresholds.faq_max_question_length} characters.",
                "low",
            )

        if stats["answers"]["missing"] > 0:
            self.recommend(
                recommendations, "Every FAQ question needs an answer in acceptedAnswer.", "high"
            )

        if stats["answers"]["tooShort"] > 0:
            self.recommend(
                recommendations,
                f"Answers should be at least {thresholds.faq_min_answer_length} characters long.",
                "medium",
            )

        if stats["totalItems"] < thresholds.faq_min_items:
            self.recommend(
                recommendations,
                f"Include at least {thresholds.faq_min_items} questions so search engines show the FAQ.",
                "medium",
            )

        self.recommend(
            recommendations,
            "Keep FAQ entries consistent with the visible page content.",
            "medium",
        )
        return recommendations
