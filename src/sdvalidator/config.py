from dotenv import load_dotenv
from dataclasses import asdict, dataclass, fields
from typing import Optional
from pathlib import Path
import json
import logging
import os

load_dotenv()

logger = logging.getLogger(__name__)


class Settings:
    """
    Process-wide options read from SDV_* environment variables (and .env).
    """
    LOG_LEVEL = os.getenv("SDV_LOG_LEVEL", "INFO")
    LOG_FILE = os.getenv("SDV_LOG_FILE")

    # Optional overrides for the built-in schema table and thresholds
    REGISTRY_FILE = os.getenv("SDV_REGISTRY_FILE")
    THRESHOLDS_FILE = os.getenv("SDV_THRESHOLDS_FILE")


settings = Settings()


@dataclass
class ValidationThresholds:
    """Configurable thresholds for structured data validation."""

    # Recursion ceilings
    max_validation_depth: int = 10  # Nested items validated below the root
    max_extraction_depth: int = 32  # Nested items built from markup
    deep_nesting_threshold: int = 5  # Depth that triggers a flattening hint

    # Engine summary
    many_items_threshold: int = 10  # Item count that triggers a dedupe hint

    # Scoring
    error_penalty: int = 5  # Points per error
    error_penalty_cap: int = 50
    warning_penalty: int = 2  # Points per warning
    warning_penalty_cap: int = 25

    # Product
    product_min_description_length: int = 50  # characters
    rating_min: float = 0.0
    rating_max: float = 5.0

    # FAQPage
    faq_min_items: int = 2
    faq_min_question_length: int = 10  # characters
    faq_max_question_length: int = 150  # characters
    faq_min_answer_length: int = 25  # characters

    # BreadcrumbList
    breadcrumb_min_items: int = 2

    # Analyzer
    max_recommendations: int = 10

    @classmethod
    def from_env(cls, prefix: str = "SDV_THRESHOLD_") -> "ValidationThresholds":
        """Build thresholds from environment overrides.

        Each field maps to ``{prefix}{FIELD_NAME}``, e.g.
        SDV_THRESHOLD_MANY_ITEMS_THRESHOLD=20. Values that do not convert to
        the field's type are logged and ignored.

        Args:
            prefix: Environment variable prefix

        Returns:
            ValidationThresholds with values from environment
        """
        overrides = {}
        for spec in fields(cls):
            env_key = f"{prefix}{spec.name.upper()}"
            raw = os.getenv(env_key)
            if raw is None:
                continue
            try:
                overrides[spec.name] = spec.type(raw)
            except ValueError:
                logger.warning(f"Ignoring {env_key}={raw!r}: expected {spec.type.__name__}")

        return cls(**overrides)

    @classmethod
    def from_file(cls, path: str) -> "ValidationThresholds":
        """Load thresholds from a JSON file.

        The file may hold a ``thresholds`` section or the bare mapping.
        Unknown keys are ignored and a missing file yields the defaults.

        Args:
            path: Path to JSON configuration file

        Returns:
            ValidationThresholds with values from file
        """
        file_path = Path(path)
        if not file_path.exists():
            logger.debug(f"Thresholds file {file_path} not found, using defaults")
            return cls()

        data = json.loads(file_path.read_text(encoding="utf-8"))
        section = data.get("thresholds", data)
        known = {spec.name for spec in fields(cls)}

        return cls(**{name: value for name, value in section.items() if name in known})

    def to_dict(self) -> dict:
        return asdict(self)

    def save_to_file(self, path: str) -> None:
        """Write thresholds under a ``thresholds`` section.

        Args:
            path: Path to save configuration
        """
        Path(path).write_text(json.dumps({"thresholds": self.to_dict()}, indent=2), encoding="utf-8")


def load_thresholds(path: Optional[str] = None) -> ValidationThresholds:
    """Resolve thresholds from an explicit file, the settings file, or env.

    Args:
        path: Optional JSON file; falls back to SDV_THRESHOLDS_FILE

    Returns:
        ValidationThresholds instance
    """
    path = path or settings.THRESHOLDS_FILE
    if path:
        return ValidationThresholds.from_file(path)
    return ValidationThresholds.from_env()


# Global default thresholds instance
default_thresholds = ValidationThresholds()
