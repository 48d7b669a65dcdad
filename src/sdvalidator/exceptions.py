"""Exceptions raised at the edges of the structured data validator.

Extraction and validation never raise for bad markup; they return
placeholders and issues instead. These exceptions are reserved for input the
pipeline cannot start from at all.
"""


class StructuredDataError(Exception):
    """Base class for validator errors."""


class MarkupError(StructuredDataError):
    """HTML input is empty, not text, or could not be parsed."""


class RegistryLoadError(StructuredDataError):
    """A schema registry file is missing or malformed."""
