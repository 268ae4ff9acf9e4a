"""
Error types for XFeature compilation, lookup, and backend dispatch.
"""

from dataclasses import dataclass
from typing import Optional


class XFeatureError(Exception):
    """Base exception for all XFeature errors."""

    def __init__(self, message: str, context: Optional["ErrorContext"] = None):
        self.message = message
        self.context = context
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format error message with context if available."""
        if self.context:
            return f"{self.context.format()}: {self.message}"
        return self.message


class ParseError(XFeatureError):
    """
    Raised when a feature specification cannot be compiled.

    Examples:
    - Malformed XML
    - Missing or wrongly named <Feature> root element
    - Strict mode: missing Id/Name attributes, unrecognised enum values
    """

    pass


class ReferenceNotFoundError(XFeatureError, LookupError):
    """
    Raised when a hard reference cannot be resolved.

    Rendering-time lookups (``get_query``, ``get_form``, ...) return ``None``
    instead. This is raised where a miss is a bug rather than a state:

    - A mock bundle has no entry for the requested id
    - A feature file does not exist
    """

    def __init__(self, kind: str, ref: str, message: str | None = None):
        self.kind = kind
        self.ref = ref
        super().__init__(message or f"{kind} not found: {ref}")


class BackendError(XFeatureError):
    """
    Raised when a real backend call fails.

    Examples:
    - Connection refused / timeout
    - Non-2xx HTTP status
    - Response payload that does not match the network contract
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        url: str | None = None,
    ):
        self.status_code = status_code
        self.url = url
        super().__init__(message)


class ConfigError(XFeatureError):
    """Raised when xfeature.toml cannot be read or holds invalid values."""

    pass


@dataclass
class ErrorContext:
    """
    Location of an error inside a specification document.

    Attributes:
        source: File path or other label of the document
        element: Element path, e.g. "Feature/Frontend/Form[EditUser]"
        attribute: Offending attribute name, if any
    """

    source: str | None = None
    element: str | None = None
    attribute: str | None = None

    def format(self) -> str:
        """
        Format error context as a human-readable string.

        Returns:
            String like: "users.xml: Feature/Backend/Query [Id]"
        """
        parts: list[str] = []
        if self.source:
            parts.append(self.source)
        if self.element:
            parts.append(self.element)
        location = ": ".join(parts) if parts else "<spec>"
        if self.attribute:
            location += f" [{self.attribute}]"
        return location


def make_parse_error(
    message: str,
    source: str | None = None,
    element: str | None = None,
    attribute: str | None = None,
) -> ParseError:
    """
    Helper to create a ParseError with context.

    Args:
        message: Error description
        source: Document label (usually the file path)
        element: Element path where the error occurred
        attribute: Attribute name, if the error concerns one

    Returns:
        ParseError with context attached when any location is known
    """
    if source or element or attribute:
        return ParseError(message, ErrorContext(source=source, element=element, attribute=attribute))
    return ParseError(message)
