"""Exceptions raised while parsing content files and querying the registry."""

from typing import Optional


class ContentError(Exception):
    """Base class for content ingestion errors.

    Attributes:
        source_identifier: Logical path of the offending file, when known
    """

    def __init__(self, message: str, source_identifier: Optional[str] = None):
        self.message = message
        self.source_identifier = source_identifier
        super().__init__(message)

    def __str__(self) -> str:
        if self.source_identifier:
            return f"{self.source_identifier}: {self.message}"
        return self.message

    def with_source(self, source_identifier: str) -> "ContentError":
        """Attach the source identifier if it was not known when raised."""
        if self.source_identifier is None:
            self.source_identifier = source_identifier
        return self


class MalformedFrontMatter(ContentError):
    """Front matter is missing its fences or cannot be decoded into a mapping."""


class MissingRequiredField(ContentError):
    """A required front-matter field (title or date) is absent."""

    def __init__(self, field: str, source_identifier: Optional[str] = None):
        self.field = field
        super().__init__(f"Missing required front-matter field '{field}'", source_identifier)


class DuplicateIdentifier(ContentError):
    """Two documents share a source identifier."""

    def __init__(self, source_identifier: str):
        super().__init__("Duplicate source identifier", source_identifier)


class NotFound(ContentError):
    """No document is registered under the requested source identifier."""

    def __init__(self, source_identifier: str):
        super().__init__("Document not found", source_identifier)


class IngestionError(ContentError):
    """A content file could not be read."""
