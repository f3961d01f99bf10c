"""Entities - Domain models for parsed site content.

This module contains pure domain entities without business logic:
- Document: A parsed content file (front matter + Markdown body)
- DocumentMetadata: The structured front matter of a document
- CoverImage: The cover image sub-mapping of the front matter
"""

from inkwell.entities.document import (
    CoverImage,
    Document,
    DocumentMetadata,
    FrontMatterFormat,
)

__all__ = [
    "CoverImage",
    "Document",
    "DocumentMetadata",
    "FrontMatterFormat",
]
