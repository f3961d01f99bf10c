"""Content registry: the in-memory aggregate of one ingestion run.

The registry is built once from parsed documents and never mutated
afterwards. Listings are ordered newest first, with ties broken by
source identifier so that output is stable whatever order files were
read in.
"""

import datetime as dt
from collections import defaultdict
from typing import Any, Callable, Iterable, Iterator, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict

from inkwell.core.errors import (
    DuplicateIdentifier,
    MalformedFrontMatter,
    MissingRequiredField,
    NotFound,
)
from inkwell.core.frontmatter import build_metadata
from inkwell.entities import Document, DocumentMetadata
from inkwell.observability.logging import get_logger

logger = get_logger(__name__)

TAXONOMIES = ("tags", "categories")


class DocumentFilter(BaseModel):
    """Predicate over documents used by ``ContentRegistry.list``.

    The default instance matches published documents only. Term and author
    comparisons ignore case.
    """

    model_config = ConfigDict(frozen=True)

    include_drafts: bool = False
    drafts_only: bool = False
    tag: Optional[str] = None
    category: Optional[str] = None
    author: Optional[str] = None
    since: Optional[dt.date] = None
    until: Optional[dt.date] = None

    def __call__(self, document: Document) -> bool:
        if self.drafts_only:
            if not document.draft:
                return False
        elif document.draft and not self.include_drafts:
            return False
        if self.tag is not None and not _has_term(document.tags, self.tag):
            return False
        if self.category is not None and not _has_term(document.categories, self.category):
            return False
        if self.author is not None:
            author = document.metadata.author or ""
            if author.casefold() != self.author.casefold():
                return False
        if self.since is not None and document.date < self.since:
            return False
        if self.until is not None and document.date > self.until:
            return False
        return True


PUBLISHED = DocumentFilter()
ALL_DOCUMENTS = DocumentFilter(include_drafts=True)

DocumentPredicate = Union[DocumentFilter, Callable[[Document], bool]]
RegistryEntry = tuple[str, Union[DocumentMetadata, Mapping[str, Any]], str]


def _has_term(terms: Iterable[str], wanted: str) -> bool:
    wanted = wanted.casefold()
    return any(term.casefold() == wanted for term in terms)


def _listing_key(document: Document) -> tuple[int, str]:
    # Newest first, then identifier ascending
    return (-document.date.toordinal(), document.source_identifier)


class ContentRegistry:
    """Immutable collection of parsed documents keyed by source identifier.

    Build it from ``(source_identifier, metadata, body)`` tuples, or from
    ready Documents with ``from_documents``. Pass the registry explicitly
    to whatever needs it; there is no global instance.
    """

    def __init__(self, entries: Iterable[RegistryEntry] = ()):
        """Initialize the registry.

        Args:
            entries: ``(source_identifier, metadata, body)`` tuples. Metadata
                may be a DocumentMetadata or a decoded front-matter mapping.

        Raises:
            DuplicateIdentifier: If two entries share a source identifier
            MissingRequiredField: If a metadata mapping lacks title or date
            MalformedFrontMatter: If a metadata mapping has an invalid value
        """
        documents = []
        for source_identifier, metadata, body in entries:
            if not isinstance(metadata, DocumentMetadata):
                try:
                    metadata = build_metadata(dict(metadata))
                except (MalformedFrontMatter, MissingRequiredField) as e:
                    raise e.with_source(source_identifier)
            documents.append(
                Document(source_identifier=source_identifier, metadata=metadata, body=body)
            )
        self._load(documents)

    @classmethod
    def from_documents(cls, documents: Iterable[Document]) -> "ContentRegistry":
        """Build a registry from parsed Documents.

        Raises:
            DuplicateIdentifier: If two documents share a source identifier
        """
        registry = cls.__new__(cls)
        registry._load(documents)
        return registry

    def _load(self, documents: Iterable[Document]) -> None:
        by_id: dict[str, Document] = {}
        for document in documents:
            if document.source_identifier in by_id:
                raise DuplicateIdentifier(document.source_identifier)
            by_id[document.source_identifier] = document

        self._documents = by_id
        self._ordered = tuple(sorted(by_id.values(), key=_listing_key))
        logger.debug(
            "registry_built",
            document_count=len(self._ordered),
            draft_count=sum(1 for doc in self._ordered if doc.draft),
        )

    def __len__(self) -> int:
        return len(self._ordered)

    def __contains__(self, source_identifier: object) -> bool:
        return source_identifier in self._documents

    def __iter__(self) -> Iterator[Document]:
        """Iterate over every document, drafts included, in listing order."""
        return iter(self._ordered)

    def get(self, source_identifier: str) -> Document:
        """Return the document registered under ``source_identifier``.

        Raises:
            NotFound: If no such document exists
        """
        try:
            return self._documents[source_identifier]
        except KeyError:
            raise NotFound(source_identifier) from None

    def latest(self, count: int, filter: Optional[DocumentPredicate] = None) -> tuple[Document, ...]:
        """Return the ``count`` newest documents matching ``filter``."""
        selected = []
        for document in self.list(filter):
            if len(selected) >= count:
                break
            selected.append(document)
        return tuple(selected)

    def taxonomy(self, name: str, include_drafts: bool = False) -> dict[str, tuple[Document, ...]]:
        """Group documents by the terms of a taxonomy.

        Terms keep the spelling they were first seen with; terms that
        differ only by case are merged. Terms are sorted case-insensitively
        and each term's documents are in listing order.

        Args:
            name: "tags" or "categories"
            include_drafts: Whether drafts contribute to the index

        Raises:
            ValueError: If ``name`` is not a known taxonomy
        """
        if name not in TAXONOMIES:
            raise ValueError(f"Unknown taxonomy '{name}', expected one of {TAXONOMIES}")

        spelling: dict[str, str] = {}
        grouped: dict[str, list[Document]] = defaultdict(list)
        for document in self.list(DocumentFilter(include_drafts=include_drafts)):
            seen_here = set()
            for term in getattr(document, name):
                key = term.casefold()
                if key in seen_here:
                    continue
                seen_here.add(key)
                spelling.setdefault(key, term)
                grouped[key].append(document)

        return {spelling[key]: tuple(grouped[key]) for key in sorted(grouped)}

    def by_year(self, filter: Optional[DocumentPredicate] = None) -> dict[int, tuple[Document, ...]]:
        """Archive view: documents grouped by year, newest year first."""
        years: dict[int, list[Document]] = {}
        for document in self.list(filter):
            years.setdefault(document.date.year, []).append(document)
        return {year: tuple(docs) for year, docs in years.items()}

    def list(self, filter: Optional[DocumentPredicate] = None) -> Iterator[Document]:
        """Lazily yield documents matching ``filter`` in listing order.

        Every call returns a fresh generator, so a listing can be evaluated
        any number of times.

        Args:
            filter: A DocumentFilter or any ``Document -> bool`` callable.
                Defaults to published documents only.
        """
        predicate = PUBLISHED if filter is None else filter
        return (document for document in self._ordered if predicate(document))
