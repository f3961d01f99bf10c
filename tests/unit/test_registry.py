"""Unit tests for the content registry."""

import datetime as dt
import itertools

import pytest

from inkwell.core.errors import DuplicateIdentifier, MalformedFrontMatter, MissingRequiredField, NotFound
from inkwell.core.registry import ALL_DOCUMENTS, ContentRegistry, DocumentFilter
from inkwell.entities import Document, DocumentMetadata


def make_entry(identifier, date, draft=False, tags=(), categories=(), author=None):
    metadata = DocumentMetadata(
        title=identifier.rsplit("/", 1)[-1],
        date=date,
        draft=draft,
        tags=tags,
        categories=categories,
        author=author,
    )
    return (identifier, metadata, f"Body of {identifier}")


@pytest.fixture
def entries():
    return [
        make_entry("posts/docker.md", dt.date(2025, 9, 1), tags=("Docker", "DevOps"), categories=("Engineering",)),
        make_entry("posts/react.md", dt.date(2025, 11, 28), tags=("React",), categories=("Engineering",), author="Site Author"),
        make_entry("posts/go.md", dt.date(2025, 9, 1), tags=("Go", "docker")),
        make_entry("posts/draft.md", dt.date(2025, 12, 5), draft=True, tags=("Docker",)),
        make_entry("portfolio/dashboard.md", dt.date(2024, 6, 15), tags=("React", "Go"), categories=("Portfolio",)),
    ]


@pytest.fixture
def registry(entries):
    return ContentRegistry(entries)


def identifiers(documents):
    return [doc.source_identifier for doc in documents]


class TestConstruction:
    """Test building registries."""

    def test_duplicate_identifier_fails(self, entries):
        duplicate = make_entry("posts/react.md", dt.date(2020, 1, 1))
        with pytest.raises(DuplicateIdentifier) as exc_info:
            ContentRegistry([*entries, duplicate])
        assert exc_info.value.source_identifier == "posts/react.md"

    def test_duplicate_documents_fail(self, registry):
        doc = registry.get("posts/react.md")
        with pytest.raises(DuplicateIdentifier):
            ContentRegistry.from_documents([doc, doc])

    def test_accepts_decoded_mappings(self):
        registry = ContentRegistry(
            [("posts/hello.md", {"title": "Hello", "date": "2025-01-01", "weight": 1}, "Body")]
        )
        doc = registry.get("posts/hello.md")
        assert doc.date == dt.date(2025, 1, 1)
        assert doc.metadata.extra == {"weight": "1"}

    def test_mapping_without_date_fails(self):
        with pytest.raises(MissingRequiredField) as exc_info:
            ContentRegistry([("posts/hello.md", {"title": "Hello"}, "")])
        assert exc_info.value.source_identifier == "posts/hello.md"
        assert str(exc_info.value).startswith("posts/hello.md: ")

    def test_mapping_with_invalid_value_names_source(self):
        with pytest.raises(MalformedFrontMatter) as exc_info:
            ContentRegistry([("posts/hello.md", {"title": "Hello", "date": "someday"}, "")])
        assert exc_info.value.source_identifier == "posts/hello.md"

    def test_empty_registry(self):
        registry = ContentRegistry()
        assert len(registry) == 0
        assert list(registry.list()) == []

    def test_from_documents(self, registry):
        rebuilt = ContentRegistry.from_documents(registry)
        assert identifiers(rebuilt) == identifiers(registry)


class TestListing:
    """Test ordering and filtering of listings."""

    def test_default_listing_is_published_newest_first(self, registry):
        assert identifiers(registry.list()) == [
            "posts/react.md",
            "posts/docker.md",
            "posts/go.md",
            "portfolio/dashboard.md",
        ]

    def test_newer_date_comes_first(self):
        registry = ContentRegistry(
            [
                make_entry("a.md", dt.date(2025, 9, 1)),
                make_entry("b.md", dt.date(2025, 11, 28)),
            ]
        )
        assert identifiers(registry.list()) == ["b.md", "a.md"]

    def test_order_independent_of_input_order(self, entries):
        expected = identifiers(ContentRegistry(entries).list(ALL_DOCUMENTS))
        for permutation in itertools.permutations(entries):
            assert identifiers(ContentRegistry(permutation).list(ALL_DOCUMENTS)) == expected

    def test_draft_excluded_but_retrievable(self, registry):
        assert "posts/draft.md" not in identifiers(registry.list())
        assert registry.get("posts/draft.md").draft is True
        assert "posts/draft.md" in registry

    def test_include_drafts(self, registry):
        assert identifiers(registry.list(ALL_DOCUMENTS))[0] == "posts/draft.md"

    def test_drafts_only(self, registry):
        assert identifiers(registry.list(DocumentFilter(drafts_only=True))) == ["posts/draft.md"]

    def test_filter_by_tag_ignores_case(self, registry):
        assert identifiers(registry.list(DocumentFilter(tag="docker"))) == [
            "posts/docker.md",
            "posts/go.md",
        ]

    def test_filter_by_category_and_author(self, registry):
        assert identifiers(registry.list(DocumentFilter(category="portfolio"))) == ["portfolio/dashboard.md"]
        assert identifiers(registry.list(DocumentFilter(author="site author"))) == ["posts/react.md"]

    def test_filter_by_date_range(self, registry):
        window = DocumentFilter(since=dt.date(2025, 1, 1), until=dt.date(2025, 10, 1))
        assert identifiers(registry.list(window)) == ["posts/docker.md", "posts/go.md"]

    def test_callable_predicate(self, registry):
        listing = registry.list(lambda doc: doc.date.year == 2024)
        assert identifiers(listing) == ["portfolio/dashboard.md"]

    def test_listing_is_lazy_and_restartable(self, registry):
        listing = registry.list()
        assert next(listing).source_identifier == "posts/react.md"

        first = identifiers(registry.list())
        second = identifiers(registry.list())
        assert first == second
        assert len(registry) == 5

    def test_iteration_includes_drafts(self, registry):
        assert len(list(registry)) == 5

    def test_latest(self, registry):
        assert identifiers(registry.latest(2)) == ["posts/react.md", "posts/docker.md"]
        assert identifiers(registry.latest(10, ALL_DOCUMENTS))[0] == "posts/draft.md"


class TestLookup:
    """Test retrieval by identifier."""

    def test_get(self, registry):
        doc = registry.get("posts/go.md")
        assert isinstance(doc, Document)
        assert doc.body == "Body of posts/go.md"

    def test_get_missing(self, registry):
        with pytest.raises(NotFound) as exc_info:
            registry.get("posts/missing.md")
        assert exc_info.value.source_identifier == "posts/missing.md"


class TestIndexes:
    """Test taxonomy and archive views."""

    def test_tag_taxonomy(self, registry):
        tags = registry.taxonomy("tags")

        assert list(tags) == ["DevOps", "Docker", "Go", "React"]
        assert identifiers(tags["Docker"]) == ["posts/docker.md", "posts/go.md"]
        assert identifiers(tags["React"]) == ["posts/react.md", "portfolio/dashboard.md"]

    def test_tag_taxonomy_with_drafts(self, registry):
        tags = registry.taxonomy("tags", include_drafts=True)
        assert identifiers(tags["Docker"])[0] == "posts/draft.md"

    def test_category_taxonomy(self, registry):
        categories = registry.taxonomy("categories")
        assert {term: len(docs) for term, docs in categories.items()} == {
            "Engineering": 2,
            "Portfolio": 1,
        }

    def test_unknown_taxonomy(self, registry):
        with pytest.raises(ValueError, match="Unknown taxonomy"):
            registry.taxonomy("series")

    def test_by_year(self, registry):
        years = registry.by_year()
        assert list(years) == [2025, 2024]
        assert identifiers(years[2025]) == ["posts/react.md", "posts/docker.md", "posts/go.md"]
