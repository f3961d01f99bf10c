"""Document entity - represents one parsed content file."""

import datetime as dt
import json
import math
import re
from enum import Enum
from pathlib import PurePosixPath
from typing import Any, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

_SLUG_STRIP = re.compile(r"[^\w\s-]")
_SLUG_SEPARATORS = re.compile(r"[\s_-]+")
_WORD = re.compile(r"\S+")


class FrontMatterFormat(str, Enum):
    """Supported front-matter encodings, keyed by their fence marker."""

    YAML = "---"
    TOML = "+++"


def slugify(value: str) -> str:
    """Lowercase, strip punctuation and join words with hyphens."""
    value = _SLUG_STRIP.sub("", value.lower())
    return _SLUG_SEPARATORS.sub("-", value).strip("-")


def coerce_date(value: Any) -> Any:
    """Reduce timestamps to their calendar date.

    YAML and TOML decoders hand back ``date`` or ``datetime`` objects;
    quoted values arrive as ISO-8601 strings, with or without a time part.
    """
    if isinstance(value, dt.datetime):
        return value.date()
    if isinstance(value, dt.date):
        return value
    if isinstance(value, str):
        text = value.strip()
        try:
            return dt.date.fromisoformat(text)
        except ValueError:
            pass
        try:
            return dt.datetime.fromisoformat(text).date()
        except ValueError:
            raise ValueError(f"'{value}' is not an ISO-8601 date") from None
    if isinstance(value, (int, float)):
        # Bare numbers would otherwise be read as Unix timestamps
        raise ValueError(f"{value!r} is not a calendar date")
    return value


def _stringify(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return ""
    if isinstance(value, (dt.date, dt.datetime)):
        return value.isoformat()
    if isinstance(value, (list, tuple, dict)):
        return json.dumps(value, default=str, ensure_ascii=False, separators=(",", ":"))
    return str(value)


class CoverImage(BaseModel):
    """Cover image sub-mapping of the front matter.

    Unrecognized cover keys (e.g. ``hiddenInList``) are kept as-is.
    """

    model_config = ConfigDict(frozen=True, extra="allow")

    image: Optional[str] = None
    alt: Optional[str] = None
    caption: Optional[str] = None
    relative: bool = False
    hidden: bool = False


class DocumentMetadata(BaseModel):
    """Structured front matter of a content file.

    Recognized keys map onto fixed fields; every other key lands in
    ``extra`` as a string so that nothing in the source is dropped.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="forbid")

    title: str
    date: dt.date
    draft: bool = False
    tags: tuple[str, ...] = ()
    categories: tuple[str, ...] = ()
    author: Optional[str] = None
    description: Optional[str] = None
    show_toc: bool = Field(default=False, alias="showToc")
    toc_open: bool = Field(default=False, alias="TocOpen")
    cover: Optional[CoverImage] = None
    slug: Optional[str] = None
    lastmod: Optional[dt.date] = None
    extra: dict[str, str] = Field(default_factory=dict)

    @field_validator("title", "description", "slug", mode="before")
    @classmethod
    def scalar_to_str(cls, v: Any) -> Any:
        if v is None or isinstance(v, str):
            return v
        if isinstance(v, (int, float, dt.date)) and not isinstance(v, bool):
            return _stringify(v)
        return v

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Document title cannot be blank")
        return v

    @field_validator("date", "lastmod", mode="before")
    @classmethod
    def parse_date(cls, v: Any) -> Any:
        return coerce_date(v)

    @field_validator("tags", "categories", mode="before")
    @classmethod
    def normalize_terms(cls, v: Any) -> Any:
        if v is None:
            return ()
        if isinstance(v, str):
            return (v,) if v.strip() else ()
        if isinstance(v, (list, tuple)):
            return tuple(_stringify(item) for item in v if item is not None)
        return v

    @field_validator("author", mode="before")
    @classmethod
    def join_authors(cls, v: Any) -> Any:
        if isinstance(v, (list, tuple)):
            return ", ".join(_stringify(item) for item in v)
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(v)
        return v

    @classmethod
    def recognized_keys(cls) -> set[str]:
        """Front-matter key names that map onto fixed fields."""
        return {
            info.alias or name
            for name, info in cls.model_fields.items()
            if name != "extra"
        }

    @classmethod
    def from_front_matter(cls, data: Mapping[str, Any]) -> "DocumentMetadata":
        """Build metadata from a decoded front-matter mapping.

        Raises:
            pydantic.ValidationError: If a recognized field has an invalid value
        """
        recognized = cls.recognized_keys()
        fields: dict[str, Any] = {}
        extra: dict[str, str] = {}
        for key, value in data.items():
            key = str(key)
            if key in recognized:
                fields[key] = value
            else:
                extra[key] = _stringify(value)
        return cls.model_validate({**fields, "extra": extra})

    def to_front_matter(self) -> dict[str, Any]:
        """Return the front-matter mapping, using the source key names."""
        data = self.model_dump(by_alias=True, exclude_none=True, exclude_defaults=True, exclude={"extra"})
        # title and date are required, keep them first even if defaults change
        data = {"title": self.title, "date": self.date, **data}
        for key in ("tags", "categories"):
            if key in data:
                data[key] = list(data[key])
        data.update(self.extra)
        return data


class Document(BaseModel):
    """A parsed content file.

    Pairs the decoded front matter with the raw Markdown body, which is
    handed to the renderer untouched.
    """

    model_config = ConfigDict(frozen=True)

    source_identifier: str = Field(..., min_length=1, description="Logical path of the content file")
    metadata: DocumentMetadata
    body: str = Field(default="", description="Raw Markdown body")
    front_matter_format: FrontMatterFormat = FrontMatterFormat.YAML

    @property
    def title(self) -> str:
        return self.metadata.title

    @property
    def date(self) -> dt.date:
        return self.metadata.date

    @property
    def draft(self) -> bool:
        return self.metadata.draft

    @property
    def tags(self) -> tuple[str, ...]:
        return self.metadata.tags

    @property
    def categories(self) -> tuple[str, ...]:
        return self.metadata.categories

    @property
    def slug(self) -> str:
        """Explicit slug, or one derived from the file name.

        Page bundles (``posts/my-post/index.md``) take the directory name.
        """
        if self.metadata.slug:
            return self.metadata.slug
        path = PurePosixPath(self.source_identifier)
        stem = path.stem
        if stem in ("index", "_index") and path.parent.name:
            stem = path.parent.name
        return slugify(stem)

    @property
    def word_count(self) -> int:
        return len(_WORD.findall(self.body))

    def reading_time(self, words_per_minute: int = 200) -> int:
        """Estimated reading time in whole minutes."""
        words = self.word_count
        if not words:
            return 0
        return max(1, math.ceil(words / words_per_minute))
