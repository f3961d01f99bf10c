"""Front-matter parsing for Markdown content files.

A content file starts with a fenced metadata block followed by the
Markdown body:

    ---
    title: "Compound Components in React"
    date: 2025-11-28
    tags: ["React", "Patterns"]
    ---
    Body text...

``---`` fences hold YAML, ``+++`` fences hold TOML. The opening fence must
be the first line of the file and the same fence, alone on a line, closes
the block. Everything after the closing fence line is the body and is
returned untouched.

Parsing is a pure function of the file text, so files can be parsed in
any order and concurrently.
"""

import tomllib
from typing import Any

import yaml
from pydantic import ValidationError

from inkwell.core.errors import MalformedFrontMatter, MissingRequiredField
from inkwell.entities import Document, DocumentMetadata, FrontMatterFormat
from inkwell.observability.logging import get_logger

logger = get_logger(__name__)

REQUIRED_FIELDS = ("title", "date")

_BOM = "\ufeff"
_FENCES = {fmt.value: fmt for fmt in FrontMatterFormat}
_FENCE_PADDING = " \t\r"


def split_front_matter(text: str) -> tuple[FrontMatterFormat, str, str]:
    """Split file text into its front-matter block and body.

    Args:
        text: Full content of the file

    Returns:
        Tuple of (format, raw metadata block, body)

    Raises:
        MalformedFrontMatter: If the opening or closing fence is missing
    """
    if text.startswith(_BOM):
        text = text[len(_BOM):]

    if not text:
        raise MalformedFrontMatter("File is empty, expected an opening front-matter fence")

    # Lines end at \n only; form feeds and Unicode separators stay inside a line
    lines = text.split("\n")
    fmt = _FENCES.get(lines[0].rstrip(_FENCE_PADDING))
    if fmt is None:
        raise MalformedFrontMatter(
            f"First line must be a front-matter fence ({' or '.join(_FENCES)})"
        )

    start = len(lines[0]) + 1
    position = start
    for line in lines[1:]:
        if line.rstrip(_FENCE_PADDING) == fmt.value:
            return fmt, text[start:position], text[position + len(line) + 1:]
        position += len(line) + 1

    raise MalformedFrontMatter(f"Closing front-matter fence '{fmt.value}' not found")


def decode_front_matter(fmt: FrontMatterFormat, raw: str) -> dict[str, Any]:
    """Decode a raw front-matter block into a mapping.

    Raises:
        MalformedFrontMatter: If the block is not valid YAML/TOML or not a mapping
    """
    if not raw.strip():
        return {}

    try:
        if fmt is FrontMatterFormat.TOML:
            data = tomllib.loads(raw)
        else:
            data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise MalformedFrontMatter(f"Invalid YAML front matter: {e}") from e
    except tomllib.TOMLDecodeError as e:
        raise MalformedFrontMatter(f"Invalid TOML front matter: {e}") from e
    except ValueError as e:
        # PyYAML lets out-of-range timestamps such as 2025-13-01 escape as ValueError
        raise MalformedFrontMatter(f"Invalid front-matter scalar: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise MalformedFrontMatter(
            f"Front matter must decode to a mapping, got {type(data).__name__}"
        )
    return data


def build_metadata(data: dict[str, Any]) -> DocumentMetadata:
    """Validate a decoded mapping and build the structured metadata.

    Raises:
        MissingRequiredField: If title or date is absent
        MalformedFrontMatter: If a recognized field has an invalid value
    """
    for field in REQUIRED_FIELDS:
        value = data.get(field)
        if value is None or (isinstance(value, str) and not value.strip()):
            raise MissingRequiredField(field)

    try:
        return DocumentMetadata.from_front_matter(data)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(part) for part in err['loc']) or 'front matter'}: {err['msg']}"
            for err in e.errors()
        )
        raise MalformedFrontMatter(f"Invalid front-matter value ({problems})") from e


def parse_front_matter(text: str) -> tuple[DocumentMetadata, str]:
    """Parse file text into (metadata, body).

    Raises:
        MalformedFrontMatter: If fences are missing or the block cannot be decoded
        MissingRequiredField: If title or date is absent
    """
    fmt, raw, body = split_front_matter(text)
    return build_metadata(decode_front_matter(fmt, raw)), body


def parse_document(source_identifier: str, text: str) -> Document:
    """Parse the text of one content file into a Document.

    Errors raised carry ``source_identifier``.
    """
    try:
        fmt, raw, body = split_front_matter(text)
        metadata = build_metadata(decode_front_matter(fmt, raw))
    except (MalformedFrontMatter, MissingRequiredField) as e:
        raise e.with_source(source_identifier)

    logger.debug(
        "front_matter_parsed",
        source=source_identifier,
        format=fmt.name,
        title=metadata.title,
        draft=metadata.draft,
    )
    return Document(
        source_identifier=source_identifier,
        metadata=metadata,
        body=body,
        front_matter_format=fmt,
    )


def serialize_front_matter(metadata: DocumentMetadata, body: str = "") -> str:
    """Render metadata and body back into file text.

    Output always uses a YAML block; parsing it yields the same metadata
    and body.
    """
    fence = FrontMatterFormat.YAML.value
    block = yaml.safe_dump(
        metadata.to_front_matter(),
        sort_keys=False,
        allow_unicode=True,
        default_flow_style=False,
    )
    return f"{fence}\n{block}{fence}\n{body}"
