"""Ingestion pipeline: discover, read, parse and register content files.

Why this exists:
- Orchestrates one ingestion run over one or more content roots
- Parses files concurrently (parsing is a pure per-file function)
- Records per-file failures without aborting the run, unless fail-fast

How to use:
    from inkwell.pipelines.ingestion import IngestionPipeline

    pipeline = IngestionPipeline(config)
    report = await pipeline.ingest(Path("content"))
    for post in report.registry.list():
        ...
"""

import asyncio
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Union

from inkwell.config.schema import AppConfig, IngestionConfig
from inkwell.core.errors import ContentError, DuplicateIdentifier, IngestionError
from inkwell.core.frontmatter import parse_document
from inkwell.core.registry import ContentRegistry
from inkwell.entities import Document
from inkwell.observability.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class IngestionFailure:
    """A content file that could not be ingested."""
    source_identifier: str
    error: str
    message: str

    @classmethod
    def from_error(cls, error: ContentError) -> "IngestionFailure":
        return cls(
            source_identifier=error.source_identifier or "",
            error=type(error).__name__,
            message=error.message,
        )


@dataclass
class IngestionReport:
    """Result of one ingestion run."""
    registry: ContentRegistry
    failures: list[IngestionFailure] = field(default_factory=list)
    total_files: int = 0

    @property
    def ok(self) -> bool:
        return not self.failures

    @property
    def document_count(self) -> int:
        return len(self.registry)


def discover_content_files(
    root: Path,
    extensions: Union[list[str], tuple[str, ...]] = (".md", ".markdown"),
    recursive: bool = True,
) -> list[Path]:
    """Find content files under ``root``.

    Hidden files and directories (leading ``.``) are skipped. A file path
    is returned as-is when its extension is recognized.

    Raises:
        IngestionError: If ``root`` does not exist
    """
    suffixes = {ext.lower() for ext in extensions}

    if root.is_file():
        return [root] if root.suffix.lower() in suffixes else []
    if not root.is_dir():
        raise IngestionError(f"Content path not found: {root}")

    candidates = root.rglob("*") if recursive else root.iterdir()
    files = []
    for path in candidates:
        relative = path.relative_to(root)
        if any(part.startswith(".") for part in relative.parts):
            continue
        if path.is_file() and path.suffix.lower() in suffixes:
            files.append(path)
    return sorted(files)


def source_identifier_for(path: Path, root: Path) -> str:
    """Logical path of ``path`` relative to its content root, posix style."""
    if root.is_file():
        return path.name
    return path.relative_to(root).as_posix()


class IngestionPipeline:
    """Pipeline building a ContentRegistry from content directories."""

    def __init__(self, config: Optional[AppConfig] = None):
        """Initialize the ingestion pipeline.

        Args:
            config: Application configuration (defaults apply if omitted)
        """
        self.config = config or AppConfig()

    @property
    def settings(self) -> IngestionConfig:
        return self.config.ingestion

    def read_document(self, path: Path, source_identifier: str) -> Document:
        """Read and parse a single content file.

        Raises:
            IngestionError: If the file cannot be read or decoded
            MalformedFrontMatter: If the front matter is malformed
            MissingRequiredField: If title or date is absent
        """
        try:
            text = path.read_text(encoding=self.settings.encoding)
        except (OSError, UnicodeDecodeError) as e:
            raise IngestionError(f"Failed to read file: {e}", source_identifier) from e
        return parse_document(source_identifier, text)

    async def ingest(self, *roots: Path, fail_fast: Optional[bool] = None) -> IngestionReport:
        """Ingest every content file under the given roots.

        Args:
            *roots: Content directories (or single files)
            fail_fast: Raise the error of the first failing file, in file
                order, instead of recording it (defaults to the configured value)

        Returns:
            IngestionReport with the registry and per-file failures

        Raises:
            ContentError: On the first failure when fail-fast is enabled
        """
        fail_fast = self.settings.fail_fast if fail_fast is None else fail_fast
        roots = roots or (self.config.content_dir,)

        sources: list[tuple[Path, str]] = []
        for root in roots:
            files = discover_content_files(root, self.settings.extensions, self.settings.recursive)
            logger.info("content_discovered", root=str(root), file_count=len(files))
            sources.extend((path, source_identifier_for(path, root)) for path in files)

        logger.info(
            "ingestion_started",
            roots=[str(root) for root in roots],
            total_files=len(sources),
            fail_fast=fail_fast,
            max_workers=self.settings.max_workers,
        )

        semaphore = asyncio.Semaphore(self.settings.max_workers)

        async def parse_one(path: Path, source_identifier: str) -> Union[Document, ContentError]:
            async with semaphore:
                try:
                    return await asyncio.to_thread(self.read_document, path, source_identifier)
                except ContentError as e:
                    return e

        tasks = [asyncio.ensure_future(parse_one(path, ident)) for path, ident in sources]
        results: list[Union[Document, ContentError]] = []
        try:
            # Awaited in file order, so fail-fast always reports the earliest failing file
            for task in tasks:
                result = await task
                if fail_fast and isinstance(result, ContentError):
                    raise result
                results.append(result)
        finally:
            pending = [task for task in tasks if not task.done()]
            for task in pending:
                task.cancel()
            await asyncio.gather(*pending, return_exceptions=True)

        documents: list[Document] = []
        failures: list[IngestionFailure] = []
        seen: set[str] = set()
        for result in results:
            if isinstance(result, Document) and result.source_identifier in seen:
                result = DuplicateIdentifier(result.source_identifier)
                if fail_fast:
                    raise result
            if isinstance(result, ContentError):
                logger.warning(
                    "document_parse_failed",
                    source=result.source_identifier,
                    error=type(result).__name__,
                    message=result.message,
                )
                failures.append(IngestionFailure.from_error(result))
                continue
            seen.add(result.source_identifier)
            documents.append(result)

        registry = ContentRegistry.from_documents(documents)
        logger.info(
            "ingestion_completed",
            total_files=len(sources),
            document_count=len(registry),
            failure_count=len(failures),
        )

        return IngestionReport(registry=registry, failures=failures, total_files=len(sources))


def ingest_directory(
    root: Path,
    config: Optional[AppConfig] = None,
    fail_fast: Optional[bool] = None,
) -> IngestionReport:
    """Synchronous convenience wrapper around ``IngestionPipeline.ingest``."""
    return asyncio.run(IngestionPipeline(config).ingest(root, fail_fast=fail_fast))
