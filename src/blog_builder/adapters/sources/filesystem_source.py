"""Filesystem source: loads Markdown posts with YAML front matter."""

import asyncio
from datetime import timezone, tzinfo
from pathlib import Path
from typing import Any

from blog_builder.adapters.sources.front_matter import (
    parse_date,
    parse_flag,
    parse_front_matter,
    parse_tags,
)
from blog_builder.core import BuildError, BuildFailed, Document, DocumentSource, MalformedDocument

# Keys promoted to typed Document fields; everything else passes through
RECOGNIZED_KEYS = {
    "title",
    "date",
    "layout",
    "tag",
    "tags",
    "category",
    "author",
    "star",
    "description",
}


def _optional_str(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


class FilesystemSource(DocumentSource):
    """Load posts from a directory tree."""

    EXTENSIONS = (".md", ".markdown")

    def __init__(
        self,
        posts_dir: Path,
        tz: tzinfo = timezone.utc,
        default_layout: str = "post",
    ) -> None:
        self.posts_dir = posts_dir
        self.tz = tz
        self.default_layout = default_layout

    def discover(self) -> list[Path]:
        """List source files in lexical order of their relative path."""
        if not self.posts_dir.is_dir():
            raise BuildError(f"Posts directory not found: {self.posts_dir}")

        paths = []
        for path in self.posts_dir.rglob("*"):
            if not path.is_file() or path.suffix.lower() not in self.EXTENSIONS:
                continue
            relative = path.relative_to(self.posts_dir)
            # Skip drafts, partials and dotfiles below the root
            if any(part.startswith(("_", ".")) for part in relative.parts):
                continue
            paths.append(path)

        return sorted(paths, key=lambda p: p.relative_to(self.posts_dir).as_posix())

    async def load_documents(self) -> list[Document]:
        """Load every post in parallel, reporting all malformed files at once."""
        paths = self.discover()
        results = await asyncio.gather(
            *(asyncio.to_thread(self.load_file, path) for path in paths),
            return_exceptions=True,
        )

        documents: list[Document] = []
        errors: list[BuildError] = []
        for result in results:
            if isinstance(result, BuildError):
                errors.append(result)
            elif isinstance(result, BaseException):
                raise result
            else:
                documents.append(result)

        if errors:
            raise BuildFailed(errors)
        return documents

    def load_file(self, path: Path) -> Document:
        """Parse a single source file into a Document."""
        try:
            text = path.read_text(encoding="utf-8")
        except UnicodeDecodeError as e:
            raise MalformedDocument(path, f"not valid UTF-8: {e}") from e
        except OSError as e:
            raise MalformedDocument(path, f"cannot read file: {e}") from e

        try:
            metadata, body = parse_front_matter(text)
        except ValueError as e:
            raise MalformedDocument(path, str(e)) from e

        return self.to_document(path, metadata, body)

    def to_document(self, path: Path, metadata: dict[str, Any], body: str) -> Document:
        """Validate required fields and promote a mapping to a Document."""
        title = _optional_str(metadata.get("title"))
        if not title:
            raise MalformedDocument(path, "missing required field 'title'")

        if metadata.get("date") is None:
            raise MalformedDocument(path, "missing required field 'date'")
        try:
            date = parse_date(metadata["date"], self.tz)
        except ValueError as e:
            raise MalformedDocument(path, str(e)) from e

        extra = {key: value for key, value in metadata.items() if key not in RECOGNIZED_KEYS}

        return Document(
            source_path=path,
            title=title,
            date=date,
            body=body,
            layout=_optional_str(metadata.get("layout")) or self.default_layout,
            tags=parse_tags(metadata),
            category=_optional_str(metadata.get("category")),
            author=_optional_str(metadata.get("author")),
            star=parse_flag(metadata.get("star")),
            description=_optional_str(metadata.get("description")),
            extra=extra,
        )
