"""Core domain entities."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping, Optional


class ListingKind(str, Enum):
    """Kind of generated listing page."""

    HOME = "home"
    TAG = "tag"
    CATEGORY = "category"
    TAGS_OVERVIEW = "tags_overview"
    CATEGORIES_OVERVIEW = "categories_overview"
    FEED = "feed"


@dataclass(frozen=True)
class Document:
    """One source post, immutable after load."""

    source_path: Path
    title: str
    date: datetime
    body: str
    layout: str = "post"
    tags: tuple[str, ...] = ()
    category: Optional[str] = None
    author: Optional[str] = None
    star: bool = False
    description: Optional[str] = None
    extra: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.title:
            raise ValueError("Title cannot be empty")
        if self.date is None:
            raise ValueError("Date cannot be empty")
        # Freeze pass-through metadata so templates can't mutate it
        object.__setattr__(self, "extra", MappingProxyType(dict(self.extra)))

    @property
    def filename(self) -> str:
        return self.source_path.name

    def metadata(self) -> dict[str, Any]:
        """Flat mapping of front matter handed to templates."""
        data: dict[str, Any] = dict(self.extra)
        data.update({
            "title": self.title,
            "date": self.date,
            "layout": self.layout,
            "tags": list(self.tags),
            "category": self.category,
            "author": self.author,
            "star": self.star,
            "description": self.description,
        })
        return data


@dataclass(frozen=True)
class SiteIndex:
    """Build-scoped views over the whole corpus.

    Attributes:
        documents: All documents, newest first
        tags: Tag name to documents carrying it, newest first
        categories: Category name to its documents, newest first
    """

    documents: tuple[Document, ...]
    tags: Mapping[str, tuple[Document, ...]]
    categories: Mapping[str, tuple[Document, ...]]

    def position(self, document: Document) -> int:
        for i, candidate in enumerate(self.documents):
            if candidate is document:
                return i
        raise KeyError(str(document.source_path))

    def previous(self, document: Document) -> Optional[Document]:
        """Older neighbour in the chronological sequence."""
        i = self.position(document)
        return self.documents[i + 1] if i + 1 < len(self.documents) else None

    def next(self, document: Document) -> Optional[Document]:
        """Newer neighbour in the chronological sequence."""
        i = self.position(document)
        return self.documents[i - 1] if i > 0 else None


@dataclass(frozen=True)
class ListingView:
    """One generated listing page over a slice of the index."""

    kind: ListingKind
    path: str
    documents: tuple[Document, ...]
    key: Optional[str] = None
    page_number: int = 1
    total_pages: int = 1
    previous_path: Optional[str] = None
    next_path: Optional[str] = None


@dataclass(frozen=True)
class RenderedPage:
    """Output artifact: relative output path plus bytes."""

    path: str
    content: bytes
    source_path: Optional[Path] = None

    def __post_init__(self) -> None:
        if not self.path or self.path.startswith("/"):
            raise ValueError(f"Output path must be relative: {self.path!r}")
