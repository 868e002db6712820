"""Core domain layer."""

from blog_builder.core.entities import Document, ListingKind, ListingView, RenderedPage, SiteIndex
from blog_builder.core.errors import (
    BuildError,
    BuildFailed,
    DuplicatePermalink,
    IndexingError,
    LayoutError,
    MalformedDocument,
    TemplateNotFound,
)
from blog_builder.core.indexer import build_site_index
from blog_builder.core.interfaces import DocumentSource, MarkdownEngine, TemplateHandle, TemplateResolver

__all__ = [
    "Document",
    "ListingKind",
    "ListingView",
    "RenderedPage",
    "SiteIndex",
    "BuildError",
    "BuildFailed",
    "DuplicatePermalink",
    "IndexingError",
    "LayoutError",
    "MalformedDocument",
    "TemplateNotFound",
    "build_site_index",
    "DocumentSource",
    "MarkdownEngine",
    "TemplateHandle",
    "TemplateResolver",
]
