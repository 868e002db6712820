"""Permalink derivation for posts and listing pages."""

import hashlib
from datetime import tzinfo
from pathlib import PurePosixPath
from typing import Optional

from markdown.extensions.toc import slugify_unicode

from blog_builder.core.entities import Document, ListingKind

DEFAULT_PATTERN = "/:year/:month/:day/:title.html"


def slugify(text: str) -> str:
    """URL-safe slug that keeps non-ASCII letters."""
    return slugify_unicode(text or "", "-")


def term_slug(term: str) -> str:
    """Slug for a tag or category name.

    Names with no sluggable characters (``++``, ``?``, emoji) get a short
    digest of the name so each still has its own directory.
    """
    slug = slugify(term)
    if slug:
        return slug
    return "t-" + hashlib.sha1(term.encode("utf-8")).hexdigest()[:8]


def document_slug(document: Document) -> str:
    """Slug from the title, falling back to the source filename."""
    slug = slugify(document.title)
    if not slug:
        slug = slugify(document.source_path.stem)
    return slug or "post"


def permalink(document: Document, pattern: str = DEFAULT_PATTERN, tz: Optional[tzinfo] = None) -> str:
    """Derive a post's URL path from its date and title.

    Supported tokens: ``:year``, ``:month``, ``:day``, ``:title`` and
    ``:categories``.

    Titles are slugged, so titles differing only in case or punctuation
    ("Ruby" and "ruby", "C#" and "C") on the same day share a permalink.
    The assembler reports those as :class:`DuplicatePermalink`.
    """
    date = document.date.astimezone(tz) if tz is not None else document.date
    category = term_slug(document.category) if document.category else ""

    url = (
        pattern.replace(":year", f"{date.year:04d}")
        .replace(":month", f"{date.month:02d}")
        .replace(":day", f"{date.day:02d}")
        .replace(":categories", category)
        .replace(":title", document_slug(document))
    )
    # Empty :categories leaves a double slash behind
    while "//" in url:
        url = url.replace("//", "/")
    if not url.startswith("/"):
        url = "/" + url
    return url


def output_path(url: str) -> str:
    """Relative filesystem path for a URL path.

    Repeated slashes and ``.`` segments are collapsed, so two URLs naming
    the same file give the same path.
    """
    stripped = url.strip("/")
    path = PurePosixPath(stripped).as_posix() if stripped else ""
    if path == ".":
        path = ""
    if not path:
        return "index.html"
    if url.endswith("/"):
        return f"{path}/index.html"
    return path


def listing_permalink(kind: ListingKind, key: Optional[str] = None, page: int = 1) -> str:
    """URL path of a generated listing page."""
    if kind == ListingKind.HOME:
        return "/" if page <= 1 else f"/page{page}/"
    if kind == ListingKind.TAG:
        return f"/tags/{term_slug(key or '')}/"
    if kind == ListingKind.CATEGORY:
        return f"/categories/{term_slug(key or '')}/"
    if kind == ListingKind.TAGS_OVERVIEW:
        return "/tags/"
    if kind == ListingKind.CATEGORIES_OVERVIEW:
        return "/categories/"
    if kind == ListingKind.FEED:
        return "/feed.xml"
    raise ValueError(f"Unknown listing kind: {kind}")
