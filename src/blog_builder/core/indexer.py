"""Metadata indexer: chronological, tag and category views."""

from types import MappingProxyType
from typing import Iterable, Mapping

from blog_builder.core.entities import Document, SiteIndex
from blog_builder.core.errors import IndexingError
from blog_builder.core.permalinks import term_slug


def sort_chronologically(documents: Iterable[Document]) -> list[Document]:
    """Sort newest first; equal dates keep filename order."""
    # Two stable passes: filename ascending, then date descending
    by_name = sorted(documents, key=lambda d: str(d.source_path))
    return sorted(by_name, key=lambda d: d.date, reverse=True)


def group_terms(pairs: Iterable[tuple[str, Document]]) -> Mapping[str, tuple[Document, ...]]:
    """Bucket documents by tag or category name.

    Spellings sharing a slug ("Rails", "rails") share one bucket, named by
    the first spelling in sorted order, since they share one listing page.
    """
    spellings: dict[str, set[str]] = {}
    buckets: dict[str, list[Document]] = {}
    for name, document in pairs:
        slug = term_slug(name)
        spellings.setdefault(slug, set()).add(name)
        bucket = buckets.setdefault(slug, [])
        if not any(d is document for d in bucket):
            bucket.append(document)

    named = {min(spellings[slug]): tuple(bucket) for slug, bucket in buckets.items()}
    return MappingProxyType({name: named[name] for name in sorted(named)})


def build_site_index(documents: Iterable[Document]) -> SiteIndex:
    """Aggregate loaded documents into a SiteIndex."""
    documents = list(documents)

    for document in documents:
        if getattr(document, "date", None) is None:
            raise IndexingError(document.source_path, "document has no date")

    ordered = sort_chronologically(documents)

    return SiteIndex(
        documents=tuple(ordered),
        tags=group_terms((tag, d) for d in ordered for tag in d.tags),
        categories=group_terms((d.category, d) for d in ordered if d.category),
    )
