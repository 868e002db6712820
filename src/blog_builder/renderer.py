"""Renderer: turns documents and listing views into pages."""

import asyncio
import re
from datetime import timezone, tzinfo
from pathlib import Path
from typing import Any, Mapping, Optional, Sequence

from bs4 import BeautifulSoup

from blog_builder.core import (
    BuildError,
    BuildFailed,
    Document,
    LayoutError,
    ListingKind,
    ListingView,
    MarkdownEngine,
    RenderedPage,
    SiteIndex,
    TemplateNotFound,
    TemplateResolver,
)
from blog_builder.core.permalinks import DEFAULT_PATTERN, listing_permalink, output_path, permalink

# {% highlight ruby linenos %} ... {% endhighlight %}
HIGHLIGHT_BLOCK = re.compile(
    r"^[ \t]*\{%-?\s*highlight\s+(?P<lang>[\w+#.-]+)(?P<options>[^%]*?)\s*-?%\}[ \t]*\r?\n"
    r"(?P<code>.*?)"
    r"^[ \t]*\{%-?\s*endhighlight\s*-?%\}[ \t]*$",
    re.MULTILINE | re.DOTALL,
)
RAW_MARKER = re.compile(r"\{%-?\s*(?:end)?raw\s*-?%\}")

DEFAULT_LISTING_LAYOUTS = {
    ListingKind.HOME: "home",
    ListingKind.TAG: "tag",
    ListingKind.CATEGORY: "category",
    ListingKind.TAGS_OVERVIEW: "tags",
    ListingKind.CATEGORIES_OVERVIEW: "categories",
    ListingKind.FEED: "feed.xml",
}


def convert_highlight_blocks(body: str) -> tuple[str, list[str]]:
    """
    Rewrite Liquid highlight blocks as fenced code.

    Returns:
        Tuple of (converted body, languages in order of first use)
    """
    languages: list[str] = []

    def replace(match: re.Match) -> str:
        language = match.group("lang")
        code = match.group("code")
        if language not in languages:
            languages.append(language)
        if not code.endswith("\n"):
            code += "\n"
        fence = "~~~~" if "```" in code else "```"
        return f"{fence}{language}\n{code}{fence}"

    converted = HIGHLIGHT_BLOCK.sub(replace, body)
    return RAW_MARKER.sub("", converted), languages


def first_paragraph_text(html: str) -> str:
    """Plain text of the first paragraph of rendered HTML."""
    soup = BeautifulSoup(html, "html.parser")
    paragraph = soup.find("p")
    if paragraph is None:
        return ""
    return " ".join(paragraph.get_text(" ", strip=True).split())


class Renderer:
    """Render documents and listing views through their layouts.

    Rendering is a pure transform; nothing is written to disk here.
    """

    def __init__(
        self,
        markdown_engine: MarkdownEngine,
        templates: TemplateResolver,
        site: Optional[Mapping[str, Any]] = None,
        permalink_pattern: str = DEFAULT_PATTERN,
        tz: tzinfo = timezone.utc,
        listing_layouts: Optional[Mapping[ListingKind, str]] = None,
    ) -> None:
        self.markdown_engine = markdown_engine
        self.templates = templates
        self.site = dict(site or {})
        self.permalink_pattern = permalink_pattern
        self.tz = tz
        self.listing_layouts = {**DEFAULT_LISTING_LAYOUTS, **(listing_layouts or {})}

    def url_for(self, document: Document) -> str:
        return permalink(document, self.permalink_pattern, self.tz)

    def render_body(self, document: Document) -> str:
        """Convert a document's Markdown body to HTML."""
        body, language_hints = convert_highlight_blocks(document.body)
        return self.markdown_engine.render(body, language_hints)

    def excerpt(self, document: Document, body_html: str) -> str:
        return document.description or first_paragraph_text(body_html)

    def summary(self, document: Document, excerpt: str = "") -> dict[str, Any]:
        """Template-facing view of a document without its content."""
        data = document.metadata()
        data.update({
            "url": self.url_for(document),
            "excerpt": excerpt,
            "source": document.source_path.name,
            "tag_links": [
                {"name": tag, "url": listing_permalink(ListingKind.TAG, tag)} for tag in document.tags
            ],
            "category_url": (
                listing_permalink(ListingKind.CATEGORY, document.category) if document.category else None
            ),
        })
        return data

    def site_context(self, index: SiteIndex, excerpts: Optional[Mapping[Path, str]] = None) -> dict[str, Any]:
        """Site-wide template data derived from the index."""
        excerpts = excerpts or {}
        context = dict(self.site)
        context.update({
            # Newest post date keeps the output reproducible, unlike the wall clock
            "time": index.documents[0].date if index.documents else None,
            "posts": [self.summary(d, excerpts.get(d.source_path, "")) for d in index.documents],
            "tags": [
                {"name": name, "url": listing_permalink(ListingKind.TAG, name), "count": len(docs)}
                for name, docs in index.tags.items()
            ],
            "categories": [
                {"name": name, "url": listing_permalink(ListingKind.CATEGORY, name), "count": len(docs)}
                for name, docs in index.categories.items()
            ],
        })
        return context

    def render_document(
        self,
        document: Document,
        index: SiteIndex,
        body_html: Optional[str] = None,
        site: Optional[Mapping[str, Any]] = None,
    ) -> RenderedPage:
        """Render one post through the layout named by its `layout` field."""
        try:
            handle = self.templates.resolve(document.layout)
        except TemplateNotFound as e:
            raise TemplateNotFound(e.layout, document.source_path) from e
        except LayoutError as e:
            raise LayoutError(e.layout or document.layout, e.reason, document.source_path) from e

        if body_html is None:
            body_html = self.render_body(document)

        page = self.summary(document, self.excerpt(document, body_html))
        page["content"] = body_html
        previous, newer = index.previous(document), index.next(document)
        page["previous"] = {"title": previous.title, "url": self.url_for(previous)} if previous else None
        page["next"] = {"title": newer.title, "url": self.url_for(newer)} if newer else None

        context = {
            "page": page,
            "site": site if site is not None else self.site_context(index),
        }
        try:
            html = self.templates.apply(handle, context, body_html)
        except TemplateNotFound as e:
            raise TemplateNotFound(e.layout, document.source_path) from e
        except LayoutError as e:
            raise LayoutError(e.layout or document.layout, e.reason, document.source_path) from e

        url = page["url"]
        return RenderedPage(
            path=output_path(url),
            content=html.encode("utf-8"),
            source_path=document.source_path,
        )

    def render_listing(
        self,
        view: ListingView,
        index: SiteIndex,
        excerpts: Optional[Mapping[Path, str]] = None,
        site: Optional[Mapping[str, Any]] = None,
    ) -> RenderedPage:
        """Render a listing view through its kind's layout."""
        excerpts = excerpts or {}
        layout = self.listing_layouts[view.kind]
        try:
            handle = self.templates.resolve(layout)
        except LayoutError as e:
            raise LayoutError(e.layout or layout, e.reason) from e

        context = {
            "page": {"title": view.key or "", "url": view.path, "layout": layout},
            "site": site if site is not None else self.site_context(index, excerpts),
            "listing": {"kind": view.kind.value, "key": view.key},
            "paginator": {
                "posts": [self.summary(d, excerpts.get(d.source_path, "")) for d in view.documents],
                "page": view.page_number,
                "total_pages": view.total_pages,
                "previous_page_path": view.previous_path,
                "next_page_path": view.next_path,
            },
        }
        try:
            html = self.templates.apply(handle, context, "")
        except LayoutError as e:
            raise LayoutError(e.layout or layout, e.reason) from e
        return RenderedPage(path=output_path(view.path), content=html.encode("utf-8"))

    async def render_site(self, index: SiteIndex, views: Sequence[ListingView]) -> list[RenderedPage]:
        """Render every document and listing.

        Bodies and pages are independent once the index exists, so each is
        rendered in a worker thread. Missing layouts for different documents
        are reported together.
        """
        bodies = await asyncio.gather(
            *(asyncio.to_thread(self.render_body, d) for d in index.documents)
        )
        body_by_path = {d.source_path: body for d, body in zip(index.documents, bodies)}
        excerpts = {d.source_path: self.excerpt(d, body_by_path[d.source_path]) for d in index.documents}
        site = self.site_context(index, excerpts)

        results = await asyncio.gather(
            *(
                asyncio.to_thread(self.render_document, d, index, body_by_path[d.source_path], site)
                for d in index.documents
            ),
            *(asyncio.to_thread(self.render_listing, v, index, excerpts, site) for v in views),
            return_exceptions=True,
        )

        pages: list[RenderedPage] = []
        errors: list[BuildError] = []
        for result in results:
            if isinstance(result, BuildError):
                errors.append(result)
            elif isinstance(result, BaseException):
                raise result
            else:
                pages.append(result)

        if errors:
            raise BuildFailed(errors)
        return pages
