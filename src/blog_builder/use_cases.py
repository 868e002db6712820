"""Business logic use cases."""

import shutil
import sys
from dataclasses import dataclass, field
from datetime import timezone, tzinfo
from pathlib import Path, PurePosixPath
from typing import Optional, Sequence, Union

from blog_builder.core import (
    BuildError,
    Document,
    DocumentSource,
    DuplicatePermalink,
    ListingKind,
    ListingView,
    RenderedPage,
    SiteIndex,
    build_site_index,
)
from blog_builder.core.permalinks import DEFAULT_PATTERN, listing_permalink, output_path, permalink
from blog_builder.renderer import Renderer


@dataclass
class BuildReport:
    """Outcome of a build or check run."""

    documents: int = 0
    tags: int = 0
    categories: int = 0
    pages: int = 0
    output_dir: Optional[Path] = None
    written: list[str] = field(default_factory=list)


def describe_view(view: ListingView) -> str:
    """Human-readable name of a generated page for error reports."""
    label = f"{view.kind.value} listing"
    if view.key:
        label += f" '{view.key}'"
    if view.total_pages > 1:
        label += f" page {view.page_number}"
    return label


class SiteAssembler:
    """Plan output paths and write rendered pages to the output tree."""

    def __init__(
        self,
        permalink_pattern: str = DEFAULT_PATTERN,
        tz: tzinfo = timezone.utc,
        paginate: int = 0,
        feed: bool = True,
        feed_limit: int = 20,
        static_dir: Optional[Path] = None,
    ) -> None:
        self.permalink_pattern = permalink_pattern
        self.tz = tz
        self.paginate = paginate
        self.feed = feed
        self.feed_limit = feed_limit
        self.static_dir = static_dir

    def plan_documents(self, index: SiteIndex) -> dict[str, Document]:
        """Map each output path to its document, rejecting collisions."""
        planned: dict[str, Document] = {}
        for document in index.documents:
            url = permalink(document, self.permalink_pattern, self.tz)
            path = output_path(url)
            if path in planned:
                raise DuplicatePermalink(url, planned[path].source_path, document.source_path)
            planned[path] = document
        return planned

    def listing_views(self, index: SiteIndex) -> list[ListingView]:
        """Home pages, one page per tag and category, overviews and feed."""
        views = self._paginate_home(index.documents)

        for tag, documents in index.tags.items():
            views.append(ListingView(
                kind=ListingKind.TAG,
                path=listing_permalink(ListingKind.TAG, tag),
                documents=documents,
                key=tag,
            ))
        for category, documents in index.categories.items():
            views.append(ListingView(
                kind=ListingKind.CATEGORY,
                path=listing_permalink(ListingKind.CATEGORY, category),
                documents=documents,
                key=category,
            ))

        views.append(ListingView(
            kind=ListingKind.TAGS_OVERVIEW,
            path=listing_permalink(ListingKind.TAGS_OVERVIEW),
            documents=(),
        ))
        views.append(ListingView(
            kind=ListingKind.CATEGORIES_OVERVIEW,
            path=listing_permalink(ListingKind.CATEGORIES_OVERVIEW),
            documents=(),
        ))

        if self.feed:
            limit = self.feed_limit if self.feed_limit > 0 else len(index.documents)
            views.append(ListingView(
                kind=ListingKind.FEED,
                path=listing_permalink(ListingKind.FEED),
                documents=index.documents[:limit],
            ))

        return views

    def _paginate_home(self, documents: tuple[Document, ...]) -> list[ListingView]:
        per_page = self.paginate if self.paginate > 0 else max(len(documents), 1)
        chunks = [documents[i:i + per_page] for i in range(0, len(documents), per_page)] or [()]
        total = len(chunks)

        views = []
        for number, chunk in enumerate(chunks, 1):
            views.append(ListingView(
                kind=ListingKind.HOME,
                path=listing_permalink(ListingKind.HOME, page=number),
                documents=chunk,
                page_number=number,
                total_pages=total,
                previous_path=listing_permalink(ListingKind.HOME, page=number - 1) if number > 1 else None,
                next_path=listing_permalink(ListingKind.HOME, page=number + 1) if number < total else None,
            ))
        return views

    def plan(self, index: SiteIndex) -> tuple[dict[str, Document], list[ListingView]]:
        """Plan every output path; any two sharing a path abort the build."""
        planned = self.plan_documents(index)
        views = self.listing_views(index)

        taken: dict[str, Union[Path, str]] = {path: doc.source_path for path, doc in planned.items()}
        for view in views:
            path = output_path(view.path)
            if path in taken:
                raise DuplicatePermalink(view.path, taken[path], describe_view(view))
            taken[path] = describe_view(view)

        return planned, views

    def write(self, pages: Sequence[RenderedPage], output_dir: Path) -> list[str]:
        """
        Replace the output tree with the given pages.

        Returns:
            Relative paths written, in sorted order
        """
        seen: dict[str, RenderedPage] = {}
        for page in pages:
            path = PurePosixPath(page.path).as_posix()
            if path in seen:
                raise DuplicatePermalink("/" + path, seen[path].source_path, page.source_path)
            seen[path] = page

        self._clear(output_dir)

        if self.static_dir is not None and self.static_dir.is_dir():
            shutil.copytree(self.static_dir, output_dir / self.static_dir.name, dirs_exist_ok=True)

        written = []
        for path in sorted(seen):
            target = output_dir / path
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(seen[path].content)
            written.append(path)
        return written

    def _clear(self, output_dir: Path) -> None:
        """Remove prior output, keeping the directory itself."""
        output_dir.mkdir(parents=True, exist_ok=True)
        for child in output_dir.iterdir():
            if child.is_dir() and not child.is_symlink():
                shutil.rmtree(child)
            else:
                child.unlink()


class BuildService:
    """Run the load, index, render and assemble phases in order."""

    def __init__(
        self,
        source: DocumentSource,
        renderer: Renderer,
        assembler: SiteAssembler,
        output_dir: Path,
        quiet: bool = False,
    ) -> None:
        self.source = source
        self.renderer = renderer
        self.assembler = assembler
        self.output_dir = output_dir
        self.quiet = quiet

    def _print(self, message: str = "") -> None:
        if not self.quiet:
            print(message)

    def _stage(self, title: str) -> None:
        self._print("\n" + "=" * 70)
        self._print(title)
        self._print("=" * 70)

    async def index(self) -> SiteIndex:
        """Load every document and build the site index."""
        self._stage("📥 STAGE 1: LOADING DOCUMENTS")
        documents = await self.source.load_documents()
        self._print(f"✓ Loaded {len(documents)} documents")

        self._stage("🗂️  STAGE 2: INDEXING")
        index = build_site_index(documents)
        self._print(f"  └─ Tags: {len(index.tags)}")
        self._print(f"  └─ Categories: {len(index.categories)}")
        return index

    async def check(self) -> BuildReport:
        """Validate sources and permalinks without rendering or writing."""
        index = await self.index()
        planned, views = self.assembler.plan(index)
        self._print(f"\n✓ {len(planned)} posts and {len(views)} listing pages planned")
        return BuildReport(
            documents=len(index.documents),
            tags=len(index.tags),
            categories=len(index.categories),
            pages=len(planned) + len(views),
        )

    async def build(self) -> BuildReport:
        """Build the whole site into the output directory."""
        index = await self.index()
        _, views = self.assembler.plan(index)

        self._stage("🎨 STAGE 3: RENDERING")
        pages = await self.renderer.render_site(index, views)
        self._print(f"✓ Rendered {len(pages)} pages")

        self._stage("📦 STAGE 4: WRITING SITE")
        written = self.assembler.write(pages, self.output_dir)
        self._print(f"✓ Site written to {self.output_dir}")

        return BuildReport(
            documents=len(index.documents),
            tags=len(index.tags),
            categories=len(index.categories),
            pages=len(pages),
            output_dir=self.output_dir,
            written=written,
        )


def report_error(error: BuildError) -> None:
    """Print a build error report to stderr."""
    print("\n" + "=" * 70, file=sys.stderr)
    print("❌ BUILD FAILED", file=sys.stderr)
    print("=" * 70, file=sys.stderr)
    print(str(error), file=sys.stderr)
