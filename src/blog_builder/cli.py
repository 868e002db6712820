"""CLI entry point for blog builder."""

import asyncio
import functools
import sys
from http.server import SimpleHTTPRequestHandler, ThreadingHTTPServer
from pathlib import Path
from typing import Optional

import typer

from blog_builder.adapters.markdown import PythonMarkdownEngine
from blog_builder.adapters.sources import FilesystemSource
from blog_builder.adapters.templates import JinjaTemplates
from blog_builder.config import Settings, get_settings
from blog_builder.core import BuildError
from blog_builder.renderer import Renderer
from blog_builder.use_cases import BuildReport, BuildService, SiteAssembler, report_error

app = typer.Typer(help="Build a static blog from Markdown posts.", no_args_is_help=True)

CONFIG_OPTION = typer.Option(Path("_config.yml"), "--config", "-c", help="Path to the site config file")


def create_build_service(settings: Settings, quiet: bool = False) -> BuildService:
    """Wire adapters and services from settings."""
    tz = settings.tz

    source = FilesystemSource(
        settings.posts_dir,
        tz=tz,
        default_layout=settings.build.default_layout,
    )
    templates = JinjaTemplates(
        layouts_dir=settings.layouts_dir,
        site_url=settings.site.url,
        baseurl=settings.site.baseurl,
        tz=tz,
        date_format=settings.site.date_format,
        use_default_theme=settings.build.use_default_theme,
    )
    renderer = Renderer(
        markdown_engine=PythonMarkdownEngine(
            extensions=settings.markdown.extensions,
            extension_configs=settings.markdown.extension_configs,
        ),
        templates=templates,
        site=settings.site_context(),
        permalink_pattern=settings.build.permalink,
        tz=tz,
        listing_layouts=settings.listing_layouts,
    )
    assembler = SiteAssembler(
        permalink_pattern=settings.build.permalink,
        tz=tz,
        paginate=settings.build.paginate,
        feed=settings.build.feed,
        feed_limit=settings.build.feed_limit,
        static_dir=settings.static_dir,
    )
    return BuildService(source, renderer, assembler, settings.output_dir, quiet=quiet)


def _load_settings(config: Path, output: Optional[Path] = None) -> Settings:
    settings = get_settings(config)
    if output is not None:
        settings.paths.output_dir = output.resolve()
    try:
        settings.validate()
    except ValueError as e:
        print(f"❌ {e}", file=sys.stderr)
        raise typer.Exit(code=2)
    return settings


def _run_build(settings: Settings, quiet: bool) -> BuildReport:
    service = create_build_service(settings, quiet=quiet)
    try:
        return asyncio.run(service.build())
    except BuildError as e:
        report_error(e)
        raise typer.Exit(code=1)


@app.command()
def build(
    config: Path = CONFIG_OPTION,
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Output directory"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only print errors"),
) -> None:
    """Build the site into the output directory."""
    settings = _load_settings(config, output)
    report = _run_build(settings, quiet)

    if not quiet:
        print("\n" + "=" * 70)
        print("✅ DONE!")
        print("=" * 70)
        print(f"📄 Posts: {report.documents}")
        print(f"🏷️  Tags: {report.tags}")
        print(f"📁 Categories: {report.categories}")
        print(f"📦 Pages written: {len(report.written)} → {report.output_dir}")


@app.command()
def check(config: Path = CONFIG_OPTION) -> None:
    """Validate posts and permalinks without writing anything."""
    settings = _load_settings(config)
    service = create_build_service(settings)
    try:
        report = asyncio.run(service.check())
    except BuildError as e:
        report_error(e)
        raise typer.Exit(code=1)

    print(f"\n✅ {report.documents} posts OK")


@app.command()
def serve(
    config: Path = CONFIG_OPTION,
    host: str = typer.Option("127.0.0.1", help="Address to bind"),
    port: int = typer.Option(4000, "--port", "-p", help="Port to listen on"),
    no_build: bool = typer.Option(False, "--no-build", help="Serve existing output without rebuilding"),
) -> None:
    """Build, then serve the output directory for local preview."""
    settings = _load_settings(config)
    if not no_build:
        _run_build(settings, quiet=False)

    output_dir = settings.output_dir
    if not output_dir.is_dir():
        print(f"❌ Output directory not found: {output_dir}", file=sys.stderr)
        raise typer.Exit(code=1)

    handler = functools.partial(SimpleHTTPRequestHandler, directory=str(output_dir))
    with ThreadingHTTPServer((host, port), handler) as server:
        print(f"\n🌐 Serving {output_dir} at http://{host}:{port}/ (Ctrl+C to stop)")
        try:
            server.serve_forever()
        except KeyboardInterrupt:
            print("\nStopped.")


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
