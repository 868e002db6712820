"""Configuration management."""

import os
from dataclasses import asdict, dataclass, field
from datetime import tzinfo
from pathlib import Path
from zoneinfo import ZoneInfo

import yaml

from blog_builder.adapters.markdown.python_markdown import DEFAULT_EXTENSIONS
from blog_builder.core import ListingKind
from blog_builder.core.permalinks import DEFAULT_PATTERN, listing_permalink


@dataclass
class SiteConfig:
    """Site-wide values exposed to templates as `site`."""
    title: str = "My Blog"
    description: str = ""
    url: str = ""
    baseurl: str = ""
    author: str = ""
    lang: str = "en"
    timezone: str = "UTC"
    date_format: str = "%b %d, %Y"


@dataclass
class PathsConfig:
    """Path settings, relative to the config file's directory."""
    posts_dir: Path = Path("_posts")
    layouts_dir: Path = Path("_layouts")
    static_dir: Path = Path("assets")
    output_dir: Path = Path("_site")


@dataclass
class BuildConfig:
    """Build settings."""
    permalink: str = DEFAULT_PATTERN
    default_layout: str = "post"
    paginate: int = 10
    feed: bool = True
    feed_limit: int = 20
    use_default_theme: bool = True


@dataclass
class MarkdownConfig:
    """Python-Markdown settings."""
    extensions: list = field(default_factory=lambda: list(DEFAULT_EXTENSIONS))
    extension_configs: dict = field(default_factory=dict)


@dataclass
class LayoutsConfig:
    """Layout used for each generated listing page."""
    home: str = "home"
    tag: str = "tag"
    category: str = "category"
    tags: str = "tags"
    categories: str = "categories"
    feed: str = "feed.xml"


@dataclass
class Settings:
    """Application settings."""

    root_dir: Path = Path(".")

    # Config sections
    site: SiteConfig = field(default_factory=SiteConfig)
    paths: PathsConfig = field(default_factory=PathsConfig)
    build: BuildConfig = field(default_factory=BuildConfig)
    markdown: MarkdownConfig = field(default_factory=MarkdownConfig)
    layouts: LayoutsConfig = field(default_factory=LayoutsConfig)

    @property
    def tz(self) -> tzinfo:
        return ZoneInfo(self.site.timezone)

    @property
    def posts_dir(self) -> Path:
        return self.root_dir / self.paths.posts_dir

    @property
    def layouts_dir(self) -> Path:
        return self.root_dir / self.paths.layouts_dir

    @property
    def static_dir(self) -> Path:
        return self.root_dir / self.paths.static_dir

    @property
    def output_dir(self) -> Path:
        return self.root_dir / self.paths.output_dir

    @property
    def listing_layouts(self) -> dict[ListingKind, str]:
        return {
            ListingKind.HOME: self.layouts.home,
            ListingKind.TAG: self.layouts.tag,
            ListingKind.CATEGORY: self.layouts.category,
            ListingKind.TAGS_OVERVIEW: self.layouts.tags,
            ListingKind.CATEGORIES_OVERVIEW: self.layouts.categories,
            ListingKind.FEED: self.layouts.feed,
        }

    def site_context(self) -> dict:
        """Static part of the `site` template variable."""
        context = asdict(self.site)
        context["feed_url"] = listing_permalink(ListingKind.FEED) if self.build.feed else None
        return context

    def validate(self) -> None:
        """Reject settings that would make a build destroy its own sources."""
        output = self.output_dir.resolve()
        for protected in (self.root_dir, self.posts_dir, self.layouts_dir, self.static_dir):
            protected = protected.resolve()
            if output == protected or output in protected.parents:
                raise ValueError(f"Output directory {self.output_dir} would overwrite {protected}")
        try:
            ZoneInfo(self.site.timezone)
        except (KeyError, ValueError) as e:
            raise ValueError(f"Unknown timezone: {self.site.timezone}") from e


# Flat Jekyll-style keys accepted at the top level of the config file
FLAT_KEYS = {
    "title": ("site", "title"),
    "description": ("site", "description"),
    "url": ("site", "url"),
    "baseurl": ("site", "baseurl"),
    "author": ("site", "author"),
    "lang": ("site", "lang"),
    "timezone": ("site", "timezone"),
    "permalink": ("build", "permalink"),
    "paginate": ("build", "paginate"),
}


def load_config(config_path: Path = Path("_config.yml")) -> dict:
    """Load configuration from YAML file."""
    if not config_path.exists():
        return {}

    with open(config_path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def get_settings(config_path: Path = Path("_config.yml")) -> Settings:
    """Get settings from the YAML config and environment."""
    config = load_config(config_path)

    settings = Settings(root_dir=config_path.parent)

    for key, (section, attr) in FLAT_KEYS.items():
        if key in config and not isinstance(config[key], dict):
            setattr(getattr(settings, section), attr, config[key])

    # Apply YAML config
    if isinstance(config.get("site"), dict):
        for key, value in config["site"].items():
            setattr(settings.site, key, value)

    if isinstance(config.get("paths"), dict):
        for key, value in config["paths"].items():
            setattr(settings.paths, key, Path(value))

    if isinstance(config.get("build"), dict):
        for key, value in config["build"].items():
            setattr(settings.build, key, value)

    if isinstance(config.get("markdown"), dict):
        settings.markdown = MarkdownConfig(**config["markdown"])

    if isinstance(config.get("layouts"), dict):
        for key, value in config["layouts"].items():
            setattr(settings.layouts, key, value)

    # Environment overrides for deploy previews
    site_url = os.getenv("BLOG_SITE_URL")
    if site_url:
        settings.site.url = site_url

    output_dir = os.getenv("BLOG_OUTPUT_DIR")
    if output_dir:
        settings.paths.output_dir = Path(output_dir)

    return settings
