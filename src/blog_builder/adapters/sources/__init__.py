"""Source adapters for loading documents."""

from blog_builder.adapters.sources.filesystem_source import FilesystemSource

__all__ = ["FilesystemSource"]
