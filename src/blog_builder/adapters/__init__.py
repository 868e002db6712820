"""Adapters for the filesystem, Markdown and templates."""
