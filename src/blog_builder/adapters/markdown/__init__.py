"""Markdown engine adapters."""

from blog_builder.adapters.markdown.python_markdown import PythonMarkdownEngine

__all__ = ["PythonMarkdownEngine"]
