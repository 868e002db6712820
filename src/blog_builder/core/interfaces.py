"""Core interfaces for adapters."""

from abc import ABC, abstractmethod
from typing import Any, Callable, Mapping, Sequence

from blog_builder.core.entities import Document

# Resolved layout: takes the template context and returns rendered text
TemplateHandle = Callable[..., str]


class DocumentSource(ABC):
    """Interface for loading source documents."""

    @abstractmethod
    async def load_documents(self) -> list[Document]:
        """Load every document, raising BuildFailed with all load errors."""
        pass


class MarkdownEngine(ABC):
    """Interface for Markdown-to-HTML conversion."""

    @abstractmethod
    def render(self, markdown_text: str, language_hints: Sequence[str]) -> str:
        """Convert Markdown to HTML."""
        pass


class TemplateResolver(ABC):
    """Interface for resolving and applying layouts."""

    @abstractmethod
    def resolve(self, layout: str) -> TemplateHandle:
        """Look up a layout by name.

        Raises TemplateNotFound if absent and LayoutError if it does not compile.
        """
        pass

    @abstractmethod
    def apply(self, handle: TemplateHandle, metadata: Mapping[str, Any], body: str) -> str:
        """Render a layout with page metadata and body HTML, raising LayoutError on failure."""
        pass
