"""Markdown engine backed by Python-Markdown."""

from typing import Any, Optional, Sequence

import markdown
from bs4 import BeautifulSoup

from blog_builder.core import MarkdownEngine

DEFAULT_EXTENSIONS = ["fenced_code", "tables", "footnotes", "sane_lists", "toc"]


class PythonMarkdownEngine(MarkdownEngine):
    """Convert Markdown to HTML with Python-Markdown."""

    def __init__(
        self,
        extensions: Optional[list[str]] = None,
        extension_configs: Optional[dict[str, dict[str, Any]]] = None,
    ) -> None:
        self.extensions = list(extensions) if extensions is not None else list(DEFAULT_EXTENSIONS)
        self.extension_configs = extension_configs or {}

    def render(self, markdown_text: str, language_hints: Sequence[str] = ()) -> str:
        """Render Markdown, marking up highlighted code blocks.

        A new Markdown instance per call: instances carry parse state and
        are not safe to share between threads.
        """
        md = markdown.Markdown(
            extensions=self.extensions,
            extension_configs=self.extension_configs,
            output_format="html",
        )
        html = md.convert(markdown_text)

        if language_hints:
            html = self._mark_highlight_blocks(html, set(language_hints))
        return html

    def _mark_highlight_blocks(self, html: str, languages: set[str]) -> str:
        """Wrap code blocks in the markup Jekyll's highlight tag produces."""
        soup = BeautifulSoup(html, "html.parser")
        changed = False

        for code in soup.select("pre > code"):
            language = None
            for css_class in code.get("class", []):
                if css_class.startswith("language-"):
                    language = css_class[len("language-"):]
                    break
            if language not in languages:
                continue

            code["data-lang"] = language
            pre = code.parent
            figure = soup.new_tag("figure", attrs={"class": "highlight"})
            pre.wrap(figure)
            changed = True

        return str(soup) if changed else html
