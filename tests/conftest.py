"""Shared fixtures for blog builder tests."""

from datetime import datetime, timezone
from pathlib import Path
from typing import Callable

import pytest

from blog_builder.core import Document


def post_source(title: str | None, date: str | None, body: str = "Hello.\n", **fields: str) -> str:
    """Build the text of a post file."""
    lines = ["---"]
    if title is not None:
        lines.append(f"title: {title}")
    if date is not None:
        lines.append(f"date: {date}")
    for key, value in fields.items():
        lines.append(f"{key}: {value}")
    lines.append("---")
    return "\n".join(lines) + "\n" + body


@pytest.fixture
def write_post(tmp_path: Path) -> Callable[..., Path]:
    """Write a post into `<tmp>/_posts` and return its path."""
    posts_dir = tmp_path / "_posts"
    posts_dir.mkdir(exist_ok=True)

    def _write(filename: str, title: str | None, date: str | None, body: str = "Hello.\n", **fields: str) -> Path:
        path = posts_dir / filename
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(post_source(title, date, body, **fields), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def make_document() -> Callable[..., Document]:
    """Create documents without touching the filesystem."""

    def _make(
        filename: str = "post.md",
        title: str = "A Post",
        date: datetime = datetime(2017, 8, 14, tzinfo=timezone.utc),
        **kwargs,
    ) -> Document:
        return Document(
            source_path=Path("_posts") / filename,
            title=title,
            date=date,
            body=kwargs.pop("body", "Body text."),
            **kwargs,
        )

    return _make
