"""Build errors.

Every error here is fatal to the artifact it concerns. Document-level
errors are collected into a single :class:`BuildFailed` so the author
sees all of them after one run.
"""

from pathlib import Path
from typing import Iterable, Optional, Union


class BuildError(Exception):
    """Base class for all build-time failures."""


class MalformedDocument(BuildError):
    """Front matter missing, unterminated or carrying an invalid value."""

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"{path}: {reason}")


class IndexingError(BuildError):
    """A loaded document violates an indexer invariant."""

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"{path}: {reason}")


class TemplateNotFound(BuildError):
    """A layout name has no matching template."""

    def __init__(self, layout: str, path: Optional[Path] = None) -> None:
        self.layout = layout
        self.path = path
        where = f"{path}: " if path else ""
        super().__init__(f"{where}layout '{layout}' has no template")


class LayoutError(BuildError):
    """A layout failed to compile or render."""

    def __init__(self, layout: Optional[str], reason: str, path: Optional[Path] = None) -> None:
        self.layout = layout
        self.reason = reason
        self.path = path
        where = f"{path}: " if path else ""
        name = f"layout '{layout}'" if layout else "layout"
        super().__init__(f"{where}{name} failed: {reason}")


class DuplicatePermalink(BuildError):
    """Two distinct sources derive the same output path."""

    def __init__(
        self,
        permalink: str,
        first: Optional[Union[Path, str]],
        second: Optional[Union[Path, str]],
    ) -> None:
        self.permalink = permalink
        self.first = first
        self.second = second
        super().__init__(
            f"permalink {permalink} is produced by both "
            f"{first or '<generated page>'} and {second or '<generated page>'}"
        )


class BuildFailed(BuildError):
    """Aggregate of independent document-level errors."""

    def __init__(self, errors: Iterable[BuildError]) -> None:
        self.errors = list(errors)
        lines = [f"{len(self.errors)} error(s):"]
        lines.extend(f"  - {error}" for error in self.errors)
        super().__init__("\n".join(lines))
