"""Shared front matter parsing utilities."""

import re
from datetime import date, datetime, tzinfo
from typing import Any

import yaml

OPENING_DELIMITER = "---"
CLOSING_DELIMITERS = ("---", "...")

# Jekyll writes dates like "2017-08-14 21:00:00 +0800", which YAML leaves as a string
DATE_FORMATS = (
    "%Y-%m-%d %H:%M:%S %z",
    "%Y-%m-%d %H:%M %z",
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%d %H:%M",
    "%Y-%m-%d",
)

TRUTHY = {"true", "yes", "on", "1"}


def split_front_matter(text: str) -> tuple[str, str]:
    """
    Split a source file into its front matter block and body.

    Args:
        text: Full file contents

    Returns:
        Tuple of (raw front matter, body)

    Raises:
        ValueError: If the opening delimiter is missing or the block is unterminated
    """
    text = text.lstrip("\ufeff")
    lines = text.splitlines(keepends=True)

    if not lines or lines[0].strip() != OPENING_DELIMITER:
        raise ValueError("missing front matter (file must start with '---')")

    for i in range(1, len(lines)):
        if lines[i].strip() in CLOSING_DELIMITERS:
            return "".join(lines[1:i]), "".join(lines[i + 1:])

    raise ValueError("unterminated front matter block")


def parse_front_matter(text: str) -> tuple[dict[str, Any], str]:
    """Parse the front matter block as a flat key/value mapping."""
    raw, body = split_front_matter(text)

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ValueError(f"invalid YAML in front matter: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ValueError(f"front matter must be a mapping, got {type(data).__name__}")

    return {str(key): value for key, value in data.items()}, body


def parse_date(value: Any, tz: tzinfo) -> datetime:
    """
    Parse a front matter date into an aware datetime.

    Naive values are interpreted in the site timezone.
    """
    parsed: datetime | None = None

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    elif isinstance(value, str) and value.strip():
        text = value.strip()
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            for fmt in DATE_FORMATS:
                try:
                    parsed = datetime.strptime(text, fmt)
                    break
                except ValueError:
                    continue

    if parsed is None:
        raise ValueError(f"unparsable date: {value!r}")

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=tz)
    return parsed


def parse_tags(metadata: dict[str, Any]) -> tuple[str, ...]:
    """Merge `tag` and `tags` into unique tags in authored order."""
    raw: list[str] = []
    for key in ("tag", "tags"):
        value = metadata.get(key)
        if value is None:
            continue
        if isinstance(value, str):
            raw.extend(re.split(r"[,\s]+", value))
        elif isinstance(value, (list, tuple, set)):
            raw.extend(str(v) for v in value if v is not None)
        else:
            raw.append(str(value))

    tags: list[str] = []
    for tag in raw:
        tag = tag.strip()
        if tag and tag not in tags:
            tags.append(tag)
    return tuple(tags)


def parse_flag(value: Any) -> bool:
    """Interpret a boolean-ish front matter value."""
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        return value.strip().lower() in TRUTHY
    return False
