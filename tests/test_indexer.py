"""Tests for the metadata indexer."""

from datetime import datetime, timezone
from pathlib import Path
from unittest.mock import Mock

import pytest

from blog_builder.core import IndexingError, build_site_index


def _date(year: int, month: int, day: int) -> datetime:
    return datetime(year, month, day, tzinfo=timezone.utc)


def test_chronological_order(make_document) -> None:
    """Test documents are listed newest first."""
    docs = [
        make_document("a.md", "A", _date(2017, 8, 14)),
        make_document("b.md", "B", _date(2018, 5, 24)),
        make_document("c.md", "C", _date(2017, 8, 15)),
    ]

    index = build_site_index(docs)

    assert [d.date.date().isoformat() for d in index.documents] == [
        "2018-05-24",
        "2017-08-15",
        "2017-08-14",
    ]


def test_equal_dates_keep_filename_order(make_document) -> None:
    """Test ties are broken by source filename, independent of input order."""
    same = _date(2017, 8, 14)
    docs = [
        make_document("c.md", "C", same),
        make_document("a.md", "A", same),
        make_document("z.md", "Newer", _date(2017, 8, 20)),
        make_document("b.md", "B", same),
    ]

    index = build_site_index(docs)

    assert [d.filename for d in index.documents] == ["z.md", "a.md", "b.md", "c.md"]
    assert [d.filename for d in build_site_index(reversed(docs)).documents] == [
        "z.md", "a.md", "b.md", "c.md",
    ]


def test_every_document_appears_once(make_document) -> None:
    """Test the chronological sequence holds each document exactly once."""
    docs = [make_document(f"{i}.md", f"Post {i}", _date(2017, 1, i + 1)) for i in range(5)]

    index = build_site_index(docs)

    assert len(index.documents) == 5
    assert {id(d) for d in index.documents} == {id(d) for d in docs}


def test_tag_buckets(make_document) -> None:
    """Test a document appears in exactly the buckets of its tags."""
    both = make_document("both.md", "Both", _date(2017, 8, 15), tags=("rails", "ruby"))
    ruby = make_document("ruby.md", "Ruby", _date(2017, 8, 16), tags=("ruby",))
    none = make_document("none.md", "None", _date(2017, 8, 17))

    index = build_site_index([both, ruby, none])

    assert list(index.tags) == ["rails", "ruby"]
    assert index.tags["rails"] == (both,)
    assert index.tags["ruby"] == (ruby, both)
    for tag, bucket in index.tags.items():
        assert (both in bucket) == (tag in both.tags)
    assert all(none not in bucket for bucket in index.tags.values())


def test_category_buckets(make_document) -> None:
    """Test categories group documents chronologically."""
    old = make_document("old.md", "Old", _date(2016, 1, 1), category="ruby")
    new = make_document("new.md", "New", _date(2018, 1, 1), category="ruby")
    other = make_document("other.md", "Other", _date(2017, 1, 1), category="life")
    uncategorized = make_document("u.md", "U", _date(2017, 6, 1))

    index = build_site_index([old, other, new, uncategorized])

    assert list(index.categories) == ["life", "ruby"]
    assert index.categories["ruby"] == (new, old)
    assert index.categories["life"] == (other,)


def test_tag_spellings_sharing_a_slug_share_a_bucket(make_document) -> None:
    """Test tags differing only in case or punctuation are merged."""
    upper = make_document("a.md", "A", _date(2017, 8, 14), tags=("Rails",))
    lower = make_document("b.md", "B", _date(2017, 8, 15), tags=("rails", "Rails!"))

    index = build_site_index([upper, lower])

    assert list(index.tags) == ["Rails"]
    assert index.tags["Rails"] == (lower, upper)


def test_category_spellings_sharing_a_slug_share_a_bucket(make_document) -> None:
    """Test categories are bucketed by their listing slug."""
    spaced = make_document("a.md", "A", _date(2017, 8, 14), category="Ruby on Rails")
    dashed = make_document("b.md", "B", _date(2017, 8, 15), category="ruby-on-rails")

    index = build_site_index([spaced, dashed])

    assert list(index.categories) == ["Ruby on Rails"]
    assert index.categories["Ruby on Rails"] == (dashed, spaced)


def test_previous_and_next(make_document) -> None:
    """Test chronological neighbours."""
    first = make_document("1.md", "First", _date(2017, 1, 1))
    second = make_document("2.md", "Second", _date(2017, 1, 2))
    third = make_document("3.md", "Third", _date(2017, 1, 3))

    index = build_site_index([first, second, third])

    assert index.previous(second) is first
    assert index.next(second) is third
    assert index.next(third) is None
    assert index.previous(first) is None


def test_empty_corpus() -> None:
    """Test an empty corpus gives empty views."""
    index = build_site_index([])

    assert index.documents == ()
    assert dict(index.tags) == {}
    assert dict(index.categories) == {}


def test_missing_date_fails_fast(make_document) -> None:
    """Test the defensive date check."""
    broken = Mock(date=None, source_path=Path("_posts/broken.md"), tags=(), category=None)

    with pytest.raises(IndexingError, match="broken.md"):
        build_site_index([make_document(), broken])
