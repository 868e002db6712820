"""Tests for the Python-Markdown engine."""

from bs4 import BeautifulSoup

from blog_builder.adapters.markdown import PythonMarkdownEngine


def test_render_basic_markdown() -> None:
    """Test headings, emphasis and tables render."""
    engine = PythonMarkdownEngine()

    html = engine.render("# Title\n\nSome *text*.\n\n| a | b |\n|---|---|\n| 1 | 2 |\n", [])
    soup = BeautifulSoup(html, "html.parser")

    assert soup.find("h1").get_text() == "Title"
    assert soup.find("em").get_text() == "text"
    assert soup.find("table") is not None


def test_render_fenced_code_without_hints() -> None:
    """Test fenced code keeps the plain pre/code markup."""
    engine = PythonMarkdownEngine()

    html = engine.render("```ruby\nputs 1\n```\n", [])
    soup = BeautifulSoup(html, "html.parser")

    code = soup.select_one("pre > code")
    assert "language-ruby" in code["class"]
    assert soup.find("figure") is None
    assert not code.has_attr("data-lang")


def test_render_marks_hinted_languages() -> None:
    """Test hinted code blocks get the highlight figure wrapper."""
    engine = PythonMarkdownEngine()

    html = engine.render("```ruby\nputs 1\n```\n\n```sql\nSELECT 1;\n```\n", ["ruby"])
    soup = BeautifulSoup(html, "html.parser")

    figure = soup.find("figure", class_="highlight")
    assert figure is not None
    assert figure.pre.code["data-lang"] == "ruby"
    assert "puts 1" in figure.get_text()

    sql = soup.select_one("code.language-sql")
    assert sql.find_parent("figure") is None


def test_render_is_deterministic() -> None:
    """Test repeated renders give identical output."""
    engine = PythonMarkdownEngine()
    text = "## Notes\n\nA footnote[^1].\n\n[^1]: Here.\n\n```ruby\nx = 1\n```\n"

    assert engine.render(text, ["ruby"]) == engine.render(text, ["ruby"])


def test_custom_extensions() -> None:
    """Test configured extension list replaces the defaults."""
    engine = PythonMarkdownEngine(extensions=[])

    html = engine.render("| a | b |\n|---|---|\n| 1 | 2 |\n", [])

    assert "<table>" not in html
