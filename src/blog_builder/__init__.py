"""Static blog builder: Markdown posts with YAML front matter to a static site."""

__version__ = "0.1.0"
