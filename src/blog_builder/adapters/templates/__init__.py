"""Template adapters."""

from blog_builder.adapters.templates.jinja_templates import JinjaTemplates

__all__ = ["JinjaTemplates"]
