"""Jinja2 layout resolution and application."""

from datetime import datetime, timezone, tzinfo
from pathlib import Path
from typing import Any, Mapping, Optional

import jinja2
from markupsafe import Markup, escape

from blog_builder.core import LayoutError, TemplateHandle, TemplateNotFound, TemplateResolver
from blog_builder.core.permalinks import slugify


class JinjaTemplates(TemplateResolver):
    """Resolve layouts from the site's layouts directory, then the bundled theme."""

    SUFFIXES = ("", ".html", ".xml")

    def __init__(
        self,
        layouts_dir: Optional[Path] = None,
        site_url: str = "",
        baseurl: str = "",
        tz: tzinfo = timezone.utc,
        date_format: str = "%b %d, %Y",
        use_default_theme: bool = True,
    ) -> None:
        self.site_url = site_url.rstrip("/")
        self.baseurl = "/" + baseurl.strip("/") if baseurl.strip("/") else ""
        self.tz = tz
        self.date_format = date_format

        loaders: list[jinja2.BaseLoader] = []
        if layouts_dir is not None and layouts_dir.is_dir():
            loaders.append(jinja2.FileSystemLoader(str(layouts_dir)))
        if use_default_theme:
            loaders.append(jinja2.PackageLoader("blog_builder", "templates"))

        self.env = jinja2.Environment(
            loader=jinja2.ChoiceLoader(loaders),
            autoescape=jinja2.select_autoescape(["html", "xml"]),
            keep_trailing_newline=True,
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.env.filters.update({
            "date_to_string": self.date_to_string,
            "date_to_xmlschema": self.date_to_xmlschema,
            "xml_escape": escape,
            "slugify": slugify,
            "relative_url": self.relative_url,
            "absolute_url": self.absolute_url,
        })

    def resolve(self, layout: str) -> TemplateHandle:
        """Find the template for a layout name."""
        for suffix in self.SUFFIXES:
            try:
                template = self.env.get_template(f"{layout}{suffix}")
            except jinja2.TemplateNotFound:
                continue
            except jinja2.TemplateSyntaxError as e:
                raise LayoutError(layout, f"line {e.lineno}: {e.message}") from e
            return template.render
        raise TemplateNotFound(layout)

    def apply(self, handle: TemplateHandle, metadata: Mapping[str, Any], body: str) -> str:
        """Render a resolved layout; `content` is the already-rendered body."""
        context = dict(metadata)
        context["content"] = Markup(body)
        try:
            return handle(**context)
        except jinja2.TemplateNotFound as e:
            # A parent layout named by {% extends %} is missing
            raise TemplateNotFound(e.name) from e
        except jinja2.TemplateSyntaxError as e:
            raise LayoutError(e.name, f"line {e.lineno}: {e.message}") from e
        except jinja2.TemplateError as e:
            raise LayoutError(None, str(e)) from e

    def date_to_string(self, value: datetime, fmt: Optional[str] = None) -> str:
        return value.astimezone(self.tz).strftime(fmt or self.date_format)

    def date_to_xmlschema(self, value: datetime) -> str:
        return value.astimezone(self.tz).isoformat()

    def relative_url(self, path: str) -> str:
        if not path.startswith("/"):
            path = "/" + path
        return f"{self.baseurl}{path}"

    def absolute_url(self, path: str) -> str:
        return f"{self.site_url}{self.relative_url(path)}"
