"""Feed generation for orgsite.

This module renders the document served at the feed route (``feed.xml``) as
an Atom 1.0 feed built from the posts in a Model.

Classes:
    FeedEntry: Data for one post in the feed.
    AtomFeedGenerator: Generates the Atom document.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from .html_utils import escape_html, join_root_url
from .model import Model
from .pandoc import MetaFieldError, extract_meta, get_h1, render
from .routes import BlogPostRoute, FeedRoute, HtmlRoute, RouteResolver, default_resolver

DATE_RE = re.compile(r"(\d{4})-(\d{2})-(\d{2})")


@dataclass
class FeedEntry:
    """A post as it appears in the feed.

    Attributes:
        post_id: Id of the post in the model.
        title: Title as an HTML fragment.
        link: Absolute URL of the post page.
        date: Publication date, if the post declares one.
        summary: Short description, may be empty.
        content: Rendered post body.
    """

    post_id: str
    title: str
    link: str
    date: datetime | None
    summary: str
    content: str


def meta_text(meta: dict[str, Any] | None, key: str) -> str:
    """Return a flattened metadata field as a single string.

    List values produced by the "; " convention are joined back together.
    Missing fields and fields that failed to render give "".
    """
    if not meta:
        return ""
    value = meta.get(key)
    if value is None or isinstance(value, MetaFieldError):
        return ""
    if isinstance(value, list):
        return "; ".join(str(item) for item in value)
    return str(value)


def parse_date(text: str) -> datetime | None:
    """Find a YYYY-MM-DD date in metadata text such as "<2021-03-04 Thu>".

    Args:
        text: Date text from metadata.

    Returns:
        A UTC datetime at midnight, or None if no valid date is present.
    """
    match = DATE_RE.search(text)
    if not match:
        return None
    try:
        year, month, day = (int(part) for part in match.groups())
        return datetime(year, month, day, tzinfo=timezone.utc)
    except ValueError:
        return None


def _format_date(value: datetime) -> str:
    return value.strftime("%Y-%m-%dT%H:%M:%SZ")


class AtomFeedGenerator:
    """Generates the Atom feed served at the feed route.

    Requires 'url' in the site config to build absolute links. Uses 'title'
    and 'author' from the config when present.

    Attributes:
        resolver: Resolver used to find post and feed paths.
    """

    def __init__(self, resolver: RouteResolver | None = None):
        self.resolver = resolver or default_resolver

    def filename(self, model: Model) -> str:
        """Return the output path of the feed."""
        return self.resolver.encode(FeedRoute(), model)

    def entries(self, model: Model, base_url: str) -> list[FeedEntry]:
        """Build feed entries for every post, newest first.

        Posts without a date keep model order after the dated ones.

        Args:
            model: Model holding the posts.
            base_url: Site URL used to absolutize links.

        Returns:
            List of FeedEntry objects.
        """
        entries = []
        for post_id in model.keys():
            doc = model.lookup(post_id)
            meta = extract_meta(doc)
            route = HtmlRoute(BlogPostRoute(post_id))
            title = (
                escape_html(meta_text(meta, "title")) or get_h1(doc) or escape_html(post_id)
            )
            entries.append(
                FeedEntry(
                    post_id=post_id,
                    title=title,
                    link=join_root_url(base_url, self.resolver.encode(route, model)),
                    date=parse_date(meta_text(meta, "date")),
                    summary=meta_text(meta, "description") or meta_text(meta, "summary"),
                    content=render(doc),
                )
            )
        dated = sorted((e for e in entries if e.date), key=lambda e: e.date, reverse=True)
        return dated + [e for e in entries if e.date is None]

    def generate(self, model: Model, config: dict[str, Any]) -> str | None:
        """Generate the Atom document.

        Args:
            model: Model holding the posts.
            config: Site configuration containing 'url'.

        Returns:
            Feed XML content, or None if no base URL is configured.
        """
        base_url = str(config.get("url") or "").rstrip("/")
        if not base_url:
            return None
        title = config.get("title") or base_url
        entries = self.entries(model, base_url)
        dates = [e.date for e in entries if e.date]
        updated = max(dates) if dates else datetime.now(timezone.utc)
        feed_url = join_root_url(base_url, self.filename(model))

        lines = [
            '<?xml version="1.0" encoding="UTF-8"?>',
            '<feed xmlns="http://www.w3.org/2005/Atom">',
            f"<title>{escape_html(str(title))}</title>",
            f"<id>{escape_html(base_url)}/</id>",
            f'<link href="{escape_html(base_url)}/"/>',
            f'<link rel="self" href="{escape_html(feed_url)}"/>',
            f"<updated>{_format_date(updated)}</updated>",
        ]
        if config.get("author"):
            author = escape_html(str(config["author"]))
            lines.append(f"<author><name>{author}</name></author>")
        for entry in entries:
            entry_updated = _format_date(entry.date or updated)
            lines.append("<entry>")
            lines.append(f'<title type="html">{escape_html(entry.title)}</title>')
            lines.append(f"<id>{escape_html(entry.link)}</id>")
            lines.append(f'<link href="{escape_html(entry.link)}"/>')
            lines.append(f"<updated>{entry_updated}</updated>")
            if entry.summary:
                lines.append(f"<summary>{escape_html(entry.summary)}</summary>")
            lines.append(f'<content type="html">{escape_html(entry.content)}</content>')
            lines.append("</entry>")
        lines.append("</feed>")
        return "\n".join(lines)

    def write(self, output_dir: Path, model: Model, config: dict[str, Any]) -> bool:
        """Generate and write the feed to the output directory.

        Returns:
            True if the feed was written, False if skipped.
        """
        content = self.generate(model, config)
        if content is None:
            return False
        output_path = output_dir / self.filename(model)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(content, encoding="utf-8")
        return True
