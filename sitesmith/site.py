from __future__ import annotations

import datetime as dt
import html
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Optional

from .cache import SourceIndex
from .config import SiteConfig, load_ideas, load_site_config, render_ideas_html
from .content import Entry, load_content
from .feeds import build_feeds
from .layouts import apply_layouts
from .render import render_template, write_text
from .utils import BuildError, clean_output_dir, prefix_url, write_cname


@dataclass(frozen=True)
class RenderContext:
    """Everything a template may reference while one entry is rendered."""

    site: SiteConfig
    page: Mapping[str, Any]
    posts: tuple[Mapping[str, Any], ...]
    posts_html: str
    ideas: tuple[Mapping[str, str], ...]
    ideas_html: str
    year: int

    def as_mapping(self) -> dict:
        return {
            "site": self.site.as_context(),
            "page": dict(self.page),
            "title": self.page.get("title") or self.site.title,
            "description": self.page.get("description") or self.site.description,
            "url": self.page["url"],
            "date": self.page["date"],
            "dateHuman": self.page["dateHuman"],
            "posts": [dict(post) for post in self.posts],
            "postsHtml": self.posts_html,
            "ideas": [dict(idea) for idea in self.ideas],
            "ideasHtml": self.ideas_html,
            "year": self.year,
        }


def post_sort_key(entry: Entry) -> tuple:
    if entry.date is not None:
        return (0, -entry.date.toordinal(), entry.slug, entry.relative_path)
    return (1, 0, entry.slug, entry.relative_path)


def sort_posts(entries: list[Entry]) -> list[Entry]:
    """Posts newest first, then undated posts by slug."""
    return sorted((entry for entry in entries if entry.is_post), key=post_sort_key)


def page_fields(entry: Entry, config: SiteConfig) -> dict:
    page = dict(entry.metadata)
    page.update(
        {
            "title": entry.title,
            "url": prefix_url(config.base_url, entry.url_path),
            "path": entry.url_path,
            "slug": entry.slug,
            "date": entry.date_iso,
            "dateHuman": entry.date_human,
            "summary": entry.summary,
        }
    )
    return page


def render_posts_html(posts: list[Entry], config: SiteConfig) -> str:
    items = []
    for post in posts:
        url = html.escape(prefix_url(config.base_url, post.url_path))
        date = f'<time datetime="{post.date_iso}">{post.date_human}</time>' if post.date_iso else ""
        spacer = " " if date else ""
        items.append(f'<li><a href="{url}">{html.escape(post.title)}</a>{spacer}{date}</li>')
    return "\n".join(items)


def check_output_paths(entries: list[Entry], output_dir: Path) -> list[Entry]:
    """Return the entries that own their output path, in input order.

    When two entries write the same file the later one wins and the earlier
    one is dropped with a warning. A path outside ``output_dir`` is fatal.
    """
    root = output_dir.resolve()
    claimed: dict[str, Entry] = {}
    for entry in entries:
        target = (root / entry.output_path).resolve()
        if not target.is_relative_to(root):
            raise BuildError(
                f"Output path escapes output directory: {entry.relative_path} -> {entry.output_path}"
            )
        key = entry.output_path.as_posix()
        previous = claimed.get(key)
        if previous is not None:
            print(
                f"Warning: {previous.relative_path} and {entry.relative_path} both write {key}; "
                f"keeping {entry.relative_path}.",
                file=sys.stderr,
            )
        claimed[key] = entry
    return [entry for entry in entries if claimed[entry.output_path.as_posix()] is entry]


def build_site(
    source_dir: Path,
    output_dir: Path,
    clean: bool = False,
    now: Optional[dt.datetime] = None,
) -> list[Entry]:
    """Run one full build from ``source_dir`` into ``output_dir``.

    Returns the entries that were written. Raises BuildError for unsafe
    directory setups and lets I/O errors propagate.
    """
    source_dir = Path(source_dir)
    output_dir = Path(output_dir)
    now = now or dt.datetime.now(dt.timezone.utc)

    if not source_dir.is_dir():
        raise BuildError(f"Source directory not found: {source_dir}")
    source_resolved = source_dir.resolve()
    output_resolved = output_dir.resolve()
    if output_resolved == source_resolved:
        raise BuildError(f"Output directory must differ from source directory: {output_dir}")

    if clean:
        clean_output_dir(output_dir, source_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    config = load_site_config(source_dir)
    ideas = load_ideas(source_dir)
    exclude = output_resolved if output_resolved.is_relative_to(source_resolved) else None
    index = SourceIndex.scan(source_dir, exclude)

    entries = check_output_paths(load_content(index, output_dir), output_dir)
    posts = sort_posts(entries)
    post_pages = tuple(page_fields(post, config) for post in posts)
    posts_html = render_posts_html(posts, config)
    ideas_html = render_ideas_html(ideas)

    for entry in entries:
        context = RenderContext(
            site=config,
            page=page_fields(entry, config),
            posts=post_pages,
            posts_html=posts_html,
            ideas=tuple(ideas),
            ideas_html=ideas_html,
            year=now.year,
        ).as_mapping()
        body = render_template(entry.html_content, context, index.partial)
        final_html = apply_layouts(entry.layout, body, context, index)
        write_text(output_dir / entry.output_path, final_html)

    if config.domain:
        write_cname(output_dir, config.domain)
    build_feeds(output_dir, entries, posts, config, now)
    return entries
