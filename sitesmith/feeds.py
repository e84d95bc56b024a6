from __future__ import annotations

import datetime as dt
import html
import json
from pathlib import Path

from .config import SiteConfig
from .content import Entry
from .render import plain_text, write_text
from .utils import iso_date, join_url, prefix_url, rfc822_date


def absolute_url(config: SiteConfig, url_path: str) -> str:
    public_path = prefix_url(config.base_url, url_path)
    if not config.origin:
        return public_path
    return join_url(config.origin, public_path)


def entry_datetime(entry: Entry, fallback: dt.datetime) -> dt.datetime:
    if entry.date is None:
        return fallback
    return dt.datetime.combine(entry.date, dt.time.min, tzinfo=dt.timezone.utc)


def last_modified(entry: Entry) -> str:
    if entry.date_iso:
        return entry.date_iso
    mtime = entry.source_path.stat().st_mtime
    return dt.datetime.fromtimestamp(mtime, tz=dt.timezone.utc).date().isoformat()


def build_sitemap(output_dir: Path, entries: list[Entry], config: SiteConfig) -> None:
    items = []
    for entry in entries:
        items.append(
            "\n".join(
                [
                    "<url>",
                    f"<loc>{html.escape(absolute_url(config, entry.url_path))}</loc>",
                    f"<lastmod>{last_modified(entry)}</lastmod>",
                    "</url>",
                ]
            )
        )
    sitemap = "\n".join(
        [
            '<?xml version="1.0" encoding="UTF-8"?>',
            '<urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">',
            "\n".join(items),
            "</urlset>",
        ]
    )
    write_text(output_dir / "sitemap.xml", sitemap + "\n")


def build_rss(output_dir: Path, posts: list[Entry], config: SiteConfig, now: dt.datetime) -> None:
    items = []
    for post in posts:
        link = html.escape(absolute_url(config, post.url_path))
        items.append(
            "\n".join(
                [
                    "<item>",
                    f"<title>{html.escape(post.title)}</title>",
                    f"<link>{link}</link>",
                    f'<guid isPermaLink="true">{link}</guid>',
                    f"<pubDate>{rfc822_date(entry_datetime(post, now))}</pubDate>",
                    f"<description>{html.escape(post.summary)}</description>",
                    "</item>",
                ]
            )
        )
    rss = "\n".join(
        [
            '<?xml version="1.0" encoding="UTF-8"?>',
            '<rss version="2.0">',
            "<channel>",
            f"<title>{html.escape(config.title)}</title>",
            f"<link>{html.escape(absolute_url(config, '/'))}</link>",
            f"<description>{html.escape(config.description)}</description>",
            f"<lastBuildDate>{rfc822_date(now)}</lastBuildDate>",
            "\n".join(items),
            "</channel>",
            "</rss>",
        ]
    )
    write_text(output_dir / "rss.xml", rss + "\n")


def build_posts_index(output_dir: Path, posts: list[Entry], config: SiteConfig, now: dt.datetime) -> None:
    records = []
    for post in posts:
        records.append(
            {
                "title": post.title,
                "date": post.date_iso,
                "summary": post.summary,
                "url": absolute_url(config, post.url_path),
                "path": post.relative_path,
                "slug": post.slug,
                "html": post.html_content,
                "text": plain_text(post.html_content),
            }
        )
    index = {
        "generated": iso_date(now),
        "site": {
            "title": config.title,
            "description": config.description,
            "url": absolute_url(config, "/"),
        },
        "posts": records,
    }
    write_text(output_dir / "posts.json", json.dumps(index, indent=2, ensure_ascii=True) + "\n")


def build_feeds(
    output_dir: Path,
    entries: list[Entry],
    posts: list[Entry],
    config: SiteConfig,
    now: dt.datetime,
) -> None:
    """Write sitemap.xml, rss.xml and posts.json, leaving drafts out of all three."""
    published = [entry for entry in entries if not entry.is_draft]
    published_posts = [post for post in posts if not post.is_draft]
    build_sitemap(output_dir, published, config)
    build_rss(output_dir, published_posts, config, now)
    build_posts_index(output_dir, published_posts, config, now)
