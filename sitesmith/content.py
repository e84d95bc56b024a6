from __future__ import annotations

import datetime as dt
import re
import sys
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from types import MappingProxyType
from typing import Mapping, Optional

import markdown
import yaml

from .cache import SourceIndex
from .config import load_yaml
from .paths import POSTS_DIR, compute_output_path, compute_url
from .render import copy_file
from .utils import parse_bool, read_source

CONTENT_EXTENSIONS = {".md", ".html"}
RESERVED_PREFIX = "_"
DEFAULT_LAYOUT = "base"
HUMAN_DATE_FMT = "%b %d, %Y"
FILENAME_DATE_RE = re.compile(r"^(\d{4}-\d{2}(?:-\d{2})?)-")
DATE_PREFIX_RE = re.compile(r"^\d{4}-\d{2}-(?:\d{2}-)?")
MONTH_RE = re.compile(r"^(\d{4})-(\d{2})$")
MARKDOWN_EXTENSIONS = ["fenced_code", "tables", "codehilite"]


def parse_front_matter(text: str, source: Optional[Path] = None) -> tuple[dict, str]:
    clean_text = text.lstrip("\ufeff")
    lines = clean_text.splitlines()
    if not lines or lines[0].strip() != "---":
        return {}, clean_text

    end = None
    for i in range(1, len(lines)):
        if lines[i].strip() == "---":
            end = i
            break
    if end is None:
        return {}, clean_text

    body = "\n".join(lines[end + 1 :])
    try:
        data = load_yaml("\n".join(lines[1:end]))
    except yaml.YAMLError as exc:
        print(f"Warning: invalid front matter in {source or 'template'}: {exc}", file=sys.stderr)
        return {}, body
    if data is None:
        return {}, body
    if not isinstance(data, dict):
        print(f"Warning: front matter must be a mapping in {source or 'template'}", file=sys.stderr)
        return {}, body
    return {str(key): value for key, value in data.items()}, body


def markdown_to_html(text: str) -> str:
    md = markdown.Markdown(
        extensions=MARKDOWN_EXTENSIONS,
        extension_configs={"codehilite": {"guess_lang": False}},
    )
    return md.convert(text)


def infer_filename_date(base_name: str) -> Optional[str]:
    match = FILENAME_DATE_RE.match(base_name)
    return match.group(1) if match else None


def parse_date(value: object) -> Optional[dt.date]:
    """Coerce a header or filename date to a calendar date, or ``None``."""
    if value is None or value == "":
        return None
    if isinstance(value, dt.datetime):
        return value.date()
    if isinstance(value, dt.date):
        return value
    text = str(value).strip()
    month = MONTH_RE.match(text)
    try:
        if month:
            return dt.date(int(month.group(1)), int(month.group(2)), 1)
        return dt.date.fromisoformat(text)
    except ValueError:
        pass
    try:
        return dt.datetime.fromisoformat(text).date()
    except ValueError:
        return None


def is_ignored(relative_path: str) -> bool:
    return any(part.startswith(RESERVED_PREFIX) for part in PurePosixPath(relative_path).parts)


@dataclass(frozen=True)
class Entry:
    source_path: Path
    relative_path: str
    extension: str
    metadata: Mapping
    html_content: str
    summary: str
    date: Optional[dt.date]
    date_iso: str
    date_human: str
    slug: str
    title: str
    is_post: bool
    is_draft: bool
    layout: str
    output_path: PurePosixPath
    url_path: str


def load_entry(path: Path, relative_path: str, output_dir: Path) -> Entry:
    extension = path.suffix.lower()
    meta, body = parse_front_matter(read_source(path), path)
    base_name = path.name[: -len(extension)]

    date = parse_date(meta.get("date") or infer_filename_date(base_name))
    slug = str(meta.get("slug") or "").strip() or DATE_PREFIX_RE.sub("", base_name)
    parts = PurePosixPath(relative_path).parts
    is_post = len(parts) > 1 and parts[0] == POSTS_DIR

    output_path = compute_output_path(relative_path, extension, meta, is_post, slug)
    url_path = compute_url(output_dir, output_dir / output_path)

    layout = meta.get("layout")
    if layout is None:
        layout = DEFAULT_LAYOUT if extension == ".md" else ""

    return Entry(
        source_path=path,
        relative_path=relative_path,
        extension=extension,
        metadata=MappingProxyType(meta),
        html_content=markdown_to_html(body) if extension == ".md" else body,
        summary=str(meta.get("summary") or meta.get("description") or ""),
        date=date,
        date_iso=date.isoformat() if date else "",
        date_human=date.strftime(HUMAN_DATE_FMT) if date else "",
        slug=slug,
        title=str(meta.get("title") or slug),
        is_post=is_post,
        is_draft=parse_bool(meta.get("draft")),
        layout=str(layout or ""),
        output_path=output_path,
        url_path=url_path,
    )


def load_content(index: SourceIndex, output_dir: Path) -> list[Entry]:
    """Parse every content file in ``index`` and copy everything else to ``output_dir``.

    Paths with a component starting with ``_`` are skipped entirely.
    """
    entries = []
    for relative_path, path in index.files.items():
        if is_ignored(relative_path):
            continue
        if path.suffix.lower() not in CONTENT_EXTENSIONS:
            copy_file(path, output_dir / relative_path)
            continue
        entries.append(load_entry(path, relative_path, output_dir))
    return entries
