"""Mapping of source files to output paths and public URLs.

Every non-index page becomes a directory holding an ``index.html`` so that
public URLs stay clean (``/blog/hello/`` rather than ``/blog/hello.html``).
"""

from __future__ import annotations

from pathlib import Path, PurePosixPath
from typing import Mapping

INDEX_FILE = "index.html"
POSTS_DIR = "posts"


def compute_output_path(
    relative_path: str,
    extension: str,
    metadata: Mapping,
    is_post: bool,
    slug: str,
) -> PurePosixPath:
    """Return the output path, relative to the output root, for one entry."""
    permalink = metadata.get("permalink")
    if permalink:
        permalink = str(permalink).strip().lstrip("/")
        if permalink.endswith(".html"):
            return PurePosixPath(permalink)
        return PurePosixPath(permalink, INDEX_FILE)

    if is_post:
        return PurePosixPath(POSTS_DIR, slug, INDEX_FILE)

    source = PurePosixPath(relative_path)
    base_name = source.name[: -len(extension)] if extension else source.stem
    if base_name == "index":
        return source.parent / INDEX_FILE
    return source.parent / base_name / INDEX_FILE


def compute_url(output_root: Path, output_path: Path) -> str:
    """Map a file inside the output root to its public URL path."""
    rel = Path(output_path).relative_to(output_root).as_posix()
    if rel == INDEX_FILE:
        return "/"
    if rel.endswith(f"/{INDEX_FILE}"):
        return f"/{rel[: -len(INDEX_FILE)]}"
    return f"/{rel}"
