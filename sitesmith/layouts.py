from __future__ import annotations

from typing import Any, Mapping

from .cache import SourceIndex
from .content import parse_front_matter
from .render import render_template
from .utils import read_source

NO_LAYOUT = "none"
MAX_LAYOUT_DEPTH = 8


def apply_layouts(
    layout_name: str,
    content: str,
    context: Mapping[str, Any],
    index: SourceIndex,
) -> str:
    """Wrap ``content`` in ``layout_name`` and then in each layout it names in turn.

    Each layout sees the base context overlaid with its own front matter and
    ``content`` bound to the output so far. The chain stops at an empty or
    ``none`` name, a layout that does not exist, or after MAX_LAYOUT_DEPTH + 1
    layouts.
    """
    name = layout_name
    depth = 0
    while name and name != NO_LAYOUT and depth <= MAX_LAYOUT_DEPTH:
        path = index.layout_path(name)
        if path is None:
            break
        meta, body = parse_front_matter(read_source(path), path)
        layout_context = {**context, **meta, "content": content}
        content = render_template(body, layout_context, index.partial)
        name = str(meta.get("layout") or "")
        depth += 1
    return content
