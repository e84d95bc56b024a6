from __future__ import annotations

import datetime as dt
import html
import re
import shutil
from pathlib import Path
from typing import Any, Callable, Mapping, Optional

PARTIAL_RE = re.compile(r"\{\{\s*>\s*([^\s}]+)\s*\}\}")
VARIABLE_RE = re.compile(r"\{\{\s*([^\s}>][^\s}]*)\s*\}\}")
TAG_RE = re.compile(r"<[^>]+>")
SPACE_RE = re.compile(r"\s+")
MAX_PARTIAL_DEPTH = 10


def resolve_value(context: Mapping[str, Any], key: str) -> Any:
    """Walk ``context`` along a dotted key path.

    Mappings are indexed by key and lists by integer position. Anything else,
    or a missing step, resolves to ``None``.
    """
    current: Any = context
    for part in key.split("."):
        if current is None:
            return None
        if isinstance(current, Mapping):
            current = current.get(part)
        elif isinstance(current, (list, tuple)) and part.isdigit():
            index = int(part)
            current = current[index] if index < len(current) else None
        else:
            return None
    return current


def format_value(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (dt.date, dt.datetime)):
        return value.isoformat()
    if isinstance(value, (list, tuple)):
        return ",".join(format_value(item) for item in value)
    return str(value)


def no_partials(name: str) -> str:
    return ""


def expand_partials(template: str, partials: Callable[[str], str]) -> str:
    output = template
    for _ in range(MAX_PARTIAL_DEPTH):
        if not PARTIAL_RE.search(output):
            break
        output = PARTIAL_RE.sub(lambda match: partials(match.group(1)) or "", output)
    return output


def render_template(
    template: str,
    context: Mapping[str, Any],
    partials: Optional[Callable[[str], str]] = None,
) -> str:
    """Expand ``{{> partial }}`` markers, then substitute ``{{ dotted.key }}`` markers.

    ``partials`` maps a partial name to its raw text and returns ``""`` for
    unknown names; without it every partial is empty. Partial markers still
    present after MAX_PARTIAL_DEPTH passes are left in place. Values are
    inserted without escaping.
    """
    output = expand_partials(template, partials or no_partials)
    return VARIABLE_RE.sub(lambda match: format_value(resolve_value(context, match.group(1))), output)


def strip_tags(html_text: str) -> str:
    return TAG_RE.sub("", html_text)


def plain_text(html_text: str) -> str:
    text = html.unescape(strip_tags(html_text))
    return SPACE_RE.sub(" ", text).strip()


def write_text(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")


def copy_file(source: Path, dest: Path) -> None:
    dest.parent.mkdir(parents=True, exist_ok=True)
    shutil.copyfile(source, dest)
