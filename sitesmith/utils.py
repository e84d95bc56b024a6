from __future__ import annotations

import datetime as dt
import shutil
from pathlib import Path


class BuildError(Exception):
    """Raised for conditions that must abort a build."""


def read_source(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        raise BuildError(f"{path} is not valid UTF-8: {exc.reason} at byte {exc.start}") from exc


def parse_bool(value: object) -> bool:
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "y", "on"}
    return False


def join_url(base: str, path: str) -> str:
    base = base.rstrip("/")
    path = path.lstrip("/")
    if not path:
        return f"{base}/"
    return f"{base}/{path}"


def prefix_url(base_url: str, url_path: str) -> str:
    if not base_url:
        return url_path
    return base_url.rstrip("/") + url_path


def rfc822_date(value: dt.datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=dt.timezone.utc)
    return value.strftime("%a, %d %b %Y %H:%M:%S %z")


def iso_date(value: dt.datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=dt.timezone.utc)
    value = value.astimezone(dt.timezone.utc)
    return value.strftime("%Y-%m-%dT%H:%M:%SZ")


def clean_output_dir(output_dir: Path, source_dir: Path) -> None:
    output_resolved = output_dir.resolve()
    source_resolved = source_dir.resolve()
    if output_resolved == Path(output_resolved.anchor):
        raise BuildError(f"Refusing to clean filesystem root: {output_resolved}")
    if output_resolved == Path.cwd().resolve():
        raise BuildError(f"Refusing to clean current directory: {output_resolved}")
    if output_resolved == source_resolved:
        raise BuildError(f"Refusing to clean source directory: {output_resolved}")
    if source_resolved.is_relative_to(output_resolved):
        raise BuildError(f"Refusing to clean a directory containing the source: {output_resolved}")
    if output_resolved.exists():
        shutil.rmtree(output_resolved)


def write_cname(output_dir: Path, domain: str) -> None:
    output_dir.joinpath("CNAME").write_text(f"{domain}\n", encoding="utf-8")
