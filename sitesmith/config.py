from __future__ import annotations

import html
import json
import sys
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping

import yaml

DATA_DIR = "_data"
SITE_FILES = ("site.json", "site.yaml", "site.yml", "site.toml")
IDEA_FILES = ("ideas.json", "ideas.yaml", "ideas.yml")
DEFAULT_TITLE = "Sitesmith"
DEFAULT_DESCRIPTION = "A minimal, readable publishing pipeline."
IDEA_PLACEHOLDER = {"title": "More ideas coming soon.", "note": ""}
KNOWN_KEYS = {"title", "description", "baseUrl", "base_url", "url", "domain"}


class DataFileError(ValueError):
    pass


class DataLoader(yaml.SafeLoader):
    """SafeLoader that leaves timestamps as plain strings.

    PyYAML raises a bare ValueError for out-of-range dates such as
    ``2024-13-45``; callers parse date strings themselves.
    """


DataLoader.yaml_implicit_resolvers = {
    first: [(tag, regexp) for tag, regexp in resolvers if tag != "tag:yaml.org,2002:timestamp"]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}


def load_yaml(text: str) -> Any:
    return yaml.load(text, Loader=DataLoader)


def load_data_file(path: Path) -> Any:
    """Parse a JSON, YAML or TOML data file, chosen by suffix.

    Raises DataFileError when the text does not decode or parse. Read errors propagate.
    """
    suffix = path.suffix.lower()
    try:
        text = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        raise DataFileError(f"{path} is not valid UTF-8: {exc.reason}") from exc
    if suffix == ".toml":
        try:
            return tomllib.loads(text)
        except tomllib.TOMLDecodeError as exc:
            raise DataFileError(f"Invalid TOML in {path}: {exc}") from exc
    if suffix in {".yml", ".yaml"}:
        try:
            return load_yaml(text)
        except yaml.YAMLError as exc:
            raise DataFileError(f"Invalid YAML in {path}: {exc}") from exc
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise DataFileError(f"Invalid JSON in {path}: {exc}") from exc


def find_data_file(source_dir: Path, names: tuple[str, ...]) -> Path | None:
    for name in names:
        path = source_dir / DATA_DIR / name
        if path.is_file():
            return path
    return None


@dataclass(frozen=True)
class SiteConfig:
    title: str = DEFAULT_TITLE
    description: str = DEFAULT_DESCRIPTION
    base_url: str = ""
    url: str = ""
    domain: str = ""
    extra: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> SiteConfig:
        base_url = data.get("baseUrl", data.get("base_url")) or ""
        extra = {key: value for key, value in data.items() if key not in KNOWN_KEYS}
        return cls(
            title=str(data.get("title") or DEFAULT_TITLE),
            description=str(data.get("description") or DEFAULT_DESCRIPTION),
            base_url=str(base_url).strip().rstrip("/"),
            url=str(data.get("url") or "").strip().rstrip("/"),
            domain=str(data.get("domain") or "").strip(),
            extra=MappingProxyType(extra),
        )

    @property
    def origin(self) -> str:
        if self.url:
            return self.url
        if self.domain:
            return f"https://{self.domain}"
        return ""

    def as_context(self) -> dict:
        context = dict(self.extra)
        context.update(
            {
                "title": self.title,
                "description": self.description,
                "baseUrl": self.base_url,
                "url": self.url,
                "domain": self.domain,
            }
        )
        return context


def load_site_config(source_dir: Path) -> SiteConfig:
    path = find_data_file(source_dir, SITE_FILES)
    if path is None:
        return SiteConfig()
    try:
        data = load_data_file(path)
    except DataFileError as exc:
        print(f"Warning: {exc}; using default site config.", file=sys.stderr)
        return SiteConfig()
    if data is None:
        return SiteConfig()
    if not isinstance(data, dict):
        print(f"Warning: site config must be a mapping: {path}; using defaults.", file=sys.stderr)
        return SiteConfig()
    return SiteConfig.from_mapping(data)


def normalize_idea(item: object) -> dict | None:
    if isinstance(item, str):
        text = item.strip()
        return {"title": text, "note": ""} if text else None
    if isinstance(item, dict):
        title = str(item.get("title") or "").strip()
        note = str(item.get("note") or "").strip()
        if not title and not note:
            return None
        return {"title": title, "note": note}
    return None


def load_ideas(source_dir: Path) -> list[dict]:
    path = find_data_file(source_dir, IDEA_FILES)
    if path is None:
        return [dict(IDEA_PLACEHOLDER)]
    try:
        data = load_data_file(path)
    except DataFileError as exc:
        print(f"Warning: {exc}; using an empty idea list.", file=sys.stderr)
        data = []
    if data is None:
        data = []
    if not isinstance(data, list):
        print(f"Warning: idea list must be an array: {path}", file=sys.stderr)
        data = []
    ideas = [idea for idea in (normalize_idea(item) for item in data) if idea]
    return ideas or [dict(IDEA_PLACEHOLDER)]


def render_ideas_html(ideas: list[dict]) -> str:
    items = []
    for idea in ideas:
        title = html.escape(idea["title"])
        if idea["note"]:
            items.append(
                f'<li><span class="idea-title">{title}</span> '
                f'<span class="idea-note">{html.escape(idea["note"])}</span></li>'
            )
        else:
            items.append(f'<li><span class="idea-title">{title}</span></li>')
    return "\n".join(items)
