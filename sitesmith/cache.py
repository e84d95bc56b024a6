from __future__ import annotations

from pathlib import Path
from typing import Optional

from .utils import read_source

LAYOUT_DIR = "_layouts"
INCLUDE_DIR = "_includes"
TEMPLATE_SUFFIX = ".html"


def list_files(root: Path, exclude: Optional[Path] = None) -> list[Path]:
    if not root.exists():
        return []
    files = []
    for path in root.rglob("*"):
        if not path.is_file():
            continue
        if exclude is not None and path.resolve().is_relative_to(exclude):
            continue
        files.append(path)
    return sorted(files, key=lambda p: p.relative_to(root).as_posix())


class SourceIndex:
    """Lookup table for one build, filled by a single scan of the source tree.

    Layouts and partials are keyed by their logical names, so a missing
    template is a plain ``None`` rather than a filesystem probe. Partial text
    is read at most once per index.
    """

    def __init__(self, source_dir: Path, files: dict[str, Path]):
        self.source_dir = source_dir
        self.files = files
        self.layouts = self._collect(LAYOUT_DIR)
        self.partials = self._collect(INCLUDE_DIR)
        self._partial_text: dict[str, str] = {}

    @classmethod
    def scan(cls, source_dir: Path, exclude: Optional[Path] = None) -> SourceIndex:
        files = {
            path.relative_to(source_dir).as_posix(): path
            for path in list_files(source_dir, exclude)
        }
        return cls(source_dir, files)

    def _collect(self, directory: str) -> dict[str, Path]:
        prefix = f"{directory}/"
        names = {}
        for rel, path in self.files.items():
            if rel.startswith(prefix) and rel.endswith(TEMPLATE_SUFFIX):
                names[rel[len(prefix) : -len(TEMPLATE_SUFFIX)]] = path
        return names

    def layout_path(self, name: str) -> Optional[Path]:
        if name.endswith(TEMPLATE_SUFFIX):
            return self.files.get(name.lstrip("/"))
        return self.layouts.get(name)

    def partial(self, name: str) -> str:
        if name not in self._partial_text:
            path = self.partials.get(name)
            self._partial_text[name] = read_source(path) if path else ""
        return self._partial_text[name]
