from __future__ import annotations

import argparse
import sys
import time
from pathlib import Path
from typing import Optional

from .config import load_site_config
from .server import serve, serve_in_background, watch
from .site import build_site
from .utils import BuildError

DEFAULT_IN = "src"
DEFAULT_OUT = "html"
DEFAULT_PORT = 8080


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Build a static site from Markdown and HTML sources.")
    parser.add_argument("--in", dest="source", default=DEFAULT_IN, help="Source directory.")
    parser.add_argument("--out", dest="output", default=DEFAULT_OUT, help="Output directory.")
    parser.add_argument("--clean", action="store_true", help="Remove the output directory before building.")
    parser.add_argument("--watch", action="store_true", help="Rebuild when source files change.")
    parser.add_argument(
        "--serve",
        nargs="?",
        type=int,
        const=DEFAULT_PORT,
        default=None,
        metavar="PORT",
        help=f"Serve the output directory over HTTP (default port {DEFAULT_PORT}).",
    )
    parser.add_argument("--port", type=int, default=None, help="Port used with --serve.")
    return parser.parse_args(argv)


def run_build(args: argparse.Namespace) -> None:
    start = time.perf_counter()
    entries = build_site(Path(args.source), Path(args.output), clean=args.clean)
    elapsed = time.perf_counter() - start
    print(f"Built {len(entries)} pages into {args.output} in {elapsed:.2f}s.")


def main(argv: Optional[list[str]] = None) -> int:
    args = parse_args(argv)
    try:
        run_build(args)
    except (BuildError, OSError) as exc:
        print(f"Build failed: {exc}", file=sys.stderr)
        return 1

    source_dir = Path(args.source)
    output_dir = Path(args.output)
    base_url = load_site_config(source_dir).base_url
    port = args.port if args.port is not None else args.serve

    if args.watch:
        if args.serve is not None:
            serve_in_background(output_dir, port, base_url)
        watch(source_dir, lambda: run_build(args), ignore=output_dir.resolve())
    elif args.serve is not None:
        serve(output_dir, port, base_url)
    return 0
