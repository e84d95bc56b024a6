from __future__ import annotations

import os
import sys
import threading
import time
from functools import partial
from http.server import SimpleHTTPRequestHandler, ThreadingHTTPServer
from pathlib import Path
from typing import Callable, Optional

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from .utils import BuildError

DEBOUNCE_SECONDS = 0.05
WATCHED_EVENTS = {"created", "modified", "deleted", "moved"}


class RequestHandler(SimpleHTTPRequestHandler):
    def __init__(self, *args, base_url: str = "", **kwargs):
        self.base_url = base_url
        super().__init__(*args, **kwargs)

    def translate_path(self, path: str) -> str:
        base = self.base_url
        if base and (path == base or path.startswith((f"{base}/", f"{base}?"))):
            path = path[len(base) :] or "/"
        return super().translate_path(path)

    def log_message(self, format: str, *args) -> None:
        print(f"[{self.log_date_time_string()}] {self.address_string()} {format % args}")


def make_server(output_dir: Path, port: int, base_url: str = "") -> ThreadingHTTPServer:
    handler = partial(RequestHandler, directory=str(output_dir), base_url=base_url)
    return ThreadingHTTPServer(("", port), handler)


def serve(output_dir: Path, port: int, base_url: str = "") -> None:
    server = make_server(output_dir, port, base_url)
    print(f"Serving {output_dir} at http://localhost:{port}{base_url}/")
    print("Press ctrl+c to stop.")
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        print("")
    finally:
        server.server_close()


def serve_in_background(output_dir: Path, port: int, base_url: str = "") -> ThreadingHTTPServer:
    server = make_server(output_dir, port, base_url)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    print(f"Serving {output_dir} at http://localhost:{port}{base_url}/")
    return server


class RebuildHandler(FileSystemEventHandler):
    """Runs ``rebuild`` once changes have been quiet for ``delay`` seconds.

    Every relevant event restarts the timer, so a burst of saves collapses
    into a single rebuild. Events under ``ignore`` are dropped.
    """

    def __init__(
        self,
        rebuild: Callable[[], None],
        ignore: Optional[Path] = None,
        delay: float = DEBOUNCE_SECONDS,
    ):
        super().__init__()
        self._rebuild = rebuild
        self._ignore = ignore
        self._delay = delay
        self._timer: Optional[threading.Timer] = None
        self._lock = threading.Lock()

    def is_relevant(self, event: FileSystemEvent) -> bool:
        if event.event_type not in WATCHED_EVENTS:
            return False
        if self._ignore is None:
            return True
        path = Path(os.fsdecode(event.src_path)).resolve()
        return not path.is_relative_to(self._ignore)

    def on_any_event(self, event: FileSystemEvent) -> None:
        if not self.is_relevant(event):
            return
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._timer = threading.Timer(self._delay, self._run)
            self._timer.daemon = True
            self._timer.start()

    def _run(self) -> None:
        try:
            self._rebuild()
        except (BuildError, OSError) as exc:
            print(f"Rebuild failed: {exc}", file=sys.stderr)


def watch(source_dir: Path, rebuild: Callable[[], None], ignore: Optional[Path] = None) -> None:
    observer = Observer()
    observer.schedule(RebuildHandler(rebuild, ignore), str(source_dir), recursive=True)
    observer.start()
    print(f"Watching {source_dir} for changes. Press ctrl+c to stop.")
    try:
        while True:
            time.sleep(1)
    except KeyboardInterrupt:
        observer.stop()
        print("")
    observer.join()
