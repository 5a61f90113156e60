"""Rerun-on-change support built on watchdog.

Filesystem events are debounced: every event restarts a single pending timer
and the rerun fires once the quiet period has elapsed. Reruns are serialized;
triggers that arrive while a run is active collapse into one follow-up run.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
import glob
import logging
import os
from pathlib import Path
import threading

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer
from watchdog.observers.api import BaseObserver

from .exceptions import PandocSpecError
from .pipeline import DIAGRAM_FILTER_ERROR_FILE
from .sandbox import CONFIGURATION_FILE


logger = logging.getLogger(__name__)

_IGNORED_EVENT_TYPES = frozenset({"opened", "closed_no_write"})


def in_ci_environment(environ: Mapping[str, str] | None = None) -> bool:
    """Return True when running inside a recognised CI service."""
    env = os.environ if environ is None else environ
    if env.get("GITHUB_ACTIONS") == "true":
        return True
    return env.get("CI", "").strip().lower() in {"1", "true", "yes"}


class Debouncer:
    """Trailing-edge debounce with a single replaceable pending timer."""

    def __init__(self, wait_seconds: float, callback: Callable[[], object]) -> None:
        self.wait_seconds = wait_seconds
        self._callback = callback
        self._lock = threading.Lock()
        self._timer: threading.Timer | None = None
        self._generation = 0

    @property
    def pending(self) -> bool:
        with self._lock:
            return self._timer is not None

    def trigger(self) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._generation += 1
            timer = threading.Timer(self.wait_seconds, self._fire, args=(self._generation,))
            timer.daemon = True
            self._timer = timer
            timer.start()

    def cancel(self) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
            self._generation += 1

    def _fire(self, generation: int) -> None:
        with self._lock:
            if generation != self._generation:
                # Superseded by a newer event.
                return
            self._timer = None
        try:
            self._callback()
        except Exception:
            logger.exception("Watch timer callback failed")


class SerialRunner:
    """Run a callback at most once at a time, coalescing overlapping requests."""

    def __init__(self, callback: Callable[[], object]) -> None:
        self._callback = callback
        self._lock = threading.Lock()
        self._running = False
        self._pending = False
        self.runs = 0

    @property
    def running(self) -> bool:
        with self._lock:
            return self._running

    def request(self) -> bool:
        """Run now, or mark a follow-up run when one is already active."""
        with self._lock:
            if self._running:
                self._pending = True
                logger.debug("Run in progress; rerun queued")
                return False
            self._running = True

        while True:
            self.runs += 1
            try:
                self._callback()
            except PandocSpecError as exc:
                logger.error("%s", exc)
            except Exception:
                logger.exception("Rerun failed")
            with self._lock:
                if not self._pending:
                    self._running = False
                    return True
                self._pending = False


def _within(path: Path, directory: Path) -> bool:
    return path == directory or directory in path.parents


@dataclass(slots=True)
class WatchSpec:
    """Paths whose changes trigger a rerun."""

    root: Path
    files: list[Path] = field(default_factory=list)
    ignored: list[Path] = field(default_factory=list)

    def matches(self, path: Path) -> bool:
        if any(_within(path, ignored) for ignored in self.ignored):
            return False
        return _within(path, self.root) or path in self.files

    def schedule(self) -> list[tuple[Path, bool]]:
        """Return ``(directory, recursive)`` pairs to observe."""
        entries: list[tuple[Path, bool]] = [(self.root, True)]
        seen = {self.root}
        for file in self.files:
            parent = file.parent
            if _within(parent, self.root) or parent in seen or not parent.is_dir():
                continue
            seen.add(parent)
            entries.append((parent, False))
        return entries


def _expand_patterns(patterns: Iterable[str], base: Path) -> list[Path]:
    files: list[Path] = []
    for pattern in patterns:
        if glob.has_magic(pattern):
            root_dir = None if os.path.isabs(pattern) else base
            matches = glob.glob(pattern, root_dir=root_dir, recursive=True)
            files.extend((base / match).resolve() for match in sorted(matches))
        else:
            files.append((base / pattern).resolve())
    return files


def build_watch_spec(
    *,
    input_directory: Path,
    output_directory: Path,
    options_file: Path,
    resource_patterns: Iterable[str],
    template_file: Path | None,
    output_file: Path | None = None,
) -> WatchSpec:
    """Describe the watched and ignored paths for a run.

    The output file is always ignored so that writing it never triggers a rerun,
    including when the output directory is the input directory.
    """
    root = input_directory.resolve()
    files = _expand_patterns(resource_patterns, root)
    if template_file is not None:
        files.append(template_file.resolve())

    ignored = [root / CONFIGURATION_FILE, root / DIAGRAM_FILTER_ERROR_FILE]
    for candidate in (options_file.resolve(), output_directory.resolve()):
        if candidate != root and _within(candidate, root):
            ignored.append(candidate)
    if output_file is not None:
        ignored.append(output_file.resolve())
    return WatchSpec(root=root, files=files, ignored=ignored)


class _ChangeHandler(FileSystemEventHandler):
    def __init__(self, spec: WatchSpec, debouncer: Debouncer) -> None:
        super().__init__()
        self._spec = spec
        self._debouncer = debouncer

    def on_any_event(self, event: FileSystemEvent) -> None:
        if event.event_type in _IGNORED_EVENT_TYPES:
            return
        if event.is_directory and event.event_type == "modified":
            return
        paths = [event.src_path, getattr(event, "dest_path", "")]
        for raw in paths:
            if not raw:
                continue
            path = Path(os.path.abspath(os.fsdecode(raw)))
            if self._spec.matches(path):
                logger.debug("%s: %s", event.event_type, path)
                self._debouncer.trigger()
                return


class ChangeWatcher:
    """Observe the watch spec and rerun after each quiet period."""

    def __init__(
        self,
        spec: WatchSpec,
        *,
        wait_ms: int,
        rerun: Callable[[], object],
    ) -> None:
        self.spec = spec
        self.runner = SerialRunner(rerun)
        self.debouncer = Debouncer(wait_ms / 1000, self.runner.request)
        self._observer: BaseObserver | None = None

    def handler(self) -> FileSystemEventHandler:
        return _ChangeHandler(self.spec, self.debouncer)

    def start(self) -> None:
        observer = Observer()
        handler = self.handler()
        for directory, recursive in self.spec.schedule():
            observer.schedule(handler, str(directory), recursive=recursive)
        observer.start()
        self._observer = observer
        logger.info("Watching for changes...")

    def stop(self) -> None:
        self.debouncer.cancel()
        if self._observer is not None:
            self._observer.stop()
            self._observer.join()
            self._observer = None

    def serve_forever(self) -> None:
        """Block until the process is interrupted."""
        self.start()
        try:
            while self._observer is not None and self._observer.is_alive():
                self._observer.join(1)
        finally:
            self.stop()


__all__ = [
    "ChangeWatcher",
    "Debouncer",
    "SerialRunner",
    "WatchSpec",
    "build_watch_spec",
    "in_ci_environment",
]
