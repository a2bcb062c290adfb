"""Cosmetic progress indicator shown while a controller call is in flight."""
from __future__ import annotations

import sys
import threading
from types import TracebackType
from typing import TextIO

FRAMES = ("...", "o..", ".o.", "..o")
BACKSPACES = "\b\b\b"
DEFAULT_INTERVAL = 0.4


class Progress:
    """Animate a small spinner on *stream* for the duration of a ``with`` block.

    The animation runs on a daemon thread. Leaving the block signals the
    thread and waits for it to finish, so anything the caller prints next
    never interleaves with a frame. Animation only happens when the stream is
    a terminal unless *enabled* forces it either way.
    """

    def __init__(
        self,
        stream: TextIO | None = None,
        *,
        interval: float = DEFAULT_INTERVAL,
        enabled: bool | None = None,
    ) -> None:
        self.stream = stream if stream is not None else sys.stdout
        self.interval = interval
        if enabled is None:
            isatty = getattr(self.stream, "isatty", None)
            enabled = bool(isatty()) if callable(isatty) else False
        self.enabled = enabled
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    def _run(self) -> None:
        index = 0
        while True:
            self.stream.write(FRAMES[index % len(FRAMES)] + BACKSPACES)
            self.stream.flush()
            index += 1
            if self._stop.wait(self.interval):
                return

    def start(self) -> Progress:
        """Start animating if enabled."""
        if self.enabled and self._thread is None:
            self._stop.clear()
            self._thread = threading.Thread(target=self._run, name="deis-progress", daemon=True)
            self._thread.start()
        return self

    def stop(self) -> None:
        """Stop animating and wait for the last frame to be written."""
        if self._thread is None:
            return
        self._stop.set()
        self._thread.join()
        self._thread = None

    def __enter__(self) -> Progress:
        return self.start()

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.stop()


__all__ = ["BACKSPACES", "FRAMES", "Progress"]
