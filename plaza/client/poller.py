"""
Fixed-interval polling of a message feed.

Each feed (the chat room, one DM thread) gets its own FeedPoller with its own
cursor, so leaving one view cancels only that poller.
"""

from __future__ import annotations

import threading
from typing import Any, Callable, Dict, List, Optional

from plaza.config import get_settings
from plaza.infra.logging_config import get_logger

logger = get_logger("client.poller")

Fetch = Callable[[Optional[int]], List[Dict[str, Any]]]
Deliver = Callable[[List[Dict[str, Any]]], None]


class FeedPoller:
    """Calls fetch(after_id) every interval seconds and delivers new messages."""

    def __init__(
        self,
        fetch: Fetch,
        on_messages: Deliver,
        interval: Optional[float] = None,
        after_id: Optional[int] = None,
    ) -> None:
        if interval is None:
            interval = get_settings().poll_interval_seconds
        if interval <= 0:
            raise ValueError("interval must be positive")
        self.interval = interval
        self.after_id = after_id
        self._fetch = fetch
        self._on_messages = on_messages
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def poll_once(self) -> int:
        """Fetch once, advance the cursor, and return how many messages arrived."""
        messages = self._fetch(self.after_id)
        if not messages:
            return 0
        self.after_id = max(m["id"] for m in messages)
        self._on_messages(messages)
        return len(messages)

    def start(self) -> "FeedPoller":
        if self._thread is not None and self._thread.is_alive():
            return self
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, daemon=True)
        self._thread.start()
        return self

    def cancel(self, timeout: Optional[float] = None) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def _run(self) -> None:
        while not self._stop.is_set():
            try:
                self.poll_once()
            except Exception as e:
                # Keep polling; the next tick retries from the same cursor.
                logger.warning("Poll failed: %s", e)
            self._stop.wait(self.interval)
