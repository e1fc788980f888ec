from __future__ import annotations

import logging
import threading

from .mediawiki import MediaWikiClient

log = logging.getLogger("videobot.shutoff")


class ShutoffWatcher:
    """Emergency stop driven by the bot's talk page.

    Polls the bot account's unread notifications in a daemon thread; any
    unread alert or message trips the watcher. The page creation loop checks
    ``tripped`` between videos and uses ``sleep`` for its pauses so that a
    trip cuts the pause short.
    """

    def __init__(self, client: MediaWikiClient, interval: float = 5) -> None:
        self.client = client
        self.interval = interval
        self.tripped = threading.Event()
        self._stopped = threading.Event()
        self._thread: threading.Thread | None = None

    def start(self) -> None:
        if self._thread is not None:
            return
        self._thread = threading.Thread(target=self._run, name="shutoff-watcher", daemon=True)
        self._thread.start()

    def stop(self) -> None:
        self._stopped.set()
        if self._thread is not None:
            self._thread.join(timeout=self.interval + 1)
            self._thread = None

    def check(self) -> bool:
        try:
            unread = self.client.unread_notification_count()
        except Exception as exc:
            log.error("error checking notifications: %s", exc)
            return False
        if unread > 0:
            log.warning("new unread notification detected; shutting down bot")
            self.tripped.set()
            return True
        return False

    def sleep(self, seconds: float) -> bool:
        return self.tripped.wait(timeout=seconds)

    def _run(self) -> None:
        while not self._stopped.wait(timeout=self.interval):
            if self.check():
                break

    def __enter__(self) -> "ShutoffWatcher":
        self.start()
        return self

    def __exit__(self, *exc_info) -> None:
        self.stop()
