"""In-memory correlation store for CAS proxy granting tickets.

The CAS server delivers a proxy granting ticket (PGT) to the proxy callback
out of band, keyed by an IOU. The validation response received by the
authenticating request carries the same IOU, which is then used to consume
the PGT from this store.

Entries are removed when consumed, or by a periodic sweep once they are
older than the store's maximum age.
"""
from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Optional

logger = logging.getLogger(__name__)

DEFAULT_MAX_AGE_MILLIS = 60000


@dataclass(frozen=True)
class ProxyTicketEntry:
    iou: str
    ticket: str
    inserted_at: float


class ProxyGrantingTicketStore:
    """Thread-safe mapping IOU -> proxy granting ticket with bounded lifetime.

    Args:
        max_age_millis: Entries older than this are expired; 0 disables
            expiry (entries only leave the store when consumed)
        clock: Monotonic clock in seconds, injectable for tests
    """

    def __init__(self, max_age_millis: int = DEFAULT_MAX_AGE_MILLIS, clock: Callable[[], float] = time.monotonic):
        self.max_age_millis = max_age_millis
        self._clock = clock
        self._entries: dict[str, ProxyTicketEntry] = {}
        self._lock = threading.Lock()

    def save(self, iou: str, ticket: str) -> None:
        entry = ProxyTicketEntry(iou=iou, ticket=ticket, inserted_at=self._clock())
        with self._lock:
            self._entries[iou] = entry
        logger.debug(f"Saved proxy granting ticket for IOU {iou}")

    def retrieve(self, iou: str) -> Optional[str]:
        """Consume the ticket stored for an IOU.

        Returns:
            The ticket, or None when the IOU is unknown, already consumed or
            expired. A given ticket is returned at most once.
        """
        with self._lock:
            entry = self._entries.pop(iou, None)
        if entry is None:
            logger.debug(f"No proxy granting ticket found for IOU {iou}")
            return None
        if self._is_expired(entry, self._clock()):
            logger.debug(f"Proxy granting ticket for IOU {iou} has expired")
            return None
        return entry.ticket

    def cleanup(self) -> int:
        """Remove expired entries.

        Returns:
            Number of entries removed
        """
        if self.max_age_millis <= 0:
            return 0
        now = self._clock()
        with self._lock:
            expired = [iou for iou, entry in self._entries.items() if self._is_expired(entry, now)]
            for iou in expired:
                del self._entries[iou]
        if expired:
            logger.debug(f"Removed {len(expired)} expired proxy granting ticket(s)")
        return len(expired)

    def _is_expired(self, entry: ProxyTicketEntry, now: float) -> bool:
        if self.max_age_millis <= 0:
            return False
        return (now - entry.inserted_at) * 1000 > self.max_age_millis

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, iou: object) -> bool:
        with self._lock:
            return iou in self._entries


class PeriodicCleaner:
    """Daemon thread calling ``store.cleanup()`` every ``interval_millis``.

    The thread is never joined by its owner; ``stop()`` prevents any further
    sweep and lets the thread exit at its next wake-up.
    """

    def __init__(self, store: ProxyGrantingTicketStore, interval_millis: int):
        if interval_millis <= 0:
            raise ValueError("interval_millis must be positive")
        self.store = store
        self.interval_millis = interval_millis
        self._stopped = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive() and not self._stopped.is_set()

    def start(self) -> None:
        if self._thread is not None:
            return
        self._thread = threading.Thread(target=self._run, name="pgt-store-cleaner", daemon=True)
        self._thread.start()
        logger.debug(f"Started proxy granting ticket cleaner (every {self.interval_millis} ms)")

    def stop(self) -> None:
        self._stopped.set()

    def _run(self) -> None:
        interval = self.interval_millis / 1000
        while not self._stopped.wait(interval):
            try:
                self.store.cleanup()
            except Exception:
                logger.exception("Proxy granting ticket cleanup failed")
