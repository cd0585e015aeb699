# ipd_core/journals/notifier.py
"""
Change notification for journal records.

Notifications are advisory: they only tell a consumer to re-fetch.
Nothing that writes depends on them being delivered.
"""
from __future__ import annotations

import logging
import threading
from enum import Enum
from typing import Any, Callable, Dict, Optional

from django.conf import settings
from django.db import transaction

from ipd_core.common import events
from ipd_core.journals.exceptions import StorageError

logger = logging.getLogger(__name__)

JOURNAL_CHANGED = "journal.changed"

Unsubscribe = Callable[[], None]


def publish_change(record, *, event: str) -> None:
    """Publish once the surrounding transaction commits; rolled back writes stay silent."""
    payload = {
        "record_id": str(record.id),
        "admission_id": record.admission_id,
        "category": record.category,
        "version": record.version,
        "event": event,
    }
    transaction.on_commit(lambda: events.publish(JOURNAL_CHANGED, payload))


def subscribe_record(record_id, callback: Callable[[Dict[str, Any]], None]) -> Unsubscribe:
    """Deliver journal.changed payloads for one record only."""
    target = str(record_id)

    def _handler(payload: Dict[str, Any]) -> None:
        if payload.get("record_id") == target:
            callback(payload)

    return events.add_listener(JOURNAL_CHANGED, _handler)


class WatcherState(str, Enum):
    UNSUBSCRIBED = "unsubscribed"
    POLLING = "polling"
    SUBSCRIBED = "subscribed"


def _thread_timer(interval: float, fn: Callable[[], None]):
    t = threading.Timer(interval, fn)
    t.daemon = True
    t.start()
    return t


class JournalWatcher:
    """
    Keep a consumer's view of one journal record fresh.

    start(): fetch once. If the record exists, subscribe by its id.
    Otherwise poll every `poll_interval` seconds until it appears,
    then subscribe and stop polling. Each notification causes exactly
    one fetch and one on_change(record) call. stop() releases both.

    `scheduler(interval, fn)` must return an object with `cancel()`.
    """

    def __init__(
        self,
        *,
        fetch: Callable[[], Any],
        on_change: Callable[[Any], None],
        subscribe: Callable[[Any, Callable], Unsubscribe] = subscribe_record,
        poll_interval: Optional[float] = None,
        scheduler: Optional[Callable[[float, Callable[[], None]], Any]] = None,
    ):
        self._fetch = fetch
        self._on_change = on_change
        self._subscribe = subscribe
        if poll_interval is None:
            poll_interval = float(getattr(settings, "JOURNAL_POLL_INTERVAL_SECONDS", 2))
        self.poll_interval = poll_interval
        self._scheduler = scheduler or _thread_timer

        self._lock = threading.RLock()
        self._timer = None
        self._unsubscribe: Optional[Unsubscribe] = None
        self.state = WatcherState.UNSUBSCRIBED
        self.record = None

    def start(self) -> "JournalWatcher":
        with self._lock:
            if self.state != WatcherState.UNSUBSCRIBED:
                return self
            self._refresh()
        return self

    def stop(self) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
            if self._unsubscribe is not None:
                self._unsubscribe()
                self._unsubscribe = None
            self.state = WatcherState.UNSUBSCRIBED

    def _refresh(self) -> None:
        record = self._fetch()
        self.record = record
        if record is None:
            self._schedule_poll()
            return

        # attach first; on_change may raise
        if self.state != WatcherState.SUBSCRIBED:
            self._attach(record)
        self._on_change(record)

    def _attach(self, record) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        self._unsubscribe = self._subscribe(record.id, self._notified)
        self.state = WatcherState.SUBSCRIBED

    def _schedule_poll(self) -> None:
        self.state = WatcherState.POLLING
        self._timer = self._scheduler(self.poll_interval, self._poll)

    def _poll(self) -> None:
        with self._lock:
            if self.state != WatcherState.POLLING:
                return
            self._timer = None
            try:
                self._refresh()
            except StorageError:
                logger.warning("journal poll failed, will retry in %ss", self.poll_interval)
            except Exception:
                logger.exception("journal poll tick failed")
            finally:
                if self.state == WatcherState.POLLING and self._timer is None:
                    self._schedule_poll()

    def _notified(self, payload: Dict[str, Any]) -> None:
        with self._lock:
            if self.state != WatcherState.SUBSCRIBED:
                return
            logger.debug("journal %s changed (%s), re-fetching", payload.get("record_id"), payload.get("event"))
            try:
                record = self._fetch()
            except StorageError:
                logger.warning("journal %s re-fetch failed; waiting for the next change", payload.get("record_id"))
                return
            if record is not None:
                self.record = record
                self._on_change(record)
