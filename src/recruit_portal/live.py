"""Live snapshots — push full collection snapshots to subscribers after each write.

``SnapshotHub`` is wired to the store's change listeners; ``DashboardSession``
keeps one viewer's latest snapshots and recomputes its dashboard through a
``Debouncer`` so that a burst of writes yields a single recomputation.
"""

from __future__ import annotations

import itertools
import logging
import threading
import uuid
from collections import defaultdict
from collections.abc import Callable
from datetime import datetime
from functools import partial
from typing import Any

from recruit_portal import database as db
from recruit_portal.auth import can_read
from recruit_portal.config import merge_settings
from recruit_portal.errors import InitErrorLog, PermissionDeniedError
from recruit_portal.models import AppUser, DashboardStats, PortalSettings
from recruit_portal.pipeline.dashboard import (
    SNAPSHOT_COLLECTIONS,
    DataSnapshot,
    compute_dashboard_stats,
)
from recruit_portal.scheduler import Debouncer

log = logging.getLogger(__name__)

Docs = list[dict[str, Any]]
SnapshotCallback = Callable[[Docs], None]


def fetch_snapshot(collection: str) -> Docs:
    """Full current contents of a collection; the settings document is a one-item list."""
    if collection == "settings":
        saved = db.get_settings()
        return [saved] if saved else []
    return db.fetch_all(collection)


def read_snapshot(viewer: AppUser, errors: InitErrorLog | None = None) -> tuple[DataSnapshot, PortalSettings]:
    """One-shot read of every dashboard collection ``viewer`` may see."""
    docs: dict[str, Docs] = {}
    for collection in SNAPSHOT_COLLECTIONS:
        try:
            can_read(viewer, collection)
        except PermissionDeniedError as e:
            if errors is not None:
                errors.record(e)
            continue
        docs[collection] = fetch_snapshot(collection)
    return DataSnapshot.from_docs(docs), merge_settings(db.get_settings())


class SnapshotHub:
    def __init__(self, fetch: Callable[[str], Docs] = fetch_snapshot) -> None:
        self._fetch = fetch
        self._subs: dict[str, dict[int, SnapshotCallback]] = defaultdict(dict)
        self._tokens = itertools.count(1)
        self._lock = threading.Lock()

    def subscribe(self, collection: str, callback: SnapshotCallback) -> Callable[[], None]:
        """Register ``callback``, deliver the current snapshot, and return an unsubscriber."""
        token = next(self._tokens)
        with self._lock:
            self._subs[collection][token] = callback
        self._deliver(collection, [callback])
        return partial(self._unsubscribe, collection, token)

    def _unsubscribe(self, collection: str, token: int) -> None:
        with self._lock:
            self._subs.get(collection, {}).pop(token, None)

    def subscriber_count(self, collection: str | None = None) -> int:
        with self._lock:
            if collection is not None:
                return len(self._subs.get(collection, {}))
            return sum(len(s) for s in self._subs.values())

    def publish(self, collection: str) -> None:
        """Change listener: push a fresh snapshot to everyone watching ``collection``."""
        with self._lock:
            callbacks = list(self._subs.get(collection, {}).values())
        if callbacks:
            self._deliver(collection, callbacks)

    def _deliver(self, collection: str, callbacks: list[SnapshotCallback]) -> None:
        docs = self._fetch(collection)
        for cb in callbacks:
            try:
                cb(list(docs))
            except Exception:
                log.exception("Snapshot subscriber failed for %s", collection)


class DashboardSession:
    """One viewer's live dashboard.

    ``on_stats`` is called with every recomputed ``DashboardStats`` until the
    session is closed. Collections the viewer may not read are skipped and the
    denial is recorded once in ``errors``.
    """

    def __init__(
        self,
        hub: SnapshotHub,
        viewer: AppUser,
        on_stats: Callable[[DashboardStats], None],
        debouncer: Debouncer,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.id = uuid.uuid4().hex[:8]
        self.hub = hub
        self.viewer = viewer
        self.debouncer = debouncer
        self.errors = InitErrorLog()
        self.latest: DashboardStats | None = None
        self._on_stats = on_stats
        self._clock = clock
        self._docs: dict[str, Docs] = {}
        self._settings: PortalSettings = merge_settings(None)
        self._unsubscribers: list[Callable[[], None]] = []
        self._lock = threading.Lock()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def open(self) -> DashboardSession:
        for collection in SNAPSHOT_COLLECTIONS:
            try:
                can_read(self.viewer, collection)
            except PermissionDeniedError as e:
                self.errors.record(e)
                continue
            self._unsubscribers.append(
                self.hub.subscribe(collection, partial(self._on_snapshot, collection))
            )
        self._unsubscribers.append(self.hub.subscribe("settings", self._on_settings))
        log.info("Dashboard session %s opened for %s", self.id, self.viewer.uid)
        return self

    def _on_snapshot(self, collection: str, docs: Docs) -> None:
        if self._closed:
            return
        with self._lock:
            self._docs[collection] = docs
        self._request()

    def _on_settings(self, docs: Docs) -> None:
        if self._closed:
            return
        settings = merge_settings(docs[0] if docs else None)
        with self._lock:
            self._settings = settings
        self._request()

    def _request(self) -> None:
        self.debouncer.call(self.id, self.recompute)

    def recompute(self) -> DashboardStats:
        with self._lock:
            snapshot = DataSnapshot.from_docs(self._docs)
            settings = self._settings
        stats = compute_dashboard_stats(snapshot, self.viewer, settings, self._clock())
        self.latest = stats
        if not self._closed:
            self._on_stats(stats)
        return stats

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers.clear()
        self.debouncer.cancel(self.id)
        log.info("Dashboard session %s closed", self.id)
