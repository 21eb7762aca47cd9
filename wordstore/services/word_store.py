"""
Observable word store.

A durable set of unique strings backed by one SQLite table, with a live
feed of the alphabetized contents. Every committed mutation re-queries the
table once and pushes the full snapshot to every subscriber, in commit order.
"""
from __future__ import annotations

import logging
import queue
import sqlite3
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from typing import Callable, Iterator, List, Optional, Union

from ..db import get_conn, get_db_path, read_config
from ..errors import StorageFailure
from ..repository import word_repo

logger = logging.getLogger(__name__)

Snapshot = List[str]

_CLOSED = object()

# sqlite3 raises UnicodeEncodeError binding a str that is not valid UTF-8 (lone surrogates)
_MEDIUM_ERRORS = (sqlite3.Error, UnicodeError)


@dataclass(frozen=True)
class WordEntry:
    """One stored record; the word is its own key."""
    word: str


class Subscription:
    """
    One subscriber of WordStore.observe_alphabetized().

    Snapshots are queued without bound, so the store never waits on a slow
    consumer. Without a callback the consumer pulls with get() or iterates;
    with a callback a daemon thread drains the queue and calls it in order.
    """

    def __init__(self, store: "WordStore", callback: Optional[Callable[[Snapshot], None]] = None):
        self._store = store
        self._queue: "queue.Queue" = queue.Queue()
        self._callback = callback
        self._cancelled = threading.Event()
        self._latest: Optional[Snapshot] = None
        self._thread: Optional[threading.Thread] = None
        if callback is not None:
            self._thread = threading.Thread(
                target=self._run_callback, name="wordstore-subscriber", daemon=True
            )

    def _start(self):
        if self._thread is not None:
            self._thread.start()

    def _push(self, snapshot: Snapshot):
        if not self._cancelled.is_set():
            self._queue.put(list(snapshot))

    def _run_callback(self):
        while True:
            item = self._queue.get()
            if item is _CLOSED or self._cancelled.is_set():
                return
            self._latest = item
            try:
                self._callback(item)
            except Exception:
                # a failing observer must not stall the others
                logger.exception("word subscriber callback failed")

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    @property
    def latest(self) -> Optional[Snapshot]:
        """Last snapshot handed to this subscriber, or None before the first."""
        return self._latest

    def get(self, timeout: Optional[float] = None) -> Optional[Snapshot]:
        """
        Block for the next snapshot.

        Returns None once the subscription is cancelled. Raises queue.Empty
        if `timeout` elapses first.
        """
        if self._callback is not None:
            raise RuntimeError("callback subscriptions are drained by their own thread")
        if self._cancelled.is_set() and self._queue.empty():
            return None
        item = self._queue.get(timeout=timeout)
        if item is _CLOSED:
            self._queue.put(_CLOSED)
            return None
        self._latest = item
        return item

    def __iter__(self) -> Iterator[Snapshot]:
        while True:
            item = self.get()
            if item is None:
                return
            yield item

    def cancel(self):
        if self._cancelled.is_set():
            return
        self._cancelled.set()
        self._store._detach(self)
        # pending snapshots are dropped
        while True:
            try:
                self._queue.get_nowait()
            except queue.Empty:
                break
        self._queue.put(_CLOSED)

    def __enter__(self) -> "Subscription":
        return self

    def __exit__(self, *exc):
        self.cancel()


class WordStore:
    """
    Durable, deduplicated, alphabetized collection of words.

    insert() and delete_all() block until committed; use the *_async
    variants from threads that must stay responsive. All mutations and the
    snapshot that follows each of them are serialized by one lock, which is
    never held while waiting on a subscriber.
    """

    def __init__(self, db_path: Optional[str] = None, max_workers: Optional[int] = None,
                 seed_words: Optional[List[str]] = None):
        cfg = read_config()
        self._lock = threading.Lock()
        self._subscribers: List[Subscription] = []
        self._closed = False
        try:
            self.db_path = db_path or get_db_path()
            with get_conn(self.db_path) as conn:
                created = word_repo.ensure_schema(conn)
                seeds = cfg["seed_words"] if seed_words is None else seed_words
                # seeding only populates a brand-new table
                if created and seeds:
                    conn.execute("BEGIN IMMEDIATE")
                    for w in seeds:
                        word_repo.insert(conn, w)
                    conn.execute("COMMIT")
        except _MEDIUM_ERRORS + (OSError,) as e:
            logger.error("cannot open word store at %s: %s", db_path or "configured path", e)
            raise StorageFailure(f"open_failed: {e}") from e
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers or cfg["mutation_workers"],
            thread_name_prefix="wordstore",
        )
        logger.debug("word store ready at %s", self.db_path)

    # ---- mutations ----

    def insert(self, word: Union[str, WordEntry]):
        """Add `word` if absent; a word already present is silently ignored."""
        if isinstance(word, WordEntry):
            word = word.word
        self._mutate("insert", lambda conn: word_repo.insert(conn, word))

    def delete_all(self):
        """Remove every word. Subscribers are notified even when nothing was stored."""
        def op(conn):
            word_repo.delete_all(conn)
            return True
        self._mutate("delete_all", op)

    def insert_async(self, word: Union[str, WordEntry]) -> "Future[None]":
        return self._submit(self.insert, word)

    def delete_all_async(self) -> "Future[None]":
        return self._submit(self.delete_all)

    def _submit(self, fn, *args) -> Future:
        self._ensure_open()
        return self._executor.submit(fn, *args)

    def _mutate(self, name: str, op: Callable[[sqlite3.Connection], bool]):
        with self._lock:
            self._ensure_open()
            try:
                with get_conn(self.db_path) as conn:
                    conn.execute("BEGIN IMMEDIATE")
                    try:
                        changed = op(conn)
                        snapshot = word_repo.list_alphabetized(conn) if changed else None
                        conn.execute("COMMIT")
                    except _MEDIUM_ERRORS:
                        if conn.in_transaction:
                            conn.execute("ROLLBACK")
                        raise
            except _MEDIUM_ERRORS as e:
                logger.error("word store %s failed: %s", name, e)
                raise StorageFailure(f"{name}_failed: {e}") from e
            logger.debug("word store %s committed (changed=%s)", name, changed)
            if snapshot is not None:
                for sub in list(self._subscribers):
                    sub._push(snapshot)

    # ---- reads ----

    def snapshot(self) -> Snapshot:
        return self._read("snapshot", word_repo.list_alphabetized)

    def contains(self, word: str) -> bool:
        return self._read("contains", lambda conn: word_repo.exists(conn, word))

    def count(self) -> int:
        return self._read("count", word_repo.count)

    def _read(self, name: str, fn):
        try:
            with get_conn(self.db_path) as conn:
                return fn(conn)
        except _MEDIUM_ERRORS as e:
            logger.error("word store %s failed: %s", name, e)
            raise StorageFailure(f"{name}_failed: {e}") from e

    # ---- observation ----

    def observe_alphabetized(self, callback: Optional[Callable[[Snapshot], None]] = None) -> Subscription:
        """
        Subscribe to the alphabetized contents.

        The current snapshot is queued immediately, then one snapshot per
        committed mutation, in commit order. The feed only ends on cancel()
        or close().
        """
        sub = Subscription(self, callback)
        with self._lock:
            # checked under the lock so close() cannot miss this subscriber
            self._ensure_open()
            current = self._read("observe", word_repo.list_alphabetized)
            sub._push(current)
            self._subscribers.append(sub)
        sub._start()
        logger.debug("word subscriber added (%d active)", len(self._subscribers))
        return sub

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def _detach(self, sub: Subscription):
        with self._lock:
            if sub in self._subscribers:
                self._subscribers.remove(sub)
        logger.debug("word subscriber cancelled (%d active)", len(self._subscribers))

    # ---- lifecycle ----

    def _ensure_open(self):
        if self._closed:
            raise StorageFailure("store is closed")

    def close(self):
        with self._lock:
            if self._closed:
                return
            self._closed = True
        self._executor.shutdown(wait=True)
        for sub in list(self._subscribers):
            sub.cancel()

    def __enter__(self) -> "WordStore":
        return self

    def __exit__(self, *exc):
        self.close()
