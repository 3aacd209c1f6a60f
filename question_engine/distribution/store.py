"""
Session distribution state storage.

State lives in memory only and is never persisted. The tracker talks to the
DistributionStore protocol so a shared external cache can replace the
in-memory implementation without changing the tracker's public contract.

Locking:
- one lock per session id serialises read-modify-write on that session
- a short registry lock guards the lock and state tables
- a session lock is retired as soon as its session has no state
- nothing blocking runs while a session lock is held
"""
from __future__ import annotations

import threading
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Callable, ContextManager, Iterator, Optional, Protocol

from loguru import logger

from question_engine.distribution.counts import StyleCounts

BucketKey = tuple[str, str]  # (exam_id, objective_id)

Clock = Callable[[], float]


@dataclass
class SessionDistributionState:
    """Running style counts for one question-generation session."""
    session_id: str
    exam_id: str
    created_at: float
    last_updated: float
    buckets: dict[BucketKey, StyleCounts] = field(default_factory=dict)

    def bucket(self, exam_id: str, objective_id: str) -> StyleCounts:
        """Get (or lazily create) the counters for an exam/objective pair."""
        key = (exam_id, objective_id)
        if key not in self.buckets:
            self.buckets[key] = StyleCounts()
        return self.buckets[key]

    def totals(self, exam_id: Optional[str] = None) -> StyleCounts:
        """Pooled counts across buckets, optionally for one exam only."""
        pooled = StyleCounts()
        for (bucket_exam, _), counts in self.buckets.items():
            if exam_id is None or bucket_exam == exam_id:
                pooled = pooled.merge(counts)
        return pooled

    def is_expired(self, now: float, timeout_seconds: float) -> bool:
        return now - self.last_updated >= timeout_seconds

    def copy(self) -> "SessionDistributionState":
        return SessionDistributionState(
            session_id=self.session_id,
            exam_id=self.exam_id,
            created_at=self.created_at,
            last_updated=self.last_updated,
            buckets={key: counts.copy() for key, counts in self.buckets.items()},
        )


class DistributionStore(Protocol):
    """Storage contract used by DistributionTracker."""

    def locked(
        self, session_id: str, exam_id: Optional[str] = None, create: bool = False
    ) -> ContextManager[Optional[SessionDistributionState]]:
        ...

    def snapshot(self, session_id: str) -> Optional[SessionDistributionState]:
        ...

    def delete(self, session_id: str) -> bool:
        ...

    def cleanup_expired(self) -> int:
        ...

    def session_ids(self) -> list[str]:
        ...

    def now(self) -> float:
        ...


class InMemoryDistributionStore:
    """
    Process-local DistributionStore with idle expiry.

    Construct one per server instance (or per test); instances share nothing.
    """

    def __init__(self, timeout_seconds: float = 2 * 60 * 60, clock: Optional[Clock] = None):
        self.timeout_seconds = timeout_seconds
        self._clock = clock or time.monotonic
        self._states: dict[str, SessionDistributionState] = {}
        self._locks: dict[str, threading.Lock] = {}
        self._registry_lock = threading.Lock()

    @classmethod
    def from_settings(cls, settings=None, clock: Optional[Clock] = None) -> "InMemoryDistributionStore":
        from config import get_settings

        settings = settings or get_settings()
        return cls(timeout_seconds=settings.session_timeout_minutes * 60, clock=clock)

    def now(self) -> float:
        return self._clock()

    def _lock_for(self, session_id: str) -> threading.Lock:
        with self._registry_lock:
            lock = self._locks.get(session_id)
            if lock is None:
                lock = threading.Lock()
                self._locks[session_id] = lock
            return lock

    def _is_current(self, session_id: str, lock: threading.Lock) -> bool:
        with self._registry_lock:
            return self._locks.get(session_id) is lock

    @contextmanager
    def _session_lock(self, session_id: str) -> Iterator[None]:
        # Retry if the lock was retired while we waited on it
        while True:
            lock = self._lock_for(session_id)
            lock.acquire()
            if self._is_current(session_id, lock):
                break
            lock.release()
        try:
            yield
        finally:
            # Sessions without state keep no lock; waiters on a retired lock retry
            with self._registry_lock:
                if session_id not in self._states and self._locks.get(session_id) is lock:
                    del self._locks[session_id]
            lock.release()

    def _live_state(self, session_id: str) -> Optional[SessionDistributionState]:
        """Current state, dropping it first if it has gone idle. Caller holds the session lock."""
        state = self._states.get(session_id)
        if state is not None and state.is_expired(self.now(), self.timeout_seconds):
            logger.warning(f"Distribution session {session_id} expired, discarding")
            with self._registry_lock:
                del self._states[session_id]
            return None
        return state

    @contextmanager
    def locked(
        self, session_id: str, exam_id: Optional[str] = None, create: bool = False
    ) -> Iterator[Optional[SessionDistributionState]]:
        """
        Hold the session lock and yield its live state.

        With create=True a missing state is created for exam_id; otherwise a
        missing state yields None.
        """
        with self._session_lock(session_id):
            state = self._live_state(session_id)
            if state is None and create:
                if exam_id is None:
                    raise ValueError("exam_id is required to create a session")
                now = self.now()
                state = SessionDistributionState(
                    session_id=session_id,
                    exam_id=exam_id,
                    created_at=now,
                    last_updated=now,
                )
                with self._registry_lock:
                    self._states[session_id] = state
                logger.info(f"Initialized distribution session {session_id} for {exam_id}")
            yield state

    def snapshot(self, session_id: str) -> Optional[SessionDistributionState]:
        """Consistent copy of a session's state, or None if unknown/expired."""
        with self._registry_lock:
            if session_id not in self._states:
                return None
        with self._session_lock(session_id):
            state = self._live_state(session_id)
            return state.copy() if state is not None else None

    def delete(self, session_id: str) -> bool:
        with self._session_lock(session_id), self._registry_lock:
            return self._states.pop(session_id, None) is not None

    def cleanup_expired(self) -> int:
        """Remove idle sessions and retire their locks. Returns the number removed."""
        removed = 0
        for session_id in self.session_ids():
            with self._session_lock(session_id):
                state = self._states.get(session_id)
                if state is None or not state.is_expired(self.now(), self.timeout_seconds):
                    continue
                with self._registry_lock:
                    del self._states[session_id]
                removed += 1

        if removed:
            logger.info(f"Cleaned up {removed} expired question distribution sessions")
        return removed

    def session_ids(self) -> list[str]:
        with self._registry_lock:
            return list(self._states)

    def lock_count(self) -> int:
        """Number of session locks currently held in the lock table."""
        with self._registry_lock:
            return len(self._locks)

    def __len__(self) -> int:
        return len(self.session_ids())
