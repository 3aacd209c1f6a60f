"""
Unit tests for StyleCounts and InMemoryDistributionStore.

Tests:
- Counter invariants (total == sum of styles)
- Lazy session creation under the session lock
- Idle expiry with an injected clock
- Cleanup retiring expired sessions
"""

import pytest

from question_engine.distribution.counts import StyleCounts
from question_engine.distribution.store import InMemoryDistributionStore, SessionDistributionState
from question_engine.profiles import QuestionStyle


class TestStyleCounts:
    """Tests for the per-bucket counter."""

    def test_increment_keeps_total(self):
        counts = StyleCounts()
        counts.increment(QuestionStyle.DIRECT)
        counts.increment("scenario")
        counts.increment(QuestionStyle.SCENARIO)

        assert counts.total == 3
        assert counts.direct + counts.scenario + counts.case_study == counts.total
        assert counts.get("scenario") == 2

    def test_fractions(self):
        counts = StyleCounts.from_mapping({"direct": 3, "scenario": 1})
        fractions = counts.fractions()
        assert fractions[QuestionStyle.DIRECT] == pytest.approx(0.75)
        assert fractions[QuestionStyle.SCENARIO] == pytest.approx(0.25)
        assert fractions[QuestionStyle.CASE_STUDY] == 0.0

    def test_empty_fractions_are_zero(self):
        assert set(StyleCounts().fractions().values()) == {0.0}

    def test_from_mapping_derives_total(self):
        counts = StyleCounts.from_mapping({"direct": 2, "case_study": 1, "total": 99})
        assert counts.total == 3

    def test_from_mapping_rejects_negative(self):
        with pytest.raises(ValueError):
            StyleCounts.from_mapping({"direct": -1})

    def test_merge_and_copy_are_independent(self):
        a = StyleCounts.from_mapping({"direct": 1})
        b = StyleCounts.from_mapping({"scenario": 2})
        merged = a.merge(b)
        copied = merged.copy()
        copied.increment(QuestionStyle.CASE_STUDY)

        assert merged.to_dict() == {"direct": 1, "scenario": 2, "case_study": 0, "total": 3}
        assert copied.total == 4


class TestSessionState:
    """Tests for SessionDistributionState helpers."""

    def test_bucket_is_lazy(self):
        state = SessionDistributionState("s", "cfa-l1", created_at=0, last_updated=0)
        state.bucket("cfa-l1", "ethics").increment(QuestionStyle.DIRECT)
        state.bucket("cfa-l2", "ethics").increment(QuestionStyle.SCENARIO)

        assert state.totals().total == 2
        assert state.totals("cfa-l1").direct == 1
        assert state.totals("cfa-l1").scenario == 0

    def test_copy_is_deep(self):
        state = SessionDistributionState("s", "cfa-l1", created_at=0, last_updated=0)
        state.bucket("cfa-l1", "ethics").increment(QuestionStyle.DIRECT)
        clone = state.copy()
        clone.bucket("cfa-l1", "ethics").increment(QuestionStyle.DIRECT)

        assert state.bucket("cfa-l1", "ethics").total == 1


class TestInMemoryDistributionStore:
    """Tests for locking, creation and expiry."""

    def test_locked_without_create_yields_none(self):
        store = InMemoryDistributionStore()
        with store.locked("missing") as state:
            assert state is None
        assert len(store) == 0

    def test_locked_create_requires_exam(self):
        store = InMemoryDistributionStore()
        with pytest.raises(ValueError):
            with store.locked("s1", create=True):
                pass

    def test_create_is_idempotent(self, fake_clock):
        store = InMemoryDistributionStore(clock=fake_clock)
        with store.locked("s1", "cfa-l1", create=True) as first:
            first.bucket("cfa-l1", "ethics").increment(QuestionStyle.DIRECT)
        with store.locked("s1", "aws-saa", create=True) as second:
            assert second.exam_id == "cfa-l1"
            assert second.totals().total == 1

    def test_snapshot_is_a_copy(self):
        store = InMemoryDistributionStore()
        with store.locked("s1", "cfa-l1", create=True):
            pass
        snapshot = store.snapshot("s1")
        snapshot.bucket("cfa-l1", "ethics").increment(QuestionStyle.DIRECT)

        assert store.snapshot("s1").totals().total == 0

    def test_idle_session_expires(self, fake_clock):
        store = InMemoryDistributionStore(timeout_seconds=60, clock=fake_clock)
        with store.locked("s1", "cfa-l1", create=True):
            pass

        fake_clock.advance(59)
        assert store.snapshot("s1") is not None

        fake_clock.advance(1)
        assert store.snapshot("s1") is None
        assert store.session_ids() == []

    def test_expired_session_recreated_empty(self, fake_clock):
        store = InMemoryDistributionStore(timeout_seconds=60, clock=fake_clock)
        with store.locked("s1", "cfa-l1", create=True) as state:
            state.bucket("cfa-l1", "ethics").increment(QuestionStyle.DIRECT)

        fake_clock.advance(120)
        with store.locked("s1", "cfa-l1", create=True) as state:
            assert state.totals().total == 0

    def test_cleanup_expired(self, fake_clock):
        store = InMemoryDistributionStore(timeout_seconds=60, clock=fake_clock)
        for session_id in ("old-1", "old-2"):
            with store.locked(session_id, "cfa-l1", create=True):
                pass
        fake_clock.advance(30)
        with store.locked("fresh", "cfa-l1", create=True):
            pass
        fake_clock.advance(30)

        assert store.cleanup_expired() == 2
        assert store.session_ids() == ["fresh"]
        assert store.cleanup_expired() == 0

    def test_session_usable_after_cleanup(self, fake_clock):
        store = InMemoryDistributionStore(timeout_seconds=60, clock=fake_clock)
        with store.locked("s1", "cfa-l1", create=True):
            pass
        fake_clock.advance(60)
        store.cleanup_expired()

        with store.locked("s1", "cfa-l1", create=True) as state:
            assert state is not None
        assert store.session_ids() == ["s1"]

    def test_delete(self):
        store = InMemoryDistributionStore()
        with store.locked("s1", "cfa-l1", create=True):
            pass
        assert store.delete("s1") is True
        assert store.delete("s1") is False
        assert store.snapshot("s1") is None

    def test_from_settings_uses_timeout(self, fake_clock):
        store = InMemoryDistributionStore.from_settings(clock=fake_clock)
        assert store.timeout_seconds == 120 * 60
        assert store.now() == fake_clock.now
