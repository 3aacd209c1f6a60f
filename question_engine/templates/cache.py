"""
Template Cache with family inheritance.

Memoises prompt skeletons keyed by (family key, style, objective signature)
with TTL expiry. Exams in one family resolve to the same family key, so a
template synthesised for one sibling is a cache hit for the others.

Locking:
- a cache-wide lock guards the entry table and counters (held briefly)
- synthesis runs outside it, under a per-key lock, so a slow generator only
  blocks requests for the same key
"""
from __future__ import annotations

import threading
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Iterator, Optional

from loguru import logger

from question_engine.profiles.models import STYLE_PRIORITY, ExamObjective, ExamProfile, QuestionStyle
from question_engine.selection.patterns import QUESTION_PATTERNS
from question_engine.templates.families import family_key, resolve_family
from question_engine.templates.generator import InheritedTemplateGenerator, TemplateGenerator

DEFAULT_TTL_SECONDS = 60 * 60
LOW_HIT_RATE_PERCENT = 80
MOST_USED_LIMIT = 5

# Priority bonuses for optimize_generation_order
CACHED_PRIORITY = 10
DIRECT_PRIORITY = 5
FAMILY_PRIORITY = 3


@dataclass(frozen=True)
class TemplateKey:
    family_key: str
    style: QuestionStyle
    objective_signature: str

    def __str__(self) -> str:
        return f"{self.family_key}:{self.style.value}:{self.objective_signature}"


@dataclass
class CachedTemplate:
    template: str
    created_at: float
    family_key: str
    style: QuestionStyle
    exam_ids: set[str] = field(default_factory=set)
    hits: int = 0

    def is_expired(self, now: float, ttl_seconds: float) -> bool:
        return now - self.created_at >= ttl_seconds


@dataclass
class InheritanceTree:
    """Diagnostic view of how an exam inherits templates."""
    exam_id: str
    family_key: str
    family_id: Optional[str]
    family_name: Optional[str]
    member_patterns: list[str]
    member_exam_ids: list[str]
    base_styles: list[str]
    cached_keys: list[str]
    inherited_customizations: list[str]

    def to_dict(self) -> dict[str, Any]:
        return {
            "exam_id": self.exam_id,
            "family_key": self.family_key,
            "family_id": self.family_id,
            "family_name": self.family_name,
            "member_patterns": list(self.member_patterns),
            "member_exam_ids": list(self.member_exam_ids),
            "base_styles": list(self.base_styles),
            "cached_keys": list(self.cached_keys),
            "inherited_customizations": list(self.inherited_customizations),
        }


@dataclass
class CacheMetrics:
    cache_size: int
    hits: int
    misses: int
    hit_rate: float
    synthesized: int
    most_used_templates: list[str]
    recommendations: list[str]

    def to_dict(self) -> dict[str, Any]:
        return {
            "cache_size": self.cache_size,
            "hits": self.hits,
            "misses": self.misses,
            "hit_rate": self.hit_rate,
            "synthesized": self.synthesized,
            "most_used_templates": list(self.most_used_templates),
            "recommendations": list(self.recommendations),
        }


@dataclass(frozen=True)
class GenerationRequest:
    exam_id: str
    objective: ExamObjective
    style: QuestionStyle


@dataclass(frozen=True)
class PrioritizedRequest:
    exam_id: str
    objective_id: str
    style: QuestionStyle
    priority: int


class TemplateCache:
    """
    TTL cache of prompt skeletons shared across exam families.

    Usage:
        cache = TemplateCache()
        template = cache.get_optimized_template("cfa-l1", QuestionStyle.DIRECT, objective)
        cache.get_performance_metrics().hit_rate
    """

    def __init__(
        self,
        generator: Optional[TemplateGenerator] = None,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        max_entries: int = 1000,
        clock: Optional[Callable[[], float]] = None,
    ):
        self.generator = generator if generator is not None else InheritedTemplateGenerator()
        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self._clock = clock or time.monotonic

        self._entries: dict[TemplateKey, CachedTemplate] = {}
        self._key_locks: dict[TemplateKey, threading.Lock] = {}
        self._lock = threading.Lock()

        self._hits = 0
        self._misses = 0
        self._synthesized = 0

    @classmethod
    def from_settings(
        cls,
        settings=None,
        generator: Optional[TemplateGenerator] = None,
        clock: Optional[Callable[[], float]] = None,
    ) -> "TemplateCache":
        from config import get_settings

        settings = settings or get_settings()
        return cls(
            generator=generator,
            ttl_seconds=settings.template_cache_ttl_seconds,
            max_entries=settings.template_cache_max_entries,
            clock=clock,
        )

    @staticmethod
    def key_for(exam_id: str, style: QuestionStyle | str, objective: ExamObjective) -> TemplateKey:
        return TemplateKey(family_key(exam_id), QuestionStyle(style), objective.signature())

    # =========================================================================
    # Lookup and synthesis
    # =========================================================================

    def _fresh_entry(self, key: TemplateKey) -> Optional[CachedTemplate]:
        """Live entry for key, evicting it if expired. Caller holds _lock."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry.is_expired(self._clock(), self.ttl_seconds):
            del self._entries[key]
            logger.debug(f"Template {key} expired")
            return None
        return entry

    @contextmanager
    def _key_lock(self, key: TemplateKey) -> Iterator[None]:
        # Retry if the lock was retired while we waited on it
        while True:
            with self._lock:
                lock = self._key_locks.setdefault(key, threading.Lock())
            lock.acquire()
            with self._lock:
                if self._key_locks.get(key) is lock:
                    break
            lock.release()
        try:
            yield
        finally:
            # Only in-flight syntheses keep a key lock
            with self._lock:
                if self._key_locks.get(key) is lock:
                    del self._key_locks[key]
            lock.release()

    def _prune_key_locks(self) -> None:
        """Drop idle key locks for keys no longer cached. Caller holds _lock."""
        for key in [k for k, lock in self._key_locks.items() if k not in self._entries and not lock.locked()]:
            del self._key_locks[key]

    def _synthesize(
        self,
        key: TemplateKey,
        exam_id: str,
        objective: ExamObjective,
    ) -> tuple[str, bool]:
        """
        Generate and store the template for key.

        Returns:
            (template, created) where created is False if another caller
            filled the key while we waited for its lock
        """
        with self._key_lock(key):
            with self._lock:
                entry = self._fresh_entry(key)
                if entry is not None:
                    entry.exam_ids.add(exam_id)
                    return entry.template, False

            try:
                template = self.generator.generate(resolve_family(exam_id), key.style, objective)
            except Exception as e:
                logger.warning(f"Template synthesis failed for {key}: {e}")
                raise

            with self._lock:
                self._entries[key] = CachedTemplate(
                    template=template,
                    created_at=self._clock(),
                    family_key=key.family_key,
                    style=key.style,
                    exam_ids={exam_id},
                )
                self._synthesized += 1

        logger.debug(f"Synthesized template {key} for {exam_id}")
        return template, True

    def get_optimized_template(
        self,
        exam_id: str,
        style: QuestionStyle | str,
        objective: ExamObjective,
    ) -> str:
        """
        Cached prompt skeleton for an exam/style/objective, synthesising on miss.

        Raises:
            Whatever the generator raises; nothing is cached in that case
        """
        key = self.key_for(exam_id, style, objective)

        with self._lock:
            entry = self._fresh_entry(key)
            if entry is not None:
                self._hits += 1
                entry.hits += 1
                entry.exam_ids.add(exam_id)
                logger.debug(f"Template cache hit {key}")
                return entry.template
            self._misses += 1

        template, _ = self._synthesize(key, exam_id, objective)
        return template

    def preload_exam_templates(self, profile: ExamProfile) -> int:
        """
        Eagerly synthesise every objective x style template for an exam.

        Idempotent, and does not touch hit/miss counters.

        Returns:
            Number of templates newly synthesised
        """
        created = 0
        for objective in profile.objectives:
            for style in STYLE_PRIORITY:
                key = self.key_for(profile.id, style, objective)
                _, is_new = self._synthesize(key, profile.id, objective)
                created += int(is_new)

        logger.info(f"Preloaded {created} templates for {profile.id}")
        return created

    # =========================================================================
    # Eviction
    # =========================================================================

    def clear_cache(self, exam_id: Optional[str] = None) -> int:
        """
        Evict templates for one exam's family key, or everything.

        Sibling exams share entries, so clearing cfa-l1 also clears what
        cfa-l2 would have reused.
        """
        with self._lock:
            if exam_id is None:
                cleared = len(self._entries)
                self._entries.clear()
            else:
                target = family_key(exam_id)
                doomed = [key for key in self._entries if key.family_key == target]
                for key in doomed:
                    del self._entries[key]
                cleared = len(doomed)
            self._prune_key_locks()

        logger.info(f"Cleared {cleared} cached templates" + (f" for {exam_id}" if exam_id else ""))
        return cleared

    def evict_expired(self) -> int:
        now = self._clock()
        with self._lock:
            expired = [
                key for key, entry in self._entries.items()
                if entry.is_expired(now, self.ttl_seconds)
            ]
            for key in expired:
                del self._entries[key]
            self._prune_key_locks()

        if expired:
            logger.info(f"Cleaned {len(expired)} expired question template cache entries")
        return len(expired)

    # =========================================================================
    # Introspection
    # =========================================================================

    def get_inheritance_tree(self, exam_id: str) -> InheritanceTree:
        """Family membership and shared keys for an exam. Read-only."""
        family = resolve_family(exam_id)
        key_prefix = family_key(exam_id)
        now = self._clock()

        with self._lock:
            cached = sorted(
                str(key) for key, entry in self._entries.items()
                if key.family_key == key_prefix and not entry.is_expired(now, self.ttl_seconds)
            )

        if family is None:
            return InheritanceTree(
                exam_id=exam_id,
                family_key=key_prefix,
                family_id=None,
                family_name=None,
                member_patterns=[],
                member_exam_ids=[exam_id],
                base_styles=[style.value for style in QUESTION_PATTERNS],
                cached_keys=cached,
                inherited_customizations=["Base question patterns only"],
            )

        members = list(family.known_exam_ids)
        if exam_id not in members:
            members.append(exam_id)

        return InheritanceTree(
            exam_id=exam_id,
            family_key=key_prefix,
            family_id=family.id,
            family_name=family.name,
            member_patterns=list(family.member_patterns),
            member_exam_ids=members,
            base_styles=[style.value for style in STYLE_PRIORITY],
            cached_keys=cached,
            inherited_customizations=[
                f"Family-specific prompts for {', '.join(s.value for s in family.base_prompts)}",
                "Shared context and terminology",
                "Templates shared across every member exam",
            ],
        )

    def get_performance_metrics(self) -> CacheMetrics:
        now = self._clock()
        with self._lock:
            hits, misses, synthesized = self._hits, self._misses, self._synthesized
            size = len(self._entries)
            expired = sum(1 for e in self._entries.values() if e.is_expired(now, self.ttl_seconds))
            ranked = sorted(self._entries.items(), key=lambda item: item[1].hits, reverse=True)
            most_used = [str(key) for key, entry in ranked[:MOST_USED_LIMIT] if entry.hits > 0]

        lookups = hits + misses
        hit_rate = round(hits / lookups * 100, 1) if lookups else 0.0

        recommendations = []
        if lookups and hit_rate < LOW_HIT_RATE_PERCENT:
            recommendations.append("Consider increasing the template TTL or preloading exams to improve hit rate")
        if size > self.max_entries:
            recommendations.append("Cache size is large, consider implementing LRU eviction")
        if expired:
            recommendations.append(f"{expired} expired templates are waiting for evict_expired()")

        return CacheMetrics(
            cache_size=size,
            hits=hits,
            misses=misses,
            hit_rate=hit_rate,
            synthesized=synthesized,
            most_used_templates=most_used,
            recommendations=recommendations,
        )

    def optimize_generation_order(self, requests: Iterable[GenerationRequest]) -> list[PrioritizedRequest]:
        """
        Order pending generation requests, cheapest first.

        Requests with a live cached template come first; direct questions and
        family members get smaller bonuses.
        Does not count as cache lookups.
        """
        now = self._clock()
        prioritized = []
        for request in requests:
            key = self.key_for(request.exam_id, request.style, request.objective)
            priority = 1

            with self._lock:
                entry = self._entries.get(key)
                if entry is not None and not entry.is_expired(now, self.ttl_seconds):
                    priority += CACHED_PRIORITY

            if key.style == QuestionStyle.DIRECT:
                priority += DIRECT_PRIORITY
            if resolve_family(request.exam_id) is not None:
                priority += FAMILY_PRIORITY

            prioritized.append(PrioritizedRequest(
                exam_id=request.exam_id,
                objective_id=request.objective.id,
                style=key.style,
                priority=priority,
            ))

        return sorted(prioritized, key=lambda r: r.priority, reverse=True)

    def key_lock_count(self) -> int:
        """Number of per-key synthesis locks currently held in the lock table."""
        with self._lock:
            return len(self._key_locks)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
