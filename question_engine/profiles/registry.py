"""
Exam profile registry.

Holds the read-only ExamProfile objects the engine works against. Profiles can
be registered in code, loaded from JSON files, or taken from the built-in set.
"""
from __future__ import annotations

import json
from pathlib import Path
from typing import Iterable, Iterator, Optional

from loguru import logger

from question_engine.core.errors import ExamNotFoundError
from question_engine.profiles.models import ExamObjective, ExamProfile, TargetDistribution


class ProfileRegistry:
    """In-memory lookup of exam profiles by id."""

    def __init__(self, profiles: Optional[Iterable[ExamProfile]] = None):
        self._profiles: dict[str, ExamProfile] = {}
        for profile in profiles or []:
            self.register(profile)

    def register(self, profile: ExamProfile) -> None:
        """Add or replace a profile."""
        if profile.id in self._profiles:
            logger.debug(f"Replacing exam profile {profile.id}")
        self._profiles[profile.id] = profile

    def get(self, exam_id: str) -> ExamProfile:
        try:
            return self._profiles[exam_id]
        except KeyError:
            raise ExamNotFoundError(exam_id) from None

    def get_objective(self, exam_id: str, objective_id: str) -> ExamObjective:
        return self.get(exam_id).objective(objective_id)

    def exam_ids(self) -> list[str]:
        return sorted(self._profiles)

    def exam_overrides(self) -> dict[str, TargetDistribution]:
        """Exam id -> style distribution override for profiles that declare one."""
        return {
            exam_id: profile.style_distribution
            for exam_id, profile in self._profiles.items()
            if profile.style_distribution is not None
        }

    def load_json(self, path: str | Path) -> ExamProfile:
        """Load and register a single profile from a JSON file."""
        path = Path(path)
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)

        profile = ExamProfile.model_validate(data)
        self.register(profile)
        logger.info(f"Loaded exam profile {profile.id} from {path.name}")
        return profile

    def load_directory(self, directory: str | Path) -> int:
        """Load every *.json profile in a directory. Returns the number loaded."""
        loaded = 0
        for path in sorted(Path(directory).glob("*.json")):
            self.load_json(path)
            loaded += 1
        return loaded

    def __contains__(self, exam_id: object) -> bool:
        return exam_id in self._profiles

    def __iter__(self) -> Iterator[ExamProfile]:
        return iter(self._profiles.values())

    def __len__(self) -> int:
        return len(self._profiles)


def default_registry() -> ProfileRegistry:
    """Registry pre-populated with the built-in exam profiles."""
    from question_engine.profiles.builtin import BUILTIN_PROFILES

    return ProfileRegistry(BUILTIN_PROFILES)
