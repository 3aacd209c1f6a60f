"""Per-style counters for one (exam, objective) bucket."""
from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Mapping

from question_engine.profiles.models import STYLE_PRIORITY, QuestionStyle


@dataclass
class StyleCounts:
    """Running count of emitted styles. Invariant: total == direct + scenario + case_study."""
    direct: int = 0
    scenario: int = 0
    case_study: int = 0
    total: int = 0

    def increment(self, style: QuestionStyle | str) -> None:
        field_name = QuestionStyle(style).value
        setattr(self, field_name, getattr(self, field_name) + 1)
        self.total += 1

    def get(self, style: QuestionStyle | str) -> int:
        return getattr(self, QuestionStyle(style).value)

    def fractions(self) -> dict[QuestionStyle, float]:
        if self.total == 0:
            return {style: 0.0 for style in STYLE_PRIORITY}
        return {style: self.get(style) / self.total for style in STYLE_PRIORITY}

    def merge(self, other: "StyleCounts") -> "StyleCounts":
        return StyleCounts(
            direct=self.direct + other.direct,
            scenario=self.scenario + other.scenario,
            case_study=self.case_study + other.case_study,
            total=self.total + other.total,
        )

    def copy(self) -> "StyleCounts":
        return StyleCounts(**asdict(self))

    def to_dict(self) -> dict[str, int]:
        return asdict(self)

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, int]) -> "StyleCounts":
        """Build from a style -> count mapping; total is derived from the counts."""
        counts = cls()
        for key, value in mapping.items():
            if key == "total":
                continue
            style = QuestionStyle(key)
            if value < 0:
                raise ValueError(f"Negative count for {style.value}: {value}")
            setattr(counts, style.value, int(value))
        counts.total = counts.direct + counts.scenario + counts.case_study
        return counts
