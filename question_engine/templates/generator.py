"""
Template synthesis collaborators.

TemplateCache never builds prompts itself; it delegates to a TemplateGenerator.
The default InheritedTemplateGenerator layers objective guidance on top of the
family (or base) prompt for the style.
"""
from __future__ import annotations

from typing import Optional, Protocol

from question_engine.profiles.models import CognitiveLevel, Difficulty, ExamObjective, QuestionStyle
from question_engine.selection.patterns import get_pattern
from question_engine.templates.families import ExamFamily

LEVEL_FOCUS: dict[CognitiveLevel, str] = {
    CognitiveLevel.KNOWLEDGE: "KNOWLEDGE LEVEL FOCUS: Test fundamental understanding and recall of key concepts.",
    CognitiveLevel.APPLICATION: "APPLICATION LEVEL FOCUS: Test practical application and problem-solving skills.",
    CognitiveLevel.SYNTHESIS: "SYNTHESIS LEVEL FOCUS: Test complex analysis and integration of multiple concepts.",
}

DIFFICULTY_GUIDANCE: dict[Difficulty, str] = {
    Difficulty.BEGINNER: "BEGINNER DIFFICULTY: Use clear, straightforward language and focus on basic concepts.",
    Difficulty.ADVANCED: "ADVANCED DIFFICULTY: Include nuanced concepts and require deeper analytical thinking.",
}


class TemplateGenerator(Protocol):
    """Anything that can synthesise a prompt skeleton. May be slow or raise."""

    def generate(
        self,
        family: Optional[ExamFamily],
        style: QuestionStyle,
        objective: ExamObjective,
    ) -> str:
        ...


class InheritedTemplateGenerator:
    """
    Builds prompt skeletons by inheritance.

    Layers, in order:
    1. family base prompt for the style (falls back to the base pattern)
    2. cognitive level focus
    3. difficulty guidance (intermediate adds nothing)
    4. family shared context
    5. anti-patterns to avoid

    Output depends only on the family and the objective signature fields,
    never on the individual exam id, so sibling exams can share it.
    """

    def generate(
        self,
        family: Optional[ExamFamily],
        style: QuestionStyle,
        objective: ExamObjective,
    ) -> str:
        style = QuestionStyle(style)
        pattern = get_pattern(style)

        base = pattern.prompt_template
        if family is not None and style in family.base_prompts:
            base = family.base_prompts[style]

        sections = [base, LEVEL_FOCUS[objective.level]]

        difficulty = DIFFICULTY_GUIDANCE.get(objective.difficulty)
        if difficulty:
            sections.append(difficulty)

        if family is not None and family.shared_context:
            sections.append(f"FAMILY CONTEXT: {family.shared_context}")

        if pattern.anti_patterns:
            avoid = "\n".join(f"- {item}" for item in pattern.anti_patterns)
            sections.append(f"AVOID:\n{avoid}")

        return "\n\n".join(sections)
