"""
Question Style Pattern Catalogue.

Prompt skeletons, examples, and anti-patterns for each question style. These
are the base patterns every exam family inherits from.
"""
from __future__ import annotations

from dataclasses import dataclass, field

from question_engine.profiles.models import QuestionStyle


@dataclass(frozen=True)
class StylePattern:
    """Generation guidance for one question style."""
    style: QuestionStyle
    prompt_template: str
    examples: tuple[str, ...] = field(default_factory=tuple)
    anti_patterns: tuple[str, ...] = field(default_factory=tuple)


DIRECT_PATTERN = StylePattern(
    style=QuestionStyle.DIRECT,
    prompt_template="""Create a DIRECT, CONCISE question that tests fundamental understanding without lengthy scenarios.

DIRECT QUESTION REQUIREMENTS:
- Ask about a specific concept, definition, formula, or principle
- Keep context to 1 sentence maximum or none at all
- Focus on recall, recognition, or simple application
- NO scenarios, case studies, or company examples
- NO "A company..." or "An analyst..." setups

PREFERRED FORMATS (rotate these for variety):
- "What defines...?" / "How is [concept] calculated?" / "Which statement about [topic] is correct?"
- "What distinguishes [A] from [B]?" / "Which factor determines [outcome]?"
- "What happens when [condition] occurs?"
- Use straightforward, academic language""",
    examples=(
        "How does ROE differ from ROA in measuring profitability?",
        "What does modified duration measure in bond analysis?",
        "What distinguishes a forward contract from a futures contract?",
    ),
    anti_patterns=(
        "A portfolio manager at XYZ firm...",
        "An analyst is evaluating...",
        "Consider a company that...",
        "In the following scenario...",
    ),
)

SCENARIO_PATTERN = StylePattern(
    style=QuestionStyle.SCENARIO,
    prompt_template="""Create a SHORT SCENARIO question that applies concepts to realistic situations without lengthy case studies.

SHORT SCENARIO REQUIREMENTS:
- Maximum 2-3 sentences of context
- Focus on practical application or decision-making
- Include specific, relevant details (numbers, situations)
- Keep scenarios focused and purposeful

PREFERRED FORMATS:
- "A [role] needs to [action] when [specific condition]. What should they do?"
- "Given [specific parameters], which [method/approach] is most appropriate?"
- "If [specific situation occurs], what [principle/rule] applies?"
- Use realistic but generic situations""",
    examples=(
        "A portfolio has a beta of 1.3 and expected return of 12%. If the market return is 10%, what is the implied risk-free rate?",
        "A bond trading at 102 with 3 years to maturity has a 5% coupon rate. What is its current yield?",
    ),
    anti_patterns=(
        "Multi-paragraph company backgrounds",
        "Detailed personal histories",
        "Unnecessary contextual details",
    ),
)

CASE_STUDY_PATTERN = StylePattern(
    style=QuestionStyle.CASE_STUDY,
    prompt_template="""Create a COMPREHENSIVE CASE STUDY that requires complex analysis and strategic thinking.

CASE STUDY REQUIREMENTS:
- Multi-paragraph scenario with interconnected details and several data points
- Requires synthesis of multiple concepts or principles
- Multiple valid considerations or trade-offs
- Use the exam's own terminology throughout""",
    examples=(
        "Complex portfolio rebalancing with tax implications, liquidity constraints, and changing client objectives",
        "Corporate restructuring decision involving governance, financing, and stakeholder considerations",
    ),
    anti_patterns=(
        "Simple calculation problems with lengthy setup",
        "Basic concept questions with unnecessary background",
        "Single-factor decision problems",
    ),
)

QUESTION_PATTERNS: dict[QuestionStyle, StylePattern] = {
    QuestionStyle.DIRECT: DIRECT_PATTERN,
    QuestionStyle.SCENARIO: SCENARIO_PATTERN,
    QuestionStyle.CASE_STUDY: CASE_STUDY_PATTERN,
}


def get_pattern(style: QuestionStyle | str) -> StylePattern:
    """Get the base pattern for a style."""
    return QUESTION_PATTERNS[QuestionStyle(style)]
