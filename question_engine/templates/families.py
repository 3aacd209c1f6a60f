"""
Exam families for template inheritance.

Sibling exams (all CFA levels, all AWS certifications, ...) share one set of
base prompts, so a template synthesised for cfa-l1 is reused by cfa-l2 when
the objective signature matches.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from fnmatch import fnmatch
from typing import Optional

from question_engine.profiles.models import QuestionStyle

STANDALONE_PREFIX = "exam:"


@dataclass(frozen=True)
class ExamFamily:
    """A group of exams sharing base prompts and context."""
    id: str
    name: str
    member_patterns: tuple[str, ...]
    known_exam_ids: tuple[str, ...] = ()
    base_prompts: dict[QuestionStyle, str] = field(default_factory=dict)
    shared_context: str = ""

    def matches(self, exam_id: str) -> bool:
        return any(fnmatch(exam_id, pattern) for pattern in self.member_patterns)


CFA_SERIES = ExamFamily(
    id="cfa-series",
    name="CFA Institute Examinations",
    member_patterns=("cfa-*",),
    known_exam_ids=("cfa-l1", "cfa-l2", "cfa-l3"),
    base_prompts={
        QuestionStyle.DIRECT: """Create a DIRECT question focused on CFA curriculum concepts.

CFA DIRECT QUESTION REQUIREMENTS:
- Test knowledge of definitions, formulas, standards, or principles
- Use CFA Institute terminology and Learning Outcome Statements (LOS)
- Keep to 1 sentence maximum, no scenarios or cases
- NO fictional companies or analyst scenarios

PREFERRED CFA FORMATS:
- "According to CFA Institute Standards, what is required for...?"
- "The formula for [metric] is...?"
- "What is the primary difference between [concept A] and [concept B]?"
- Keep the stem self-contained""",
        QuestionStyle.SCENARIO: """Create a SHORT SCENARIO question for CFA curriculum application.

CFA SCENARIO REQUIREMENTS:
- 2-3 sentences maximum with specific financial parameters
- Include realistic financial data (returns, ratios, values)
- Focus on investment decision-making or analysis
- Avoid lengthy company backgrounds and personal investor stories

CFA SCENARIO FORMATS:
- "A portfolio has [specific metrics]. What does this indicate?"
- "An analyst calculates [specific ratio]. What conclusion should be drawn?"
- "Given [market conditions], which [principle/method] applies?"
- Keep the context focused on one decision""",
    },
    shared_context=(
        "CFA Institute curriculum context with emphasis on ethical standards, "
        "investment analysis, and professional conduct"
    ),
)

AWS_SERIES = ExamFamily(
    id="aws-series",
    name="AWS Cloud Certifications",
    member_patterns=("aws-*",),
    known_exam_ids=("aws-cloud-practitioner", "aws-saa", "aws-developer", "aws-data-analytics-specialty"),
    base_prompts={
        QuestionStyle.DIRECT: """Create a DIRECT question about AWS services and concepts.

AWS DIRECT QUESTION REQUIREMENTS:
- Test knowledge of AWS service definitions, features, or use cases
- Use official AWS terminology and service names
- Keep to 1 sentence, no implementation scenarios
- NO fictional companies or complex architectures

PREFERRED AWS FORMATS:
- "What is the primary benefit of [AWS service]?"
- "Which AWS service provides [specific capability]?"
- "What does [AWS feature] enable?"
- Keep the stem self-contained""",
        QuestionStyle.SCENARIO: """Create a SHORT SCENARIO question for AWS implementation decisions.

AWS SCENARIO REQUIREMENTS:
- 2-3 sentences with specific technical requirements
- Include realistic technical constraints (SLA, scale, budget)
- Focus on architectural decisions and best practices

AWS SCENARIO FORMATS:
- "An application requires [specific SLA/scale]. Which AWS approach is best?"
- "A workload has [technical constraints]. What service should be used?"
- Keep the context focused on one decision""",
    },
    shared_context="AWS cloud architecture context emphasizing Well-Architected Framework principles",
)

ENTERPRISE_CERTS = ExamFamily(
    id="enterprise-certs",
    name="Enterprise Guild Certifications",
    member_patterns=("data-engineer-cert", "ml-engineer-cert", "software-engineer-cert"),
    known_exam_ids=("data-engineer-cert", "ml-engineer-cert", "software-engineer-cert"),
    base_prompts={
        QuestionStyle.DIRECT: """Create a DIRECT question about technical engineering concepts.

ENGINEERING DIRECT QUESTION REQUIREMENTS:
- Test knowledge of technical definitions, methodologies, or tools
- Use industry-standard terminology and best practices
- Keep to 1 sentence, no implementation scenarios
- VARY question starters between different formats

PREFERRED ENGINEERING FORMATS:
- "How does [technology A] differ from [technology B]?"
- "Which characteristic defines [pattern/concept]?"
- "What happens when [condition] occurs in [system]?"
- Keep the stem self-contained""",
        QuestionStyle.SCENARIO: """Create a SHORT SCENARIO question for engineering decision-making.

ENGINEERING SCENARIO REQUIREMENTS:
- 2-3 sentences with specific technical requirements or constraints
- Include realistic technical parameters (performance, scale, reliability)
- Focus on engineering trade-offs and solution design

ENGINEERING SCENARIO FORMATS:
- "A system requires [performance/scale metrics]. Which approach is optimal?"
- "Given [technical constraints], what technology choice is best?"
- Keep the context focused on one decision""",
    },
    shared_context="Enterprise engineering context with focus on scalability, reliability, and best practices",
)

# Checked in order; first match wins
EXAM_FAMILIES: dict[str, ExamFamily] = {
    family.id: family for family in (CFA_SERIES, AWS_SERIES, ENTERPRISE_CERTS)
}


def resolve_family(exam_id: str) -> Optional[ExamFamily]:
    """Family an exam belongs to, or None for standalone exams."""
    for family in EXAM_FAMILIES.values():
        if family.matches(exam_id):
            return family
    return None


def family_key(exam_id: str) -> str:
    """Cache key namespace for an exam: its family id, or exam:<id> when standalone."""
    family = resolve_family(exam_id)
    return family.id if family is not None else f"{STANDALONE_PREFIX}{exam_id}"
