"""
Built-in exam profiles.

A compact subset of each exam's objectives, re-weighted so the subset sums to
100. Enough for demos, the CLI, and integration tests.
"""
from __future__ import annotations

from question_engine.profiles.models import (
    CognitiveLevel,
    Difficulty,
    ExamConstraints,
    ExamContext,
    ExamObjective,
    ExamProfile,
    QuestionGenerationSettings,
    QuestionType,
    StylePreferences,
    TargetDistribution,
)

CFA_TERMINOLOGY = [
    "ROE", "ROA", "NPV", "IRR", "WACC", "beta", "alpha", "duration",
    "GIPS", "Sharpe ratio", "CAPM", "free cash flow", "yield",
]

CFA_L1 = ExamProfile(
    id="cfa-l1",
    name="CFA Level I",
    description="Chartered Financial Analyst Level I - Foundation of Investment Analysis",
    provider="CFA Institute",
    objectives=[
        ExamObjective(
            id="ethical-professional-standards",
            title="Ethical and Professional Standards",
            description="Ethics and Trust in Investment Profession, Code of Ethics and Standards",
            weight=25,
            level=CognitiveLevel.KNOWLEDGE,
            difficulty=Difficulty.INTERMEDIATE,
            questions_per_session=8,
            key_topics=[
                "Code of Ethics",
                "Standards of Professional Conduct",
                "Global Investment Performance Standards (GIPS)",
                "Research Objectivity Standards",
            ],
        ),
        ExamObjective(
            id="quantitative-methods",
            title="Quantitative Methods",
            description="Time Value of Money, Statistics, and Probability Concepts",
            weight=20,
            level=CognitiveLevel.APPLICATION,
            difficulty=Difficulty.INTERMEDIATE,
            questions_per_session=12,
            key_topics=[
                "Time Value of Money calculations",
                "Statistical measures and distributions",
                "Probability concepts",
                "Hypothesis testing",
            ],
        ),
        ExamObjective(
            id="financial-statement-analysis",
            title="Financial Statement Analysis",
            description="Financial Reporting, Analysis, and Ratio Calculations",
            weight=30,
            level=CognitiveLevel.APPLICATION,
            difficulty=Difficulty.ADVANCED,
            questions_per_session=15,
            prerequisites=["quantitative-methods"],
            key_topics=[
                "Financial ratios",
                "Balance sheet analysis",
                "Cash flow statement analysis",
                "Financial reporting quality",
            ],
        ),
        ExamObjective(
            id="economics",
            title="Economics",
            description="Microeconomics, Macroeconomics, and International Trade",
            weight=25,
            level=CognitiveLevel.KNOWLEDGE,
            difficulty=Difficulty.BEGINNER,
            questions_per_session=10,
            key_topics=[
                "Supply and demand analysis",
                "Market structures",
                "Monetary and fiscal policy",
                "Currency exchange rates",
            ],
            style_preferences=StylePreferences(
                forbidden_styles=frozenset({"case_study"}),
            ),
        ),
    ],
    question_types=[QuestionType.MULTIPLE_CHOICE],
    constraints=ExamConstraints(total_questions=180, time_minutes=270, option_count=3, passing_score=70),
    context=ExamContext(
        exam_format="Two 135-minute sessions of standalone multiple-choice questions",
        difficulty="Foundational",
        focus="Investment tools and ethical standards",
        calculator_allowed=True,
        terminology=CFA_TERMINOLOGY,
    ),
)

CFA_L2 = ExamProfile(
    id="cfa-l2",
    name="CFA Level II",
    description="Chartered Financial Analyst Level II - Advanced Investment Analysis",
    provider="CFA Institute",
    objectives=[
        ExamObjective(
            id="ethical-professional-standards",
            title="Ethical and Professional Standards",
            description="Application of CFA Institute Code and Standards in Practice",
            weight=30,
            level=CognitiveLevel.APPLICATION,
            difficulty=Difficulty.INTERMEDIATE,
            questions_per_session=6,
            key_topics=["Code and Standards", "Asset Manager Code", "Soft Dollar Standards"],
        ),
        ExamObjective(
            id="equity-valuation",
            title="Equity Valuation",
            description="Discounted cash flow, residual income, and market-based valuation",
            weight=40,
            level=CognitiveLevel.SYNTHESIS,
            difficulty=Difficulty.ADVANCED,
            questions_per_session=12,
            key_topics=["Free cash flow valuation", "Residual income", "Market multiples"],
        ),
        ExamObjective(
            id="fixed-income",
            title="Fixed Income",
            description="Term structure, arbitrage-free valuation, and credit analysis",
            weight=30,
            level=CognitiveLevel.APPLICATION,
            difficulty=Difficulty.ADVANCED,
            questions_per_session=10,
            key_topics=["Term structure", "Arbitrage-free valuation", "Credit analysis"],
        ),
    ],
    question_types=[QuestionType.VIGNETTE, QuestionType.MULTIPLE_CHOICE],
    constraints=ExamConstraints(total_questions=88, time_minutes=264, option_count=3, passing_score=70),
    context=ExamContext(
        exam_format="Item sets built around case vignettes",
        difficulty="Advanced application",
        focus="Asset valuation",
        calculator_allowed=True,
        terminology=CFA_TERMINOLOGY,
    ),
)

AWS_SAA = ExamProfile(
    id="aws-saa",
    name="AWS Solutions Architect Associate",
    description="Design resilient, high-performing, secure, and cost-optimized architectures",
    provider="Amazon Web Services",
    objectives=[
        ExamObjective(
            id="secure-architectures",
            title="Design Secure Architectures",
            weight=30,
            level=CognitiveLevel.APPLICATION,
            difficulty=Difficulty.INTERMEDIATE,
            key_topics=["IAM policies", "Encryption", "VPC security"],
        ),
        ExamObjective(
            id="resilient-architectures",
            title="Design Resilient Architectures",
            weight=26,
            level=CognitiveLevel.SYNTHESIS,
            difficulty=Difficulty.ADVANCED,
            key_topics=["Multi-AZ deployments", "Decoupling", "Disaster recovery"],
        ),
        ExamObjective(
            id="high-performing-architectures",
            title="Design High-Performing Architectures",
            weight=24,
            level=CognitiveLevel.APPLICATION,
            difficulty=Difficulty.INTERMEDIATE,
            key_topics=["Caching", "Storage selection", "Database selection"],
        ),
        ExamObjective(
            id="cost-optimized-architectures",
            title="Design Cost-Optimized Architectures",
            weight=20,
            level=CognitiveLevel.KNOWLEDGE,
            difficulty=Difficulty.INTERMEDIATE,
            key_topics=["Pricing models", "Storage tiers", "Right sizing"],
        ),
    ],
    question_types=[QuestionType.MULTIPLE_CHOICE, QuestionType.MULTIPLE_RESPONSE],
    constraints=ExamConstraints(total_questions=65, time_minutes=130, option_count=4, passing_score=72),
    context=ExamContext(
        exam_format="Multiple choice and multiple response",
        difficulty="Associate",
        focus="Well-Architected solution design",
        terminology=["S3", "EC2", "VPC", "IAM", "RDS", "DynamoDB", "CloudFront", "Auto Scaling"],
    ),
)

DATA_ENGINEER_CERT = ExamProfile(
    id="data-engineer-cert",
    name="Data Engineer Guild Certification",
    description="Internal certification for data engineering practitioners",
    provider="Enterprise Guild",
    objectives=[
        ExamObjective(
            id="data-pipelines",
            title="Data Pipeline Design",
            weight=50,
            level=CognitiveLevel.APPLICATION,
            difficulty=Difficulty.INTERMEDIATE,
            key_topics=["Batch processing", "Stream processing", "Orchestration"],
        ),
        ExamObjective(
            id="data-modeling",
            title="Data Modeling",
            weight=50,
            level=CognitiveLevel.KNOWLEDGE,
            difficulty=Difficulty.BEGINNER,
            key_topics=["Star schema", "Normalization", "Slowly changing dimensions"],
        ),
    ],
    question_types=[QuestionType.MULTIPLE_CHOICE],
    constraints=ExamConstraints(total_questions=50, time_minutes=90, option_count=4, passing_score=75),
    context=ExamContext(
        exam_format="Multiple choice",
        difficulty="Practitioner",
        focus="Reliable, governed data platforms",
        terminology=["ETL", "ELT", "Kafka", "partitioning", "idempotency", "data lineage"],
    ),
    question_generation=QuestionGenerationSettings(
        style_distribution=TargetDistribution(direct=0.5, scenario=0.4, case_study=0.1),
    ),
)

BUILTIN_PROFILES: list[ExamProfile] = [CFA_L1, CFA_L2, AWS_SAA, DATA_ENGINEER_CERT]
