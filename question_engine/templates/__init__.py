"""Prompt template caching with exam-family inheritance."""
from question_engine.templates.cache import (
    CachedTemplate,
    CacheMetrics,
    GenerationRequest,
    InheritanceTree,
    PrioritizedRequest,
    TemplateCache,
    TemplateKey,
)
from question_engine.templates.families import EXAM_FAMILIES, ExamFamily, family_key, resolve_family
from question_engine.templates.generator import InheritedTemplateGenerator, TemplateGenerator

__all__ = [
    "CachedTemplate",
    "CacheMetrics",
    "EXAM_FAMILIES",
    "ExamFamily",
    "GenerationRequest",
    "InheritanceTree",
    "InheritedTemplateGenerator",
    "PrioritizedRequest",
    "TemplateCache",
    "TemplateGenerator",
    "TemplateKey",
    "family_key",
    "resolve_family",
]
