"""
SkillDispatch - capability-routing dispatcher for independently authored skills.

Given an input plus optional hints, selects at most one registered skill by
relevance score and runs it, returning a normalized output envelope.
"""

from __future__ import annotations

__version__ = "0.1.0"

from skilldispatch.skills import (
    OrchestratorOptions,
    SkillContext,
    SkillIO,
    SkillOrchestrator,
    SkillOutput,
    SkillRegistry,
)

__all__ = [
    "OrchestratorOptions",
    "SkillContext",
    "SkillIO",
    "SkillOrchestrator",
    "SkillOutput",
    "SkillRegistry",
    "__version__",
]
