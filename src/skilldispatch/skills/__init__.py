"""
Skills subsystem - registry, routing orchestrator and folder loader.

Skill folders are discovered from ./skills/<id>/skill.{json,yaml,yml}.
"""

from __future__ import annotations

from skilldispatch.skills.base import FunctionSkill, Skill
from skilldispatch.skills.binding import SkillBinding
from skilldispatch.skills.errors import (
    SkillError,
    SkillExecutionError,
    SkillLoadError,
    SkillTimeoutError,
)
from skilldispatch.skills.loader import ManifestSkill, discover_skills, load_skill_from_folder
from skilldispatch.skills.models import (
    KeywordMatcher,
    SkillContext,
    SkillIO,
    SkillManifest,
    SkillOutput,
    SkillScore,
)
from skilldispatch.skills.observers import (
    LastOutputObserver,
    LoggingObserver,
    RecordingObserver,
    SkillEvent,
    SkillObserver,
)
from skilldispatch.skills.orchestrator import (
    OrchestratorOptions,
    RouteResult,
    ScoredSkill,
    SkillOrchestrator,
)
from skilldispatch.skills.registry import SkillRegistry

__all__ = [
    "FunctionSkill",
    "KeywordMatcher",
    "LastOutputObserver",
    "LoggingObserver",
    "ManifestSkill",
    "OrchestratorOptions",
    "RecordingObserver",
    "RouteResult",
    "ScoredSkill",
    "Skill",
    "SkillBinding",
    "SkillContext",
    "SkillError",
    "SkillEvent",
    "SkillExecutionError",
    "SkillIO",
    "SkillLoadError",
    "SkillManifest",
    "SkillObserver",
    "SkillOrchestrator",
    "SkillOutput",
    "SkillRegistry",
    "SkillScore",
    "SkillTimeoutError",
    "discover_skills",
    "load_skill_from_folder",
]
