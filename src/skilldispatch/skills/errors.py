"""
Exceptions raised by the skills runtime.

Scoring faults never surface as exceptions (they are absorbed into a zero
score); guard and execute faults are re-raised to the caller unchanged.
"""

from __future__ import annotations

from typing import Optional


class SkillError(Exception):
    """Base class for skills runtime errors."""


class SkillLoadError(SkillError):
    """A skill folder could not be turned into a skill."""


class SkillExecutionError(SkillError):
    """A skill was selected but cannot execute."""


class SkillTimeoutError(SkillError, TimeoutError):
    """A guard or execute call exceeded the configured timeout."""

    def __init__(self, skill_name: str, phase: str, timeout: Optional[float]) -> None:
        self.skill_name = skill_name
        self.phase = phase
        self.timeout = timeout
        super().__init__(f"Skill '{skill_name}' {phase} timed out after {timeout}s")
