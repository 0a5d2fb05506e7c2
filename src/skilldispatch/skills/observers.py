"""
Lifecycle observers for the skill orchestrator.

An observer is any object (or mapping) providing some of these hooks, each
called with a single SkillEvent:

- on_match_start: a skill's match returned (raw, unclamped score)
- on_match_end: final clamped score for a skill, once per skill
- on_execute_start: the selected skill is about to execute
- on_execute_end: execution produced an output
- on_error: a match, guard or execute call raised

Observers are passive: they cannot change which skill runs or what it returns.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, List, Optional

from loguru import logger

from skilldispatch.skills.models import SkillContext, SkillIO, SkillOutput


@dataclass
class SkillEvent:
    """Payload delivered to observer hooks."""

    name: str
    skill: Any
    io: SkillIO
    ctx: SkillContext
    score: Optional[Any] = None
    output: Optional[SkillOutput] = None
    error: Optional[BaseException] = None
    timestamp: datetime = field(default_factory=datetime.now)

    @property
    def skill_name(self) -> Optional[str]:
        return getattr(self.skill, "name", None) if self.skill is not None else None


def get_hook(observer: Any, hook: str):
    if isinstance(observer, dict):
        return observer.get(hook)
    return getattr(observer, hook, None)


class SkillObserver:
    """Base class for observers; override any subset of the hooks."""

    on_match_start = None
    on_match_end = None
    on_execute_start = None
    on_execute_end = None
    on_error = None


class LoggingObserver(SkillObserver):
    def on_match_end(self, event: SkillEvent) -> None:
        logger.debug(f"[skills] {event.skill_name} scored {event.score}")

    def on_execute_start(self, event: SkillEvent) -> None:
        logger.info(f"[skills] executing: {event.skill_name}")

    def on_error(self, event: SkillEvent) -> None:
        logger.error(f"[skills] error in {event.skill_name}: {event.error}")


class RecordingObserver(SkillObserver):
    """Keeps every event in order and the most recent output."""

    def __init__(self) -> None:
        self.events: List[SkillEvent] = []
        self.last_output: Optional[SkillOutput] = None

    @property
    def names(self) -> List[str]:
        return [e.name for e in self.events]

    def clear(self) -> None:
        self.events.clear()
        self.last_output = None

    def on_match_start(self, event: SkillEvent) -> None:
        self.events.append(event)

    def on_match_end(self, event: SkillEvent) -> None:
        self.events.append(event)

    def on_execute_start(self, event: SkillEvent) -> None:
        self.events.append(event)

    def on_execute_end(self, event: SkillEvent) -> None:
        self.events.append(event)
        self.last_output = event.output

    def on_error(self, event: SkillEvent) -> None:
        self.events.append(event)


class LastOutputObserver(SkillObserver):
    """Holds only the most recent output."""

    def __init__(self) -> None:
        self.output: Optional[SkillOutput] = None

    def on_execute_end(self, event: SkillEvent) -> None:
        self.output = event.output
