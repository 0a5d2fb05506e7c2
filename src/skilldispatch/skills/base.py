"""
Base Skill - the capability set every routable handler exposes.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence, Union

from skilldispatch.skills.models import SkillContext, SkillIO, SkillOutput, SkillScore

MatchFn = Callable[[SkillIO, SkillContext], Union[SkillScore, Awaitable[SkillScore]]]
GuardFn = Callable[[SkillIO, SkillContext], Union[None, Awaitable[None]]]
ExecuteFn = Callable[[SkillIO, SkillContext], Union[SkillOutput, Awaitable[SkillOutput]]]


class Skill(ABC):
    """
    Abstract base class for skills.

    Subclasses implement:
    - match: cheap, deterministic relevance score in [0, 1]
    - execute: the business logic, side effects through ``ctx.services``

    ``guard`` is optional. Leave it as ``None`` or provide a callable
    ``guard(io, ctx)`` that raises to block execution.

    The orchestrator only relies on these attributes, so any object exposing
    them can be registered without subclassing.
    """

    name: str = ""
    version: Optional[str] = None
    summary: Optional[str] = None
    description: Optional[str] = None
    tags: Sequence[str] = ()
    input_schema: Optional[Dict[str, Any]] = None

    guard: Optional[GuardFn] = None

    @abstractmethod
    def match(self, io: SkillIO, ctx: SkillContext) -> Union[SkillScore, Awaitable[SkillScore]]:
        """Return how relevant this skill is to ``io``."""

    @abstractmethod
    def execute(self, io: SkillIO, ctx: SkillContext) -> Union[SkillOutput, Awaitable[SkillOutput]]:
        """Handle ``io`` and produce an output envelope."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, version={self.version!r})"


class FunctionSkill(Skill):
    """Skill assembled from plain (sync or async) callables."""

    def __init__(
        self,
        name: str,
        match: MatchFn,
        execute: ExecuteFn,
        *,
        guard: Optional[GuardFn] = None,
        version: Optional[str] = None,
        summary: Optional[str] = None,
        description: Optional[str] = None,
        tags: Optional[List[str]] = None,
        input_schema: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.name = name
        self.version = version
        self.summary = summary
        self.description = description
        self.tags = list(tags or [])
        self.input_schema = input_schema
        self.guard = guard
        self._match = match
        self._execute = execute

    def match(self, io: SkillIO, ctx: SkillContext):
        return self._match(io, ctx)

    def execute(self, io: SkillIO, ctx: SkillContext):
        return self._execute(io, ctx)
