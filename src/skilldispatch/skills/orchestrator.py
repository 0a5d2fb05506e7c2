"""
SkillOrchestrator - pick at most one skill for a request and run it.

Routing:
1) Score every registered skill in registry order (one at a time)
2) Rank by score, keeping registry order among ties
3) Keep the top K, then take the first one at or above the threshold

Execution: guard (if any) -> execute, with observers notified at each phase.
"""

from __future__ import annotations

import asyncio
import inspect
import math
import numbers
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Tuple

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field

from skilldispatch.skills.errors import SkillTimeoutError
from skilldispatch.skills.models import SkillContext, SkillIO, SkillOutput
from skilldispatch.skills.observers import SkillEvent, get_hook
from skilldispatch.skills.registry import SkillRegistry


class OrchestratorOptions(BaseModel):
    """Static orchestrator configuration, read-only once built."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    threshold: float = Field(default=0.4, ge=0.0, le=1.0)
    top_k: int = Field(default=3, ge=0)
    observers: Tuple[Any, ...] = ()
    # Seconds allowed for each awaited match/guard/execute call
    timeout: Optional[float] = Field(default=None, gt=0)

    @classmethod
    def from_config(cls, config: Any, observers: Any = ()) -> "OrchestratorOptions":
        timeout = config.get("orchestrator.timeout_seconds")
        return cls(
            threshold=float(config.get("orchestrator.threshold", 0.4)),
            top_k=int(config.get("orchestrator.top_k", 3)),
            timeout=float(timeout) if timeout is not None else None,
            observers=tuple(observers or ()),
        )


@dataclass(frozen=True)
class ScoredSkill:
    skill: Any
    score: float


@dataclass(frozen=True)
class RouteResult:
    """Outcome of routing. ``score`` is 0 when nothing was selected."""

    skill: Optional[Any]
    score: float
    best_score: float = 0.0
    ranked: Tuple[ScoredSkill, ...] = ()

    @property
    def selected(self) -> bool:
        return self.skill is not None


def normalize_score(raw: Any) -> float:
    """Coerce a match result into [0, 1]; NaN and non-numbers become 0."""
    if isinstance(raw, bool) or not isinstance(raw, numbers.Real):
        return 0.0
    value = float(raw)
    if math.isnan(value):
        return 0.0
    return max(0.0, min(1.0, value))


def coerce_output(value: Any) -> SkillOutput:
    if isinstance(value, SkillOutput):
        return value
    if isinstance(value, Mapping) and "result" in value:
        return SkillOutput(
            result=value["result"],
            artifacts=dict(value.get("artifacts") or {}),
            meta=dict(value.get("meta") or {}),
        )
    return SkillOutput(result=value)


async def _invoke(
    fn: Any,
    io: SkillIO,
    ctx: SkillContext,
    timeout: Optional[float],
    *,
    name: str,
    phase: str,
) -> Any:
    """Call a skill function and await its result, bounded by ``timeout``.

    Only an expired deadline raises SkillTimeoutError. Anything the skill
    raises itself, a TimeoutError included, comes back unchanged.
    """
    result = fn(io, ctx)
    if not inspect.isawaitable(result):
        return result
    if timeout is None:
        return await result

    task = asyncio.ensure_future(result)
    try:
        done, _ = await asyncio.wait({task}, timeout=timeout)
    except asyncio.CancelledError:
        task.cancel()
        raise
    if not done:
        task.cancel()
        raise SkillTimeoutError(name, phase, timeout)
    return task.result()


def _skill_name(skill: Any) -> str:
    return str(getattr(skill, "name", None) or type(skill).__name__)


class SkillOrchestrator:
    """
    Route requests to registered skills and execute the winner.

    Holds no per-call state, so concurrent ``run`` calls on one instance are
    independent. Each ``route`` works on a registry snapshot taken up front.
    """

    def __init__(
        self,
        registry: SkillRegistry,
        options: Optional[OrchestratorOptions] = None,
    ) -> None:
        self._registry = registry
        self._options = options or OrchestratorOptions()

    @property
    def registry(self) -> SkillRegistry:
        return self._registry

    @property
    def options(self) -> OrchestratorOptions:
        return self._options

    def _timeout(self, override: Optional[float]) -> Optional[float]:
        return override if override is not None else self._options.timeout

    async def route(
        self, io: SkillIO, ctx: SkillContext, *, timeout: Optional[float] = None
    ) -> RouteResult:
        timeout = self._timeout(timeout)
        skills = self._registry.list()
        scored = []

        for skill in skills:
            score = 0.0
            try:
                raw = await _invoke(
                    skill.match, io, ctx, timeout, name=_skill_name(skill), phase="match"
                )
                await self._notify("on_match_start", skill, io, ctx, score=raw)
                score = normalize_score(raw)
            except Exception as e:
                logger.warning(f"Skill '{_skill_name(skill)}' match failed: {e}")
                await self._notify("on_error", skill, io, ctx, error=e)
                score = 0.0
            await self._notify("on_match_end", skill, io, ctx, score=score)
            scored.append(ScoredSkill(skill=skill, score=score))

        # sorted() is stable, so equal scores keep registry order
        ranked = tuple(sorted(scored, key=lambda s: s.score, reverse=True))
        best_score = ranked[0].score if ranked else 0.0

        for candidate in ranked[: self._options.top_k]:
            if candidate.score >= self._options.threshold:
                logger.debug(
                    f"Routed to '{_skill_name(candidate.skill)}' (score={candidate.score:.3f})"
                )
                return RouteResult(
                    skill=candidate.skill,
                    score=candidate.score,
                    best_score=best_score,
                    ranked=ranked,
                )

        logger.debug(
            f"No skill met threshold {self._options.threshold} "
            f"within top {self._options.top_k} (best={best_score:.3f})"
        )
        return RouteResult(skill=None, score=0.0, best_score=best_score, ranked=ranked)

    async def run(
        self, io: SkillIO, ctx: SkillContext, *, timeout: Optional[float] = None
    ) -> SkillOutput:
        route = await self.route(io, ctx, timeout=timeout)
        skill = route.skill
        if skill is None:
            return SkillOutput.no_match(route.score, route.best_score)

        timeout = self._timeout(timeout)
        name = _skill_name(skill)
        try:
            guard = getattr(skill, "guard", None)
            if guard is not None:
                await _invoke(guard, io, ctx, timeout, name=name, phase="guard")
            await self._notify("on_execute_start", skill, io, ctx)
            logger.info(f"Executing skill '{name}' (score={route.score:.3f})")
            output = coerce_output(
                await _invoke(skill.execute, io, ctx, timeout, name=name, phase="execute")
            )
        except Exception as e:
            logger.error(f"Skill '{name}' failed: {e}")
            await self._notify("on_error", skill, io, ctx, error=e)
            raise

        await self._notify("on_execute_end", skill, io, ctx, output=output)
        return output

    async def _notify(
        self, hook: str, skill: Any, io: SkillIO, ctx: SkillContext, **payload: Any
    ) -> None:
        observers = self._options.observers
        if not observers:
            return

        event = SkillEvent(name=hook, skill=skill, io=io, ctx=ctx, **payload)
        for observer in observers:
            fn = get_hook(observer, hook)
            if fn is None:
                continue
            try:
                result = fn(event)
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                # Observer faults never change routing or execution outcomes
                logger.warning(f"Observer {type(observer).__name__}.{hook} failed: {e}")
