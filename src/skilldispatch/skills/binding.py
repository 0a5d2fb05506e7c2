"""
SkillBinding - keep one orchestrator per skill list for a long-lived surface.

A UI component or chat session holds a binding, calls ``run(input, hints)``,
and reads ``last`` for the most recent output.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, Optional, Sequence, Tuple

from skilldispatch.skills.models import SkillContext, SkillIO, SkillOutput
from skilldispatch.skills.observers import LastOutputObserver
from skilldispatch.skills.orchestrator import OrchestratorOptions, SkillOrchestrator
from skilldispatch.skills.registry import SkillRegistry


class SkillBinding:
    def __init__(
        self,
        skills: Sequence[Any],
        ctx: SkillContext,
        *,
        threshold: float = 0.4,
        top_k: int = 3,
        observers: Iterable[Any] = (),
    ) -> None:
        self.ctx = ctx
        self._threshold = threshold
        self._top_k = top_k
        self._extra_observers = tuple(observers)
        self._last = LastOutputObserver()
        self._key = self._key_for(skills)
        self._orchestrator = self._build(skills)

    @property
    def orchestrator(self) -> SkillOrchestrator:
        return self._orchestrator

    @property
    def last(self) -> Optional[SkillOutput]:
        return self._last.output

    @staticmethod
    def _key_for(skills: Sequence[Any]) -> Tuple[int, ...]:
        return tuple(id(s) for s in skills)

    def _build(self, skills: Sequence[Any]) -> SkillOrchestrator:
        registry = SkillRegistry()
        registry.register(*skills)
        options = OrchestratorOptions(
            threshold=self._threshold,
            top_k=self._top_k,
            observers=(self._last, *self._extra_observers),
        )
        return SkillOrchestrator(registry, options)

    def set_skills(self, skills: Sequence[Any]) -> bool:
        """Rebuild the registry/orchestrator if the skill list changed."""
        key = self._key_for(skills)
        if key == self._key:
            return False
        self._orchestrator = self._build(skills)
        self._key = key
        return True

    async def run(self, input: Any, hints: Optional[Dict[str, Any]] = None) -> SkillOutput:
        return await self.orchestrator.run(SkillIO(input=input, hints=hints), self.ctx)
