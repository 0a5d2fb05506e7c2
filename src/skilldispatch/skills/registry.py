"""
SkillRegistry - ordered, mutable collection of skills.
"""

from __future__ import annotations

import threading
from typing import Any, List

from loguru import logger


class SkillRegistry:
    """
    Ordered list of registered skills.

    Names are not unique: ``register`` never deduplicates, while
    ``unregister`` drops every entry carrying the given name. ``list`` returns
    a snapshot so routing is unaffected by later mutation.
    """

    def __init__(self) -> None:
        self._skills: List[Any] = []
        self._lock = threading.Lock()

    def register(self, *skills: Any) -> None:
        with self._lock:
            self._skills.extend(skills)
        for skill in skills:
            logger.debug(f"Registered skill: {getattr(skill, 'name', skill)}")

    def unregister(self, name: str) -> None:
        with self._lock:
            before = len(self._skills)
            self._skills = [s for s in self._skills if getattr(s, "name", None) != name]
            removed = before - len(self._skills)
        if removed:
            logger.debug(f"Unregistered {removed} skill(s) named '{name}'")

    def list(self) -> List[Any]:
        with self._lock:
            return list(self._skills)

    def names(self) -> List[str]:
        return [getattr(s, "name", "") for s in self.list()]

    def __len__(self) -> int:
        with self._lock:
            return len(self._skills)
