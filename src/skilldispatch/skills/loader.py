"""
Skill loader - turn a skill folder into a routable skill.

A skill folder holds a descriptor (``skill.json``, ``skill.yaml`` or
``skill.yml``) and optionally a Python module exporting ``execute(io, ctx)``
and ``guard(io, ctx)``. Matching is driven by the descriptor's keyword rules.
"""

from __future__ import annotations

import hashlib
import importlib.util
import inspect
import json
from pathlib import Path
from types import ModuleType
from typing import Any, Dict, List, Optional, Sequence, Union

import yaml
from loguru import logger
from pydantic import ValidationError

from skilldispatch.skills.base import Skill
from skilldispatch.skills.errors import SkillExecutionError, SkillLoadError
from skilldispatch.skills.models import KeywordMatcher, SkillContext, SkillIO, SkillManifest

DESCRIPTOR_NAMES = ("skill.json", "skill.yaml", "skill.yml")


def keyword_score(matchers: Sequence[KeywordMatcher], text: str) -> float:
    """Highest weight among the rules that match ``text``; 0 when none do."""
    text = text.lower()
    score = 0.0
    for matcher in matchers:
        if matcher.matches(text):
            score = max(score, matcher.weight)
    return score


class ManifestSkill(Skill):
    """Skill built from a descriptor and its optional Python module."""

    def __init__(self, manifest: SkillManifest, module: Optional[ModuleType] = None) -> None:
        self.manifest = manifest
        self.module = module
        self.name = manifest.name
        self.version = manifest.version
        self.summary = manifest.summary
        self.description = manifest.description
        self.tags = list(manifest.tags)
        self.input_schema = manifest.input_schema
        self.guard = getattr(module, "guard", None) if module is not None else None

    async def match(self, io: SkillIO, ctx: SkillContext) -> float:
        return keyword_score(self.manifest.matchers, io.text())

    async def execute(self, io: SkillIO, ctx: SkillContext) -> Any:
        fn = getattr(self.module, "execute", None) if self.module is not None else None
        if fn is None:
            raise SkillExecutionError("Skill module missing execute(io, ctx)")
        result = fn(io, ctx)
        if inspect.isawaitable(result):
            result = await result
        return result


def _read_descriptor(path: Path) -> Dict[str, Any]:
    try:
        content = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise SkillLoadError(f"Cannot read skill descriptor {path}: {e}") from e
    try:
        if path.suffix.lower() == ".json":
            data = json.loads(content)
        else:
            data = yaml.safe_load(content)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise SkillLoadError(f"Invalid skill descriptor {path}: {e}") from e
    if not isinstance(data, dict):
        raise SkillLoadError(f"Skill descriptor {path} must be a mapping/object")
    return data


def _find_descriptor(folder: Path) -> Optional[Path]:
    for name in DESCRIPTOR_NAMES:
        candidate = folder / name
        if candidate.is_file():
            return candidate
    return None


def _import_module(path: Path, skill_name: str) -> ModuleType:
    if not path.is_file():
        raise SkillLoadError(f"Skill module not found: {path}")

    digest = hashlib.sha1(str(path.resolve()).encode("utf-8")).hexdigest()[:10]
    module_name = f"skilldispatch_skill_{digest}"
    spec = importlib.util.spec_from_file_location(module_name, path)
    if spec is None or spec.loader is None:
        raise SkillLoadError(f"Cannot import skill module {path}")

    module = importlib.util.module_from_spec(spec)
    try:
        spec.loader.exec_module(module)
    except Exception as e:
        raise SkillLoadError(f"Failed to import module for skill '{skill_name}': {e}") from e
    return module


def load_skill_from_folder(folder: Union[str, Path]) -> ManifestSkill:
    """
    Load one skill folder.

    Raises:
        SkillLoadError: no descriptor, invalid descriptor, or bad module
    """
    folder = Path(folder)
    descriptor = _find_descriptor(folder)
    if descriptor is None:
        raise SkillLoadError(f"No skill.json or skill.yaml in {folder}")

    data = _read_descriptor(descriptor)
    try:
        manifest = SkillManifest.model_validate(data)
    except ValidationError as e:
        raise SkillLoadError(f"Invalid skill descriptor {descriptor}: {e}") from e
    manifest.source_dir = folder
    manifest.source_file = descriptor

    module = None
    if manifest.module:
        module = _import_module(folder / manifest.module, manifest.name)

    logger.debug(f"Loaded skill '{manifest.name}' from {descriptor}")
    return ManifestSkill(manifest, module)


def discover_skills(*roots: Union[str, Path]) -> List[ManifestSkill]:
    """Load every skill folder under ``roots``; broken folders are skipped."""
    skills: List[ManifestSkill] = []
    for root in roots:
        root = Path(root)
        if not root.is_dir():
            logger.debug(f"Skills directory not found: {root}")
            continue
        for folder in sorted(p for p in root.iterdir() if p.is_dir()):
            if _find_descriptor(folder) is None:
                continue
            try:
                skills.append(load_skill_from_folder(folder))
            except SkillLoadError as e:
                logger.warning(f"Failed to load skill from {folder}: {e}")
    return skills
