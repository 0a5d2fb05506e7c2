"""
Skills models.

Runtime envelopes (dataclasses) passed between callers, the orchestrator and
skills, plus the on-disk skill descriptor schema (Pydantic) read by the loader.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Relevance in [0, 1]
SkillScore = float

Artifact = Union[bytes, bytearray, str]


@dataclass(frozen=True)
class SkillContext:
    """
    Caller-owned environment for one run.

    ``services`` is a dependency-injection bag (LLM client, db, http, ...) and
    ``scratch`` is per-run memory. Neither is inspected by the orchestrator.
    """

    user_id: Optional[str] = None
    locale: Optional[str] = None
    now: Optional[datetime] = None
    services: Dict[str, Any] = field(default_factory=dict)
    scratch: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class SkillIO:
    """The request unit: raw input plus optional upstream hints."""

    input: Any
    hints: Optional[Dict[str, Any]] = None

    def text(self) -> str:
        """Lower-cased flat text of the input, used by keyword matching."""
        if isinstance(self.input, str):
            return self.input.lower()
        return json.dumps(
            self.input, ensure_ascii=False, separators=(",", ":"), default=str
        ).lower()


@dataclass
class SkillOutput:
    """Response envelope produced by a skill execution."""

    result: Any
    artifacts: Dict[str, Artifact] = field(default_factory=dict)
    meta: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def no_match(cls, score: float, best_score: float = 0.0) -> "SkillOutput":
        return cls(
            result={"message": "No suitable skill found", "reason": "threshold"},
            meta={"score": score, "best_score": best_score},
        )

    def to_dict(self) -> Dict[str, Any]:
        artifacts: Dict[str, Any] = {}
        for name, value in self.artifacts.items():
            if isinstance(value, (bytes, bytearray)):
                artifacts[name] = {"type": "bytes", "size": len(value)}
            else:
                artifacts[name] = value
        return {"result": self.result, "artifacts": artifacts, "meta": self.meta}


class KeywordMatcher(BaseModel):
    includes: List[str] = Field(default_factory=list)
    excludes: List[str] = Field(default_factory=list)
    weight: float = 0.6

    @field_validator("weight", mode="before")
    @classmethod
    def _default_weight(cls, v: Any) -> Any:
        return 0.6 if v is None else v

    def matches(self, text: str) -> bool:
        text = text.lower()
        if not all(k.lower() in text for k in self.includes):
            return False
        return not any(k.lower() in text for k in self.excludes)


class SkillManifest(BaseModel):
    """Skill descriptor schema (skill.json / skill.yaml)."""

    model_config = ConfigDict(populate_by_name=True)

    name: str
    version: Optional[str] = None
    summary: Optional[str] = None
    description: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    matchers: List[KeywordMatcher] = Field(default_factory=list)
    module: Optional[str] = None
    input_schema: Optional[Dict[str, Any]] = Field(default=None, alias="inputSchema")

    # Runtime metadata (not part of the descriptor file)
    source_dir: Optional[Path] = None
    source_file: Optional[Path] = None

    @field_validator("name")
    @classmethod
    def _validate_name(cls, v: str) -> str:
        v = (v or "").strip()
        if not v:
            raise ValueError("skill name cannot be empty")
        return v

    @field_validator("tags", "matchers", mode="before")
    @classmethod
    def _none_as_empty(cls, v: Any) -> Any:
        return [] if v is None else v
