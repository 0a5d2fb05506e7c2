"""Wedding speech writer for the groom-speech skill."""

from datetime import datetime
from typing import Optional

from skilldispatch.skills.models import SkillContext, SkillIO, SkillOutput

TARGET_WORDS = {"short": 400, "medium": 650, "long": 900}


def day_part(now: Optional[datetime]) -> str:
    hour = (now or datetime.now()).hour
    if hour < 12:
        return "morning"
    if hour < 18:
        return "afternoon"
    return "evening"


def execute(io: SkillIO, ctx: SkillContext) -> SkillOutput:
    request = io.input if isinstance(io.input, dict) else {}
    names = request.get("names") or {}
    groom = names.get("groom") or "the groom"
    bride = names.get("bride") or "my bride"
    length = request.get("length") or "medium"
    anecdotes = request.get("anecdotes") or []
    tone = request.get("tone") or "warm"

    if anecdotes:
        story = "Quick stories: " + " · ".join(anecdotes[:2])
    else:
        story = "They say love is finding your weirdo. I found mine."

    body = "\n\n".join(
        [
            f"Good {day_part(ctx.now)} everyone: family, friends, and partners in mischief.",
            f"I'm {groom}, and today I get to call {bride} my wife.",
            story,
            "To our parents: thank you for your love and the thousand unseen acts that brought us here.",
            f"To {bride}: you are my calm and my comet.",
            "Let's raise a glass to love, luck, and a lifetime of laughter.",
        ]
    )

    return SkillOutput(
        result={
            "format": "speech",
            "tone": tone,
            "targetWords": TARGET_WORDS.get(length, TARGET_WORDS["medium"]),
            "text": body,
        },
        meta={"skill": "groom-speech"},
    )
