"""Deck outline generator for the brand-deck skill."""

from skilldispatch.skills.models import SkillContext, SkillIO, SkillOutput

SUPPORTED_LOCALES = ("en", "nb", "no")

TITLE_PRESETS = [
    "The problem {topic} solves",
    "Architecture & approach",
    "Pilot plan for {audience}",
    "Impact & KPIs",
    "Cost & ROI",
    "Risks & mitigations",
    "Roadmap & resourcing",
    "Call to action",
]


def _request(io: SkillIO) -> dict:
    # Free text is taken as the topic
    if isinstance(io.input, str):
        return {"topic": io.input.strip()}
    if isinstance(io.input, dict):
        return io.input
    return {}


async def guard(io: SkillIO, ctx: SkillContext) -> None:
    if ctx.locale and ctx.locale not in SUPPORTED_LOCALES:
        raise ValueError("Unsupported locale")
    if not _request(io).get("topic"):
        raise ValueError("Missing 'topic'")


def title_for(i: int, topic: str, audience: str) -> str:
    return TITLE_PRESETS[i % len(TITLE_PRESETS)].format(topic=topic, audience=audience)


async def execute(io: SkillIO, ctx: SkillContext) -> SkillOutput:
    request = _request(io)
    topic = request["topic"]
    audience = request.get("audience") or "General"
    tone = request.get("tone") or "bold"
    brand_rules = request.get("brandRules") or {}

    max_sections = brand_rules.get("maxSections")
    sections = max(4, min(8, 6 if max_sections is None else max_sections))

    outline = [
        {"type": "title", "text": topic},
        {"type": "agenda", "bullets": ["Why now", "What changes", "How it works", "Value", "Next steps"]},
    ]
    outline.extend(
        {"type": "section", "title": f"Section {i + 1}: {title_for(i, topic, audience)}"}
        for i in range(sections)
    )
    outline.append(
        {"type": "cta", "style": brand_rules.get("ctaStyle") or "primary", "text": "Book a pilot this quarter"}
    )

    return SkillOutput(
        result={"format": "deck-outline", "audience": audience, "tone": tone, "outline": outline},
        meta={
            "skill": "brand-deck",
            "generatedAt": ctx.now.isoformat() if ctx.now else None,
        },
    )
