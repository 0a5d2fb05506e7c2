import asyncio

import pytest

from skilldispatch.skills.base import FunctionSkill
from skilldispatch.skills.errors import SkillTimeoutError
from skilldispatch.skills.loader import keyword_score
from skilldispatch.skills.models import KeywordMatcher, SkillContext, SkillIO, SkillOutput
from skilldispatch.skills.observers import RecordingObserver
from skilldispatch.skills.orchestrator import (
    OrchestratorOptions,
    SkillOrchestrator,
    normalize_score,
)
from skilldispatch.skills.registry import SkillRegistry


def fixed(name, score):
    return FunctionSkill(name, lambda io, ctx: score, lambda io, ctx: SkillOutput(result=name))


def keyword_skill(name, keyword, weight):
    matchers = [KeywordMatcher(includes=[keyword], weight=weight)]

    async def match(io, ctx):
        return keyword_score(matchers, io.text())

    return FunctionSkill(name, match, lambda io, ctx: SkillOutput(result=name))


def orchestrator(*skills, **options):
    reg = SkillRegistry()
    reg.register(*skills)
    return SkillOrchestrator(reg, OrchestratorOptions(**options))


@pytest.fixture
def deck_and_speech():
    return keyword_skill("A", "deck", 0.6), keyword_skill("B", "speech", 0.9)


@pytest.mark.parametrize(
    "raw, expected",
    [
        (0.5, 0.5),
        (1, 1.0),
        (1.7, 1.0),
        (-2, 0.0),
        (float("inf"), 1.0),
        (float("-inf"), 0.0),
        (float("nan"), 0.0),
        ("0.9", 0.0),
        (None, 0.0),
        (True, 0.0),
        ([0.9], 0.0),
    ],
)
def test_normalize_score(raw, expected):
    assert normalize_score(raw) == expected


@pytest.mark.asyncio
async def test_scenario_deck_routes_to_a(deck_and_speech):
    orch = orchestrator(*deck_and_speech, threshold=0.4, top_k=3)
    route = await orch.route(SkillIO(input="plan a deck for investors"), SkillContext())

    assert route.skill is deck_and_speech[0]
    assert route.score == pytest.approx(0.6)


@pytest.mark.asyncio
async def test_scenario_speech_routes_to_b(deck_and_speech):
    orch = orchestrator(*deck_and_speech)
    route = await orch.route(SkillIO(input="write a speech for the wedding"), SkillContext())

    assert route.skill is deck_and_speech[1]
    assert route.score == pytest.approx(0.9)


@pytest.mark.asyncio
async def test_scenario_no_keyword_selects_nothing(deck_and_speech):
    orch = orchestrator(*deck_and_speech)
    ctx = SkillContext()
    io = SkillIO(input="book a table for two")

    route = await orch.route(io, ctx)
    assert route.skill is None
    assert route.score == 0

    out = await orch.run(io, ctx)
    assert out.result["reason"] == "threshold"


@pytest.mark.asyncio
async def test_scenario_raised_threshold_rejects_a(deck_and_speech):
    orch = orchestrator(*deck_and_speech, threshold=0.95)
    route = await orch.route(SkillIO(input="plan a deck for investors"), SkillContext())

    assert route.skill is None
    assert route.score == 0
    assert route.best_score == pytest.approx(0.6)


@pytest.mark.asyncio
async def test_scores_are_clamped_before_ranking():
    recorder = RecordingObserver()
    orch = orchestrator(
        fixed("high", 5.0),
        fixed("low", -1.0),
        fixed("nan", float("nan")),
        fixed("text", "0.99"),
        observers=[recorder],
        top_k=10,
    )
    route = await orch.route(SkillIO(input="x"), SkillContext())

    scores = {s.skill.name: s.score for s in route.ranked}
    assert scores == {"high": 1.0, "low": 0.0, "nan": 0.0, "text": 0.0}
    assert route.skill.name == "high"

    # Non-numeric results are coerced silently, not reported as errors
    assert "on_error" not in recorder.names
    raw = [e.score for e in recorder.events if e.name == "on_match_start"]
    assert raw[0] == 5.0
    assert raw[3] == "0.99"


@pytest.mark.asyncio
async def test_throwing_match_scores_zero_and_routing_continues():
    def boom(io, ctx):
        raise RuntimeError("match exploded")

    bad = FunctionSkill("bad", boom, lambda io, ctx: SkillOutput(result="bad"))
    good = fixed("good", 0.7)
    recorder = RecordingObserver()
    orch = orchestrator(bad, good, observers=[recorder])

    route = await orch.route(SkillIO(input="x"), SkillContext())

    assert route.skill is good
    assert [(s.skill.name, s.score) for s in route.ranked] == [("good", 0.7), ("bad", 0.0)]

    errors = [e for e in recorder.events if e.name == "on_error"]
    assert len(errors) == 1
    assert errors[0].skill is bad
    assert str(errors[0].error) == "match exploded"

    # Fault path: no start event, but exactly one end event with score 0
    bad_events = [e.name for e in recorder.events if e.skill is bad]
    assert bad_events == ["on_error", "on_match_end"]
    assert [e.score for e in recorder.events if e.skill is bad and e.name == "on_match_end"] == [0.0]


@pytest.mark.asyncio
async def test_ties_are_broken_by_registration_order():
    first, second = fixed("first", 0.5), fixed("second", 0.5)
    orch = orchestrator(first, second, threshold=0.5)

    route = await orch.route(SkillIO(input="x"), SkillContext())

    assert route.skill is first
    assert [s.skill for s in route.ranked] == [first, second]


@pytest.mark.asyncio
async def test_top_k_window_is_applied_before_threshold():
    orch = orchestrator(fixed("a", 1.0), fixed("b", 0.9), top_k=0)
    route = await orch.route(SkillIO(input="x"), SkillContext())

    assert route.skill is None
    assert route.score == 0
    assert route.best_score == 1.0


@pytest.mark.asyncio
async def test_selection_is_first_in_window_meeting_threshold():
    orch = orchestrator(fixed("a", 0.2), fixed("b", 0.45), fixed("c", 0.4), top_k=2, threshold=0.4)
    route = await orch.route(SkillIO(input="x"), SkillContext())

    assert route.skill.name == "b"
    assert route.score == pytest.approx(0.45)


@pytest.mark.asyncio
async def test_score_equal_to_threshold_qualifies():
    orch = orchestrator(fixed("edge", 0.4))
    route = await orch.route(SkillIO(input="x"), SkillContext())

    assert route.skill.name == "edge"


@pytest.mark.asyncio
async def test_route_uses_registry_snapshot():
    reg = SkillRegistry()
    late = fixed("late", 1.0)

    def mutating_match(io, ctx):
        reg.register(late)
        reg.unregister("victim")
        return 0.1

    mutator = FunctionSkill("mutator", mutating_match, lambda io, ctx: SkillOutput(result=None))
    victim = fixed("victim", 0.8)
    reg.register(mutator, victim)

    route = await SkillOrchestrator(reg).route(SkillIO(input="x"), SkillContext())

    assert route.skill is victim
    assert [s.skill.name for s in route.ranked] == ["victim", "mutator"]
    assert reg.names() == ["mutator", "late"]


@pytest.mark.asyncio
async def test_skills_are_scored_one_at_a_time_in_order():
    active = []
    order = []

    def slow(name):
        async def match(io, ctx):
            active.append(name)
            assert len(active) == 1
            await asyncio.sleep(0.01)
            order.append(name)
            active.remove(name)
            return 0.1

        return FunctionSkill(name, match, lambda io, ctx: SkillOutput(result=name))

    orch = orchestrator(slow("one"), slow("two"), slow("three"))
    await orch.route(SkillIO(input="x"), SkillContext())

    assert order == ["one", "two", "three"]


@pytest.mark.asyncio
async def test_match_timeout_is_a_scoring_fault():
    async def hang(io, ctx):
        await asyncio.sleep(5)
        return 1.0

    slow = FunctionSkill("slow", hang, lambda io, ctx: SkillOutput(result="slow"))
    recorder = RecordingObserver()
    orch = orchestrator(slow, fixed("quick", 0.5), observers=[recorder])

    route = await orch.route(SkillIO(input="x"), SkillContext(), timeout=0.05)

    assert route.skill.name == "quick"
    assert [e.name for e in recorder.events if e.skill is slow] == ["on_error", "on_match_end"]
    error = next(e.error for e in recorder.events if e.name == "on_error")
    assert isinstance(error, SkillTimeoutError)
    assert error.phase == "match"


def test_options_validate_ranges():
    with pytest.raises(ValueError):
        OrchestratorOptions(threshold=1.5)
    with pytest.raises(ValueError):
        OrchestratorOptions(top_k=-1)
    with pytest.raises(ValueError):
        OrchestratorOptions(timeout=0)

    opts = OrchestratorOptions()
    assert opts.threshold == 0.4
    assert opts.top_k == 3
    assert opts.observers == ()
    assert opts.timeout is None


@pytest.mark.asyncio
async def test_match_raising_timeout_error_reports_it_unchanged():
    failure = TimeoutError("index lookup timed out")

    async def match(io, ctx):
        raise failure

    flaky = FunctionSkill("flaky", match, lambda io, ctx: SkillOutput(result="flaky"))
    recorder = RecordingObserver()
    orch = orchestrator(flaky, fixed("quick", 0.5), observers=[recorder], timeout=30)

    route = await orch.route(SkillIO(input="x"), SkillContext())

    assert route.skill.name == "quick"
    errors = [e for e in recorder.events if e.name == "on_error"]
    assert [e.error for e in errors] == [failure]
