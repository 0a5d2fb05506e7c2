"""
SkillDispatch CLI - route one request (or the built-in demo) through the skills.

Composition root: loads configuration, discovers skill folders, wires the
registry and orchestrator, and prints the output envelope as JSON.
"""

import argparse
import asyncio
import json
import sys
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from dotenv import load_dotenv
from loguru import logger
from rich.console import Console

from skilldispatch import __version__
from skilldispatch.config.manager import ConfigManager
from skilldispatch.skills.loader import discover_skills
from skilldispatch.skills.models import SkillContext, SkillIO
from skilldispatch.skills.observers import LoggingObserver
from skilldispatch.skills.orchestrator import OrchestratorOptions, SkillOrchestrator
from skilldispatch.skills.registry import SkillRegistry

console = Console()

DEMO_CALLS = [
    ("Deck outline", "make a deck about AI for manufacturing execs", "en"),
    ("Speech", {"names": {"groom": "Jon", "bride": "Anna"}, "tone": "warm"}, None),
]


def setup_logging(level: str = "INFO", log_file: Optional[str] = None) -> None:
    """Configure logging."""
    logger.remove()

    logger.add(
        sys.stderr,
        format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>",
        level=level,
        colorize=True,
    )

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            log_file,
            format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}",
            level="DEBUG",
            rotation="10 MB",
            retention="7 days",
            compression="zip",
        )


def parse_hints(items: Sequence[str]) -> Optional[Dict[str, Any]]:
    """Parse ``key=value`` pairs; values are JSON when they parse as JSON."""
    if not items:
        return None
    hints: Dict[str, Any] = {}
    for item in items:
        key, sep, raw = item.partition("=")
        if not sep or not key.strip():
            raise ValueError(f"Invalid hint '{item}', expected key=value")
        try:
            hints[key.strip()] = json.loads(raw)
        except json.JSONDecodeError:
            hints[key.strip()] = raw
    return hints


def build_orchestrator(
    config: ConfigManager, skills_dirs: Sequence[str], observers: Sequence[Any] = ()
) -> SkillOrchestrator:
    registry = SkillRegistry()
    registry.register(*discover_skills(*skills_dirs))
    logger.info(f"Loaded {len(registry)} skill(s): {', '.join(registry.names()) or '-'}")
    return SkillOrchestrator(registry, OrchestratorOptions.from_config(config, observers))


def _print(data: Any) -> None:
    console.print_json(data=data, default=str)


async def run_demo(orchestrator: SkillOrchestrator) -> int:
    for label, payload, locale in DEMO_CALLS:
        out = await orchestrator.run(
            SkillIO(input=payload), SkillContext(now=datetime.now(), locale=locale)
        )
        console.print(f"[bold]{label}:[/bold]")
        _print(out.result)
    return 0


async def run_once(orchestrator: SkillOrchestrator, args: argparse.Namespace) -> int:
    payload: Any = args.input
    if args.json:
        payload = json.loads(payload)

    io = SkillIO(input=payload, hints=parse_hints(args.hint))
    ctx = SkillContext(user_id=args.user, locale=args.locale, now=datetime.now())

    if args.route_only:
        route = await orchestrator.route(io, ctx)
        _print(
            {
                "skill": getattr(route.skill, "name", None),
                "score": route.score,
                "best_score": route.best_score,
                "ranked": [
                    {"skill": getattr(s.skill, "name", None), "score": s.score}
                    for s in route.ranked
                ],
            }
        )
        return 0

    out = await orchestrator.run(io, ctx)
    _print(out.to_dict())
    return 0


async def main(args: argparse.Namespace) -> int:
    """Main entry point."""
    config = ConfigManager(args.config)
    await config.load(create=False)

    if args.threshold is not None:
        config.set("orchestrator.threshold", args.threshold)
    if args.top_k is not None:
        config.set("orchestrator.top_k", args.top_k)
    if args.timeout is not None:
        config.set("orchestrator.timeout_seconds", args.timeout)

    level = "DEBUG" if args.debug or config.get("app.debug") else config.get("logging.level", "INFO")
    setup_logging(level, config.get("logging.file"))

    skills_dirs: List[str] = args.skills_dir or list(config.get("skills.dirs", ["skills"]))
    orchestrator = build_orchestrator(config, skills_dirs, [LoggingObserver()])

    if args.demo:
        return await run_demo(orchestrator)
    if args.input is None:
        logger.error("No input given (pass text, or --demo)")
        return 2
    return await run_once(orchestrator, args)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="skilldispatch",
        description="SkillDispatch - route a request to the most relevant skill",
    )
    parser.add_argument("input", nargs="?", help="Request text (or JSON with --json)")
    parser.add_argument("--config", type=str, default="config.yaml", help="Path to configuration file")
    parser.add_argument(
        "--skills-dir",
        action="append",
        default=None,
        help="Skill folder root (repeatable, overrides skills.dirs)",
    )
    parser.add_argument("--threshold", type=float, default=None, help="Minimum score to run a skill")
    parser.add_argument("--top-k", type=int, default=None, help="Number of ranked skills considered")
    parser.add_argument("--timeout", type=float, default=None, help="Per-call timeout in seconds")
    parser.add_argument("--json", action="store_true", help="Parse the input as JSON")
    parser.add_argument("--hint", action="append", default=[], help="Hint as key=value (repeatable)")
    parser.add_argument("--user", type=str, default=None, help="User id placed in the context")
    parser.add_argument("--locale", type=str, default=None, help="Locale placed in the context")
    parser.add_argument("--route-only", action="store_true", help="Only report the routing decision")
    parser.add_argument("--demo", action="store_true", help="Run the two example requests")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    parser.add_argument("--version", action="version", version=f"SkillDispatch {__version__}")
    return parser


def cli(argv: Optional[Sequence[str]] = None) -> int:
    """CLI entry point."""
    load_dotenv()
    args = build_parser().parse_args(argv)

    try:
        return asyncio.run(main(args))
    except KeyboardInterrupt:
        logger.info("Interrupted")
        return 130
    except Exception as e:
        logger.error(f"Run failed: {type(e).__name__}: {e}")
        return 1
