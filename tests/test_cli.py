from pathlib import Path

import pytest

from skilldispatch.cli.main import build_parser, cli, parse_hints

SKILLS_DIR = str(Path(__file__).resolve().parent.parent / "skills")


def test_parse_hints():
    assert parse_hints([]) is None
    assert parse_hints(["n=3", "name=jon", "flags=[1, 2]"]) == {
        "n": 3,
        "name": "jon",
        "flags": [1, 2],
    }
    with pytest.raises(ValueError):
        parse_hints(["novalue"])


def test_parser_defaults():
    args = build_parser().parse_args(["hello"])
    assert args.input == "hello"
    assert args.threshold is None
    assert args.skills_dir is None
    assert not args.route_only


@pytest.fixture
def config_path(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    return str(tmp_path / "config.yaml")


def test_demo_runs_both_examples(config_path):
    assert cli(["--demo", "--skills-dir", SKILLS_DIR, "--config", config_path]) == 0


def test_route_only(config_path):
    code = cli(
        ["write a speech", "--route-only", "--skills-dir", SKILLS_DIR, "--config", config_path]
    )
    assert code == 0


def test_guard_failure_exits_non_zero(config_path):
    code = cli(
        ["a deck on pricing", "--locale", "fr", "--skills-dir", SKILLS_DIR, "--config", config_path]
    )
    assert code == 1


def test_missing_input(config_path):
    assert cli(["--skills-dir", SKILLS_DIR, "--config", config_path]) == 2
