"""
SkillDispatch CLI - Command Line Interface.
"""

from .main import build_parser, cli, setup_logging

__all__ = ["build_parser", "cli", "setup_logging"]
