"""
SkillDispatch - capability-routing dispatcher

Main entry point. Equivalent to the ``skilldispatch`` console script.
"""

import sys

from skilldispatch.cli.main import cli


if __name__ == "__main__":
    sys.exit(cli())
