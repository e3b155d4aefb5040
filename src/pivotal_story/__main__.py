"""Entry point for running the pivotal-story CLI."""

import sys
from importlib import import_module

# Configuration and logging are set up exactly once, before any other module
# of the package logs anything. The order is critical.
from pivotal_story import config  # noqa: F401

import_module("pivotal_story.logging")

from pivotal_story.cli import main as cli_main  # noqa: E402


def main() -> None:
    sys.exit(cli_main())


if __name__ == "__main__":
    main()
