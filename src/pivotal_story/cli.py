"""Command-line tool for showing, selecting and updating tracker stories.

Every command that works on a story takes a FILTER resolved the same way as
interactive selection: a story ID, a story type (feature, bug, chore) or
nothing at all, in which case candidate stories of every type are offered.

Usage:
    pivotal-story [--project ID] [--user NAME] COMMAND [ARGS]
"""

import argparse
import logging
import sys
from typing import Optional

from pivotal_story import config
from pivotal_story.domain.models import StoryType
from pivotal_story.presenter import StoryPresenter
from pivotal_story.services.local_tracker import LocalTracker

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pivotal-story", description="Show, select and update tracker stories."
    )
    parser.add_argument(
        "--project",
        type=int,
        default=config.DEFAULT_PROJECT_ID,
        help="Project ID (defaults to $PIVOTAL_STORY_PROJECT_ID).",
    )
    parser.add_argument(
        "--user",
        default=config.CURRENT_USER,
        help="Your username; your own stories are offered last (defaults to $PIVOTAL_STORY_USER).",
    )
    parser.add_argument("--tracker-dir", default=config.TRACKER_DIR, help=argparse.SUPPRESS)
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("project-create", help="Create a project in the local tracker.")
    p.add_argument("account", help="Account name the project belongs to.")
    p.add_argument("--name", help="Project name.")

    sub.add_parser("projects", help="List projects in the local tracker.")

    p = sub.add_parser("new", help="Create a story.")
    p.add_argument("name", help="Story title.")
    p.add_argument(
        "--type",
        default=StoryType.FEATURE.value,
        choices=[t.value for t in StoryType],
        help="Story type (default: feature).",
    )

    def with_filter(name: str, help_text: str) -> argparse.ArgumentParser:
        cmd = sub.add_parser(name, help=help_text)
        cmd.add_argument(
            "filter", nargs="?", help="Story ID, story type, or omit to choose among all types.")
        cmd.add_argument(
            "--limit",
            type=int,
            default=config.SELECT_LIMIT,
            help="Offer stories up to this index (limit + 1 entries).",
        )
        return cmd

    with_filter("show", "Pretty print a story.")
    with_filter("select", "Choose a story and print its ID.")
    with_filter("assign", "Assign a story to a user.").add_argument("username")
    with_filter("mark", "Change the state of a story.").add_argument("state")
    with_filter("estimate", "Set the estimate of a story.").add_argument("points", type=int)
    with_filter("comment", "Add a note to a story.").add_argument("text")
    return parser


def _require_project(args: argparse.Namespace) -> int:
    if args.project is None:
        raise ValueError("No project given. Use --project or set PIVOTAL_STORY_PROJECT_ID.")
    return args.project


def run(args: argparse.Namespace) -> int:
    tracker = LocalTracker(args.tracker_dir)
    presenter = StoryPresenter(tracker, current_user=args.user)

    if args.command == "project-create":
        project = tracker.create_project(args.account, args.name)
        print(f"Created project {project.id} ({project.account})")
        return 0
    if args.command == "projects":
        for p in tracker.list_projects():
            print(f"[{p.id}] {p.account}" + (f" - {p.name}" if p.name else ""))
        return 0

    project = tracker.find_project(_require_project(args))
    if args.command == "new":
        story = presenter.create(project, args.name, args.type)
        print(f"Created story {story.id}")
        return 0

    filter_value: Optional[str] = args.filter
    story = presenter.select_story(project, filter_value, args.limit, current_user=args.user)
    if args.command == "show":
        presenter.pretty_print(story)
    elif args.command == "select":
        print(story.id)
    elif args.command == "assign":
        return 0 if presenter.assign(story, args.username) else 1
    elif args.command == "mark":
        return 0 if presenter.mark(story, args.state) else 1
    elif args.command == "estimate":
        return 0 if presenter.set_estimate(story, args.points) else 1
    elif args.command == "comment":
        presenter.add_comment(story, args.text)
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point for the pivotal-story CLI tool."""
    args = build_parser().parse_args(argv)
    try:
        return run(args)
    except (LookupError, ValueError) as e:
        logger.debug("Command %s failed", args.command, exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return 1
