import logging
import re
import sys
from typing import Any, Callable, Optional, Sequence, TextIO

from pivotal_story import config
from pivotal_story.domain.models import (
    CANDIDATE_STATES,
    Note,
    StoryState,
    StoryType,
    UpdateResult,
    parse_story_state,
    parse_story_type,
)
from pivotal_story.errors import StoryNotFoundError
from pivotal_story.formatting import (
    LABEL_DESCRIPTION,
    LABEL_TITLE,
    format_estimate,
    format_field,
)
from pivotal_story.prompt import choose
from pivotal_story.tracker import ProjectHandle, StoryHandle, TrackerClient

logger = logging.getLogger(__name__)

SELECT_PROMPT = "Choose story to start: "

_DIGIT = re.compile(r"\d")
_LEADING_INT = re.compile(r"\s*([+-]?\d+)", re.ASCII)

Chooser = Callable[[str, Sequence[tuple[str, Any]]], Any]


def parse_story_id(value: str) -> int:
    """Read the leading integer of a filter, or 0 when there is none."""
    match = _LEADING_INT.match(value)
    return int(match.group(1)) if match else 0


class StoryPresenter:
    """Renders, updates and selects stories of a tracker project.

    Args:
        client: Tracker used for project and note lookups
        out: Stream all rendered text is written to (stdout by default)
        terminal_width: Width in columns used for wrapping
        current_user: Username whose own stories are offered last on selection
        chooser: Menu primitive, called with a prompt and (label, story) pairs
    """

    def __init__(
        self,
        client: TrackerClient,
        out: Optional[TextIO] = None,
        terminal_width: Optional[int] = None,
        current_user: Optional[str] = None,
        chooser: Optional[Chooser] = None,
    ) -> None:
        self.client = client
        self.out = out or sys.stdout
        self.terminal_width = terminal_width or config.TERMINAL_WIDTH
        self.current_user = current_user if current_user is not None else config.CURRENT_USER
        self.chooser = chooser or (lambda prompt, options: choose(prompt, options, out=self.out))

    def _say(self, line: str = "") -> None:
        print(line, file=self.out)

    # --- Creation ---

    def create(self, project: ProjectHandle, name: str, story_type: StoryType | str) -> StoryHandle:
        if not name or not name.strip():
            raise ValueError("Story name cannot be empty.")
        parsed = parse_story_type(story_type)
        if parsed is None:
            raise ValueError("Story type cannot be empty.")
        story = project.stories.create(name=name, story_type=parsed)
        logger.info("Created %s story %s in project %s", parsed.value, story.id, project.id)
        return story

    # --- Rendering ---

    def render(self, story: StoryHandle) -> list[str]:
        """Return the pretty-printed lines of a story, notes included."""
        width = self.terminal_width
        project = self.client.find_project(story.project_id)

        lines = format_field("ID", story.id, width)
        lines += format_field("Project", project.account, width)
        lines += format_field(LABEL_TITLE, story.name, width)
        if story.description:
            lines += format_field(LABEL_DESCRIPTION, story.description, width)
        lines += format_field("Type", StoryType(story.story_type).display_name, width)
        lines += format_field("State", StoryState(story.current_state).display_name, width)
        lines += format_field("Estimate", format_estimate(story.estimate), width)

        notes: list[Note] = sorted(self.client.list_notes(story), key=lambda n: n.noted_at)
        for index, note in enumerate(notes, 1):
            lines += format_field(f"Note {index}", note.text, width)
        return lines

    def pretty_print(self, story: StoryHandle) -> None:
        for line in self.render(story):
            self._say(line)
        self._say()

    # --- Updates ---

    def assign(self, story: StoryHandle, username: str) -> UpdateResult:
        result = UpdateResult.from_ack(story.update(owned_by=username))
        if result:
            self._say(f"Story assigned to {username}")
        else:
            logger.info("Tracker rejected assigning story %s to %s", story.id, username)
        return result

    def mark(self, story: StoryHandle, state: StoryState | str) -> UpdateResult:
        parsed = parse_story_state(state)
        if parsed is None:
            raise ValueError("Story state cannot be empty.")
        result = UpdateResult.from_ack(story.update(current_state=parsed))
        if result:
            self._say(f"Changed state to {parsed.value}")
        else:
            logger.info("Tracker rejected marking story %s as %s", story.id, parsed.value)
        return result

    def set_estimate(self, story: StoryHandle, points: int) -> UpdateResult:
        # No confirmation line, unlike assign and mark
        result = UpdateResult.from_ack(story.update(estimate=points))
        if not result:
            logger.info("Tracker rejected estimate %s for story %s", points, story.id)
        return result

    def add_comment(self, story: StoryHandle, text: str) -> Note:
        return story.notes.create(text=text)

    # --- Selection ---

    def select_story(
        self,
        project: ProjectHandle,
        filter: Optional[str] = None,
        limit: int = 5,
        current_user: Optional[str] = None,
    ) -> StoryHandle:
        """Resolve a filter into a single story of the project.

        Args:
            project: Project whose stories are searched
            filter: Either a story ID (any value containing a digit), a story
                type (feature, bug, chore) or None/blank for all types
            limit: Index of the last candidate offered; up to ``limit + 1``
                stories are shown. A negative limit counts from the end, so
                -1 offers every candidate
            current_user: Overrides the presenter's user for owner ordering

        Returns:
            The story found by ID, the only candidate, or the one the user chose.

        Raises:
            StoryNotFoundError: The ID does not exist, or no candidate matched.
            ValueError: The filter is neither an ID nor a known story type.
        """
        if filter is not None and _DIGIT.search(filter):
            return project.stories.find(parse_story_id(filter))
        return self._find_story(project, parse_story_type(filter), limit, current_user)

    def _find_story(
        self,
        project: ProjectHandle,
        story_type: Optional[StoryType],
        limit: int,
        current_user: Optional[str],
    ) -> StoryHandle:
        criteria: dict[str, Any] = {"current_state": list(CANDIDATE_STATES)}
        if story_type is not None:
            criteria["story_type"] = story_type
        candidates = list(project.stories.all(**criteria))

        user = current_user if current_user is not None else self.current_user
        if user is None:
            logger.warning(
                "No current user configured; candidate stories are offered in tracker order."
            )
        else:
            candidates.sort(key=lambda s: 1 if s.owned_by == user else 0)
        # Inclusive of index limit; a negative limit counts back from the end
        end = limit + 1 if limit >= 0 else len(candidates) + limit + 1
        candidates = candidates[: max(end, 0)]

        if not candidates:
            kind = f"{story_type.value} " if story_type else ""
            raise StoryNotFoundError(
                f"No {kind}stories in states {', '.join(s.value for s in CANDIDATE_STATES)} "
                f"for project {project.id}."
            )
        if len(candidates) == 1:
            return candidates[0]

        options = [(self._menu_label(s, story_type), s) for s in candidates]
        story = self.chooser(SELECT_PROMPT, options)
        self._say()
        return story

    @staticmethod
    def _menu_label(story: StoryHandle, story_type: Optional[StoryType]) -> str:
        label = f"[{story.owned_by}] " if story.owned_by else ""
        if story_type is not None:
            return label + story.name
        return label + "%-7s %s" % (StoryType(story.story_type).tag, story.name)
