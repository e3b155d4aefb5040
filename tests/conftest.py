"""Pytest configuration and shared fixtures."""

import io
import os
import shutil
import tempfile
from datetime import datetime, timezone
from typing import Any, Optional

import pytest


# Set TRACKER_DIR to temp BEFORE any modules are imported
# This happens at pytest startup, before test collection
_TEST_TRACKER_DIR = None


def pytest_configure(config):
    """Configure pytest - set TRACKER_DIR before any tests are collected."""
    global _TEST_TRACKER_DIR
    _TEST_TRACKER_DIR = tempfile.mkdtemp(prefix="pytest_pivotal_story_")
    os.environ["TRACKER_DIR"] = _TEST_TRACKER_DIR
    os.environ.pop("PIVOTAL_STORY_USER", None)
    os.environ.pop("PIVOTAL_STORY_PROJECT_ID", None)


def pytest_unconfigure(config):
    """Cleanup after all tests complete."""
    global _TEST_TRACKER_DIR
    if _TEST_TRACKER_DIR and os.path.exists(_TEST_TRACKER_DIR):
        shutil.rmtree(_TEST_TRACKER_DIR, ignore_errors=True)


# --- In-memory tracker doubles ---


class FakeNotes:
    def __init__(self, story: "FakeStory") -> None:
        self.story = story

    def create(self, **fields: Any):
        from pivotal_story.domain.models import Note

        note = Note(id=len(self.story.note_list) + 1, story_id=self.story.id, **fields)
        self.story.note_list.append(note)
        return note


class FakeStory:
    """Story handle that records updates and acknowledges them with ``ack``."""

    def __init__(
        self,
        id: int,
        name: str = "A story",
        story_type: str = "feature",
        current_state: str = "unstarted",
        owned_by: Optional[str] = None,
        description: Optional[str] = None,
        estimate: Optional[int] = -1,
        project_id: int = 1,
        ack: bool = True,
    ) -> None:
        from pivotal_story.domain.models import StoryState, StoryType

        self.id = id
        self.project_id = project_id
        self.name = name
        self.description = description
        self.story_type = StoryType(story_type)
        self.current_state = StoryState(current_state)
        self.estimate = estimate
        self.owned_by = owned_by
        self.ack = ack
        self.updates: list[dict[str, Any]] = []
        self.note_list: list = []

    @property
    def notes(self) -> FakeNotes:
        return FakeNotes(self)

    def update(self, **fields: Any) -> bool:
        self.updates.append(fields)
        if self.ack:
            for k, v in fields.items():
                setattr(self, k, v)
        return self.ack


class FakeStories:
    def __init__(self, stories: list[FakeStory]) -> None:
        self.stories = stories
        self.find_calls: list[int] = []
        self.all_calls: list[dict[str, Any]] = []
        self.created: list[dict[str, Any]] = []

    def create(self, **fields: Any) -> FakeStory:
        self.created.append(fields)
        story = FakeStory(id=len(self.stories) + 1, **fields)
        self.stories.append(story)
        return story

    def find(self, story_id: int) -> FakeStory:
        from pivotal_story.errors import StoryNotFoundError

        self.find_calls.append(story_id)
        for story in self.stories:
            if story.id == story_id:
                return story
        raise StoryNotFoundError(f"Story '{story_id}' not found.")

    def all(self, current_state=None, story_type=None) -> list[FakeStory]:
        self.all_calls.append({"current_state": current_state, "story_type": story_type})
        return [
            s
            for s in self.stories
            if (current_state is None or s.current_state in current_state)
            and (story_type is None or s.story_type == story_type)
        ]


class FakeProject:
    def __init__(self, stories: Optional[list[FakeStory]] = None, id: int = 1, account: str = "acme") -> None:
        self.id = id
        self.account = account
        self.stories = FakeStories(stories or [])


class FakeClient:
    def __init__(self, project: FakeProject) -> None:
        self.project = project
        self.project_lookups: list[int] = []

    def find_project(self, project_id: int) -> FakeProject:
        self.project_lookups.append(project_id)
        return self.project

    def list_notes(self, story: FakeStory) -> list:
        return list(story.note_list)


class ScriptedChooser:
    """Stands in for the terminal menu; picks the option at ``pick``."""

    def __init__(self, pick: int = 0) -> None:
        self.pick = pick
        self.calls: list[tuple[str, list[tuple[str, Any]]]] = []

    def __call__(self, prompt, options):
        self.calls.append((prompt, list(options)))
        return options[self.pick][1]

    @property
    def labels(self) -> list[str]:
        return [label for label, _ in self.calls[-1][1]]


def make_note(text: str, day: int):
    from pivotal_story.domain.models import Note

    return Note(id=day, story_id=1, text=text, noted_at=datetime(2024, 1, day, tzinfo=timezone.utc))


@pytest.fixture
def project():
    return FakeProject()


@pytest.fixture
def client(project):
    return FakeClient(project)


@pytest.fixture
def chooser():
    return ScriptedChooser()


@pytest.fixture
def out():
    return io.StringIO()


@pytest.fixture
def presenter(client, out, chooser):
    from pivotal_story.presenter import StoryPresenter

    return StoryPresenter(client, out=out, terminal_width=40, current_user="alice", chooser=chooser)


@pytest.fixture
def tracker(tmp_path):
    from pivotal_story.services.local_tracker import LocalTracker

    return LocalTracker(str(tmp_path / "tracker"))
