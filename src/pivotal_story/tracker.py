"""Protocols for the tracker client collaborators consumed by the presenter.

Any client that exposes these shapes can back a StoryPresenter: the YAML-file
tracker in ``services.local_tracker`` or a wrapper around a remote API. Errors
raised by an implementation are never caught by the presenter.
"""

from typing import Any, Iterable, Optional, Protocol

from pivotal_story.domain.models import Note, StoryState, StoryType


class NoteCollection(Protocol):
    def create(self, **fields: Any) -> Note: ...


class StoryHandle(Protocol):
    id: int
    project_id: int
    name: str
    description: Optional[str]
    story_type: StoryType
    current_state: StoryState
    estimate: Optional[int]
    owned_by: Optional[str]

    @property
    def notes(self) -> NoteCollection: ...

    def update(self, **fields: Any) -> bool:
        """Apply a partial update. A falsy return means the tracker rejected it."""
        ...


class StoryCollection(Protocol):
    def create(self, **fields: Any) -> StoryHandle: ...

    def find(self, story_id: int) -> StoryHandle:
        """Return the story with this ID or raise StoryNotFoundError."""
        ...

    def all(
        self,
        current_state: Optional[Iterable[StoryState]] = None,
        story_type: Optional[StoryType] = None,
    ) -> list[StoryHandle]: ...


class ProjectHandle(Protocol):
    id: int
    account: str

    @property
    def stories(self) -> StoryCollection: ...


class TrackerClient(Protocol):
    def find_project(self, project_id: int) -> ProjectHandle: ...

    def list_notes(self, story: StoryHandle) -> list[Note]: ...
