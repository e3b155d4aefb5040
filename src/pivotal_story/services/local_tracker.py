"""YAML-file backed tracker implementing the collaborator protocols.

Each project lives in ``<TRACKER_DIR>/<project_id>.yaml`` together with its
stories and their notes. Handles returned from here write straight through
to that file.
"""

import logging
import os
from typing import Any, Iterable, Optional

import yaml
from pydantic import PrivateAttr, ValidationError

from pivotal_story import config
from pivotal_story.domain.models import Note, Project, Story, StoryState, StoryType
from pivotal_story.errors import ProjectNotFoundError, StoryNotFoundError

logger = logging.getLogger(__name__)

# Fields a story update may touch; identity fields are fixed at creation
UPDATABLE_FIELDS = {"name", "description", "story_type", "current_state", "estimate", "owned_by"}


def atomic_write(abs_path: str, content: str) -> None:
    """Write content to a file atomically to prevent corruption on failure."""
    directory = os.path.dirname(abs_path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    tmp_path = abs_path + ".tmp"
    with open(tmp_path, "w", encoding="utf-8") as f:
        f.write(content)
    os.replace(tmp_path, abs_path)


class LocalTracker:
    def __init__(self, root: Optional[str] = None) -> None:
        self.root = root or config.TRACKER_DIR

    def _project_path(self, project_id: int) -> str:
        return os.path.join(self.root, f"{project_id}.yaml")

    def _read(self, project_id: int) -> dict[str, Any]:
        path = self._project_path(project_id)
        if not os.path.exists(path):
            raise ProjectNotFoundError(f"Project '{project_id}' not found in {self.root}.")
        with open(path, encoding="utf-8") as f:
            return yaml.safe_load(f) or {}

    def _write(self, project_id: int, data: dict[str, Any]) -> None:
        atomic_write(
            self._project_path(project_id),
            yaml.safe_dump(data, default_flow_style=False, sort_keys=False),
        )

    # --- Projects ---

    def create_project(self, account: str, name: Optional[str] = None) -> "LocalProject":
        existing = [p.id for p in self.list_projects()]
        project = Project(id=max(existing, default=0) + 1, account=account, name=name)
        data = project.model_dump(mode="json", exclude_none=True)
        data["stories"] = []
        self._write(project.id, data)
        logger.info("Created project %s (%s) in %s", project.id, account, self.root)
        return self.find_project(project.id)

    def list_projects(self) -> list[Project]:
        if not os.path.isdir(self.root):
            return []
        projects = []
        for entry in sorted(os.listdir(self.root)):
            stem, ext = os.path.splitext(entry)
            if ext != ".yaml" or not stem.isdigit():
                continue
            data = self._read(int(stem))
            projects.append(Project.model_validate({k: v for k, v in data.items() if k != "stories"}))
        return sorted(projects, key=lambda p: p.id)

    def find_project(self, project_id: int) -> "LocalProject":
        data = self._read(project_id)
        project = LocalProject.model_validate({k: v for k, v in data.items() if k != "stories"})
        project._tracker = self
        return project

    # --- Stories ---

    def _story_records(self, project_id: int) -> list[dict[str, Any]]:
        return list(self._read(project_id).get("stories") or [])

    def _bind(self, record: dict[str, Any]) -> "LocalStory":
        story = LocalStory.model_validate({k: v for k, v in record.items() if k != "notes"})
        story._tracker = self
        return story

    def create_story(self, project_id: int, **fields: Any) -> "LocalStory":
        data = self._read(project_id)
        records = data.get("stories") or []
        story = Story.model_validate(
            {
                **fields,
                "id": max((r["id"] for r in records), default=0) + 1,
                "project_id": project_id,
            }
        )
        record = story.model_dump(mode="json")
        record["notes"] = []
        records.append(record)
        data["stories"] = records
        self._write(project_id, data)
        return self._bind(record)

    def find_story(self, project_id: int, story_id: int) -> "LocalStory":
        for record in self._story_records(project_id):
            if record.get("id") == story_id:
                return self._bind(record)
        raise StoryNotFoundError(f"Story '{story_id}' not found in project {project_id}.")

    def list_stories(
        self,
        project_id: int,
        current_state: Optional[Iterable[StoryState]] = None,
        story_type: Optional[StoryType] = None,
    ) -> list["LocalStory"]:
        states = {StoryState(s) for s in current_state} if current_state is not None else None
        stories = []
        for record in self._story_records(project_id):
            story = self._bind(record)
            if states is not None and story.current_state not in states:
                continue
            if story_type is not None and story.story_type != StoryType(story_type):
                continue
            stories.append(story)
        return sorted(stories, key=lambda s: s.id)

    def update_story(self, story: Story, **fields: Any) -> Optional[Story]:
        """Validate and persist a partial update. Returns None when rejected."""
        unknown = set(fields) - UPDATABLE_FIELDS
        if unknown:
            logger.warning(
                "Rejected update of story %s: unknown fields %s", story.id, ", ".join(sorted(unknown))
            )
            return None
        try:
            updated = Story.model_validate({**story.model_dump(), **fields})
        except ValidationError as e:
            logger.warning("Rejected update of story %s: %s", story.id, e)
            return None

        data = self._read(story.project_id)
        for record in data.get("stories") or []:
            if record.get("id") == story.id:
                notes = record.get("notes") or []
                record.clear()
                record.update(updated.model_dump(mode="json"))
                record["notes"] = notes
                break
        else:
            raise StoryNotFoundError(f"Story '{story.id}' not found in project {story.project_id}.")
        self._write(story.project_id, data)
        return updated

    # --- Notes ---

    def create_note(self, story: Story, text: str) -> Note:
        data = self._read(story.project_id)
        for record in data.get("stories") or []:
            if record.get("id") == story.id:
                notes = record.setdefault("notes", []) or []
                note = Note(
                    id=max((n["id"] for n in notes), default=0) + 1,
                    story_id=story.id,
                    text=text,
                )
                notes.append(note.model_dump(mode="json"))
                record["notes"] = notes
                break
        else:
            raise StoryNotFoundError(f"Story '{story.id}' not found in project {story.project_id}.")
        self._write(story.project_id, data)
        return note

    def list_notes(self, story: Story) -> list[Note]:
        for record in self._story_records(story.project_id):
            if record.get("id") == story.id:
                return [Note.model_validate(n) for n in record.get("notes") or []]
        raise StoryNotFoundError(f"Story '{story.id}' not found in project {story.project_id}.")


class LocalNotes:
    def __init__(self, tracker: LocalTracker, story: Story) -> None:
        self._tracker = tracker
        self._story = story

    def create(self, text: str) -> Note:
        return self._tracker.create_note(self._story, text)


class LocalStories:
    def __init__(self, tracker: LocalTracker, project_id: int) -> None:
        self._tracker = tracker
        self._project_id = project_id

    def create(self, **fields: Any) -> "LocalStory":
        return self._tracker.create_story(self._project_id, **fields)

    def find(self, story_id: int) -> "LocalStory":
        return self._tracker.find_story(self._project_id, int(story_id))

    def all(
        self,
        current_state: Optional[Iterable[StoryState]] = None,
        story_type: Optional[StoryType] = None,
    ) -> list["LocalStory"]:
        return self._tracker.list_stories(self._project_id, current_state, story_type)


class LocalProject(Project):
    _tracker: LocalTracker = PrivateAttr()

    @property
    def stories(self) -> LocalStories:
        return LocalStories(self._tracker, self.id)


class LocalStory(Story):
    _tracker: LocalTracker = PrivateAttr()

    @property
    def notes(self) -> LocalNotes:
        return LocalNotes(self._tracker, self)

    def update(self, **fields: Any) -> bool:
        updated = self._tracker.update_story(self, **fields)
        if updated is None:
            return False
        for name in fields:
            setattr(self, name, getattr(updated, name))
        return True
