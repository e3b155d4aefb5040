import logging
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator

logger = logging.getLogger(__name__)


# Sentinel estimate for stories nobody has pointed yet
UNESTIMATED = -1
UNESTIMATED_LABEL = "Unestimated"


class StoryType(str, Enum):
    FEATURE = "feature"
    BUG = "bug"
    CHORE = "chore"

    @property
    def display_name(self) -> str:
        return self.value.title()

    @property
    def tag(self) -> str:
        return self.value.upper()


class StoryState(str, Enum):
    UNSCHEDULED = "unscheduled"
    UNSTARTED = "unstarted"
    STARTED = "started"
    FINISHED = "finished"
    DELIVERED = "delivered"
    ACCEPTED = "accepted"
    REJECTED = "rejected"

    @property
    def display_name(self) -> str:
        return self.value.title()


# States a story may be in to be offered for interactive selection
CANDIDATE_STATES = (StoryState.REJECTED, StoryState.UNSTARTED, StoryState.UNSCHEDULED)


class UpdateResult(str, Enum):
    """Outcome of a partial story update as acknowledged by the tracker."""

    APPLIED = "applied"
    REJECTED = "rejected"

    def __bool__(self) -> bool:
        return self is UpdateResult.APPLIED

    @classmethod
    def from_ack(cls, ack: object) -> "UpdateResult":
        return cls.APPLIED if ack else cls.REJECTED


def _parse_enum(enum_cls, value, kind: str):
    if isinstance(value, enum_cls):
        return value
    if value is None:
        return None
    token = str(value).strip().lower()
    if not token:
        return None
    try:
        return enum_cls(token)
    except ValueError as e:
        raise ValueError(
            f"Invalid {kind} '{value}'. Allowed: {', '.join([m.value for m in enum_cls])}"
        ) from e


def parse_story_type(value: Optional[str | StoryType]) -> Optional[StoryType]:
    """Parse a story type input string. Blank input means no type."""
    return _parse_enum(StoryType, value, "story type")


def parse_story_state(value: Optional[str | StoryState]) -> Optional[StoryState]:
    """Parse a story state input string. Blank input means no state."""
    return _parse_enum(StoryState, value, "story state")


class Story(BaseModel):
    """A unit of work tracked by the tracker (feature, bug or chore)."""

    id: int
    project_id: int
    name: str
    description: Optional[str] = None
    story_type: StoryType = Field(default=StoryType.FEATURE)
    current_state: StoryState = Field(default=StoryState.UNSCHEDULED)
    estimate: int = Field(default=UNESTIMATED)
    owned_by: Optional[str] = None

    @field_validator("name")
    @classmethod
    def name_must_not_be_blank(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("Story name cannot be empty.")
        return value

    @field_validator("story_type", mode="before")
    @classmethod
    def story_type_must_be_allowed(cls, value):
        parsed = parse_story_type(value)
        if parsed is None:
            raise ValueError("Story type cannot be empty.")
        return parsed

    @field_validator("current_state", mode="before")
    @classmethod
    def state_must_be_allowed(cls, value):
        parsed = parse_story_state(value)
        if parsed is None:
            raise ValueError("Story state cannot be empty.")
        return parsed

    @field_validator("estimate")
    @classmethod
    def estimate_must_be_points_or_sentinel(cls, value: int) -> int:
        if value < UNESTIMATED:
            raise ValueError(
                f"Estimate must be a non-negative number of points, or {UNESTIMATED} for unestimated."
            )
        return value


class Note(BaseModel):
    """A timestamped text annotation attached to a story."""

    id: int
    story_id: int
    text: str
    noted_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class Project(BaseModel):
    id: int
    account: str
    name: Optional[str] = None
