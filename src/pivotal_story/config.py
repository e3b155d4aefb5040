import os
import shutil
from typing import Optional

# --- Helpers for parsing env vars ---


def _env_bool(name: str, default: bool = False) -> bool:
    """Parse a boolean environment variable.

    Accepts common boolean string representations: '1', 'true', 'yes', 'on'
    (case-insensitive).

    Args:
        name: Environment variable name
        default: Default value if variable is not set

    Returns:
        bool: The parsed boolean value
    """
    val = os.getenv(name)
    if val is None:
        return default
    return val.strip().lower() in ("1", "true", "yes", "on")


def _env_int(name: str, default: Optional[int] = None) -> Optional[int]:
    """Parse an integer environment variable, falling back to default."""
    val = os.getenv(name)
    if val is None or not val.strip():
        return default
    try:
        return int(val)
    except ValueError:
        return default


def _detect_terminal_width(fallback: int = 80) -> int:
    return shutil.get_terminal_size((fallback, 24)).columns


# --- Core Paths ---
WORKSPACE_ROOT = os.getcwd()

# Local tracker storage (one YAML file per project)
TRACKER_DIR = os.getenv("TRACKER_DIR", os.path.join(WORKSPACE_ROOT, ".tracker"))

# --- Logging Configuration ---
LOG_DIR = os.getenv("LOG_DIR", os.path.join(WORKSPACE_ROOT, "logs"))
LOG_FILE_PATH = os.path.join(LOG_DIR, "pivotal_story.log")
LOG_LEVEL = os.getenv("LOG_LEVEL", "WARNING").upper()
ENABLE_FILE_LOG = _env_bool("PIVOTAL_STORY_ENABLE_FILE_LOG")

# --- Selection ---
DEFAULT_PROJECT_ID = _env_int("PIVOTAL_STORY_PROJECT_ID")
# The user whose own stories are offered last when choosing a story
CURRENT_USER = os.getenv("PIVOTAL_STORY_USER") or None
SELECT_LIMIT = _env_int("PIVOTAL_STORY_SELECT_LIMIT", 5)

# --- Rendering ---
TERMINAL_WIDTH = _env_int("PIVOTAL_STORY_TERMINAL_WIDTH") or _detect_terminal_width()
