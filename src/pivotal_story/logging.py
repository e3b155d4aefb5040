"""Logging setup for the pivotal-story CLI.

Stdout belongs to the user: pretty printed stories, confirmation lines, the
story menu and the ID printed by ``select`` all go there, and ``select`` is
meant to be captured by shell scripts. Log records therefore go to stderr,
and only at WARNING and above unless LOG_LEVEL says otherwise, so a rejected
update or an unset current user shows up without cluttering the menu.

Import this module once from ``__main__`` before anything else logs. Library
users embedding StoryPresenter configure logging themselves.
"""

import logging
import sys
from pathlib import Path

from pivotal_story import config

logger = logging.getLogger(__name__)


level = getattr(logging, config.LOG_LEVEL, logging.WARNING)

handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
# Optional persistent trail of tracker rejections and lookups
if config.ENABLE_FILE_LOG:
    Path(config.LOG_FILE_PATH).parent.mkdir(parents=True, exist_ok=True)
    handlers.append(logging.FileHandler(config.LOG_FILE_PATH))

logging.basicConfig(
    level=level,
    format="%(asctime)s - %(levelname)s - %(name)s:%(lineno)d - %(message)s",
    handlers=handlers,
)

logger.debug(
    "CLI logging to stderr at %s (file log: %s)",
    config.LOG_LEVEL,
    config.LOG_FILE_PATH if config.ENABLE_FILE_LOG else "off",
)
