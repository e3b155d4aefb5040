class StoryNotFoundError(LookupError):
    """Raised when a story cannot be resolved in a project."""


class ProjectNotFoundError(LookupError):
    """Raised when a project ID is unknown to the tracker."""
