"""Pivotal Story - terminal presentation and selection of tracker stories.

This package renders stories from a project-tracking service as wrapped,
label-aligned text, issues partial updates against them, and lets a terminal
user pick one story out of a filtered candidate set.

Key components:
- presenter: StoryPresenter (pretty printing, updates, story selection)
- tracker: protocols for the tracker client collaborators
- services.local_tracker: YAML-file backed tracker
- cli: Direct command-line story management
"""

__version__ = "0.1.0"
