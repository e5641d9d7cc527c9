"""Project data models."""

from .project import ProjectConfig, ProjectLayout, find_project_root

__all__ = ["ProjectConfig", "ProjectLayout", "find_project_root"]
