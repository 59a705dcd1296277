"""Database models package exports."""

from launchit.db.models.project import Project, ProjectStatus

__all__ = [
    "Project",
    "ProjectStatus",
]
