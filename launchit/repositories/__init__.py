"""Repository layer package."""

from launchit.repositories.project_repo import ProjectRepo

__all__ = [
    "ProjectRepo",
]
