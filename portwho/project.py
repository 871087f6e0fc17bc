import os
from typing import Callable, Sequence

from .models import ProjectRoot

PROJECT_MARKERS = (
    "package.json",
    "go.mod",
    "requirements.txt",
    "pom.xml",
    "docker-compose.yml",
    "docker-compose.yaml",
    ".git",
    "Cargo.toml",
    "Gemfile",
    "pyproject.toml",
    "composer.json",
)


def find_project_root(
    start: str,
    markers: Sequence[str] = PROJECT_MARKERS,
    exists: Callable[[str], bool] = os.path.exists,
) -> ProjectRoot:
    """Walk up from ``start`` to the first directory holding any marker.

    All markers are checked at each level and every hit at the winning level
    is returned. The filesystem root is never reported as a project.
    """
    if not start:
        return ProjectRoot()
    directory = os.path.abspath(start)
    while True:
        parent = os.path.dirname(directory)
        if parent == directory:
            return ProjectRoot()
        found = tuple(p for p in (os.path.join(directory, m) for m in markers) if exists(p))
        if found:
            return ProjectRoot(directory, found)
        directory = parent
