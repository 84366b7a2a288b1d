from __future__ import annotations

import json
from pathlib import Path
from typing import Dict, List, Protocol

from ..core.errors import NotFoundError
from ..domain.models import Project


class ProjectStore(Protocol):
    def load_project(self, project_id: str) -> Project: ...

    def save_project(self, project: Project) -> Project: ...

    def list_projects(self) -> List[Project]: ...


def _not_found(project_id: str) -> NotFoundError:
    return NotFoundError("PROJECT_NOT_FOUND", f"Project {project_id} not found", project_id=project_id)


class JsonFileProjectStore:
    """One JSON document per project under root/<id>.json."""

    def __init__(self, root: Path):
        self.root = Path(root)
        self.root.mkdir(parents=True, exist_ok=True)

    def _path(self, project_id: str) -> Path:
        safe = "".join(ch for ch in project_id if ch.isalnum() or ch in "-_")
        if not safe:
            raise _not_found(project_id)
        return self.root / f"{safe}.json"

    def save_project(self, project: Project) -> Project:
        path = self._path(project.id)
        tmp = path.with_suffix(".json.tmp")
        tmp.write_text(project.model_dump_json(indent=2), encoding="utf-8")
        tmp.replace(path)
        return project

    def load_project(self, project_id: str) -> Project:
        path = self._path(project_id)
        if not path.exists():
            raise _not_found(project_id)
        with path.open("r", encoding="utf-8") as f:
            data = json.load(f)
        return Project.model_validate(data)

    def list_projects(self) -> List[Project]:
        projects = [self.load_project(p.stem) for p in sorted(self.root.glob("*.json"))]
        return sorted(projects, key=lambda p: p.updated_at, reverse=True)


class InMemoryProjectStore:
    """Read-your-writes store keeping deep copies."""

    def __init__(self) -> None:
        self._projects: Dict[str, Project] = {}

    def save_project(self, project: Project) -> Project:
        self._projects[project.id] = project.model_copy(deep=True)
        return project

    def load_project(self, project_id: str) -> Project:
        found = self._projects.get(project_id)
        if found is None:
            raise _not_found(project_id)
        return found.model_copy(deep=True)

    def list_projects(self) -> List[Project]:
        projects = [p.model_copy(deep=True) for p in self._projects.values()]
        return sorted(projects, key=lambda p: p.updated_at, reverse=True)
