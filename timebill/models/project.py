"""Project directory model definitions."""
from pydantic import BaseModel


class ProjectCreate(BaseModel):
    """Project registration model."""

    id: int
    name: str
    client_id: int


class Project(ProjectCreate):
    """Project as known to the directory."""

    pass


class TaskCreate(BaseModel):
    """Task registration model."""

    id: int
    title: str


class Task(BaseModel):
    """Task as known to the directory."""

    id: int
    project_id: int
    title: str
