"""Directory service - projects and tasks known to the billing engine."""
from typing import Optional

from timebill.exceptions import NotFoundError
from timebill.models.project import Project, ProjectCreate, Task, TaskCreate


class DirectoryService:
    """
    Service for the project/client directory.

    Time entries only reference projects and tasks by id; the directory is
    consulted to resolve a project's client when invoicing and to label
    report rows.
    """

    def __init__(self, db):
        """Initialize service with database connection."""
        self.db = db
        self.projects = db["projects"]
        self.tasks = db["tasks"]

    async def register_project(self, project_create: ProjectCreate) -> Project:
        """Add or replace a project."""
        project = Project(**project_create.model_dump())
        with self.db.lock:
            self.projects.put(project.id, project)
        return project

    async def get_project(self, project_id: int) -> Project:
        """
        Get a project by id.

        Raises:
            NotFoundError: If the project is unknown
        """
        project = self.find_project(project_id)
        if project is None:
            raise NotFoundError("Project", project_id)
        return project

    def find_project(self, project_id: int) -> Optional[Project]:
        return self.projects.get(project_id)

    async def list_projects(self) -> list[Project]:
        """List projects ordered by id."""
        return sorted(self.projects.values(), key=lambda p: p.id)

    async def register_task(self, project_id: int, task_create: TaskCreate) -> Task:
        """
        Add or replace a task under a project.

        Raises:
            NotFoundError: If the project is unknown
        """
        with self.db.lock:
            if self.find_project(project_id) is None:
                raise NotFoundError("Project", project_id)
            task = Task(id=task_create.id, project_id=project_id, title=task_create.title)
            self.tasks.put(task.id, task)
        return task

    def project_names(self) -> dict[int, str]:
        return {project.id: project.name for project in self.projects.values()}

    def task_names(self) -> dict[int, str]:
        return {task.id: task.title for task in self.tasks.values()}
