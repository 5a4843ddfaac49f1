"""Project directory endpoints."""
from fastapi import APIRouter, Depends, status

from timebill.database import get_database
from timebill.exceptions import BillingEngineError
from timebill.models.project import Project, ProjectCreate, Task, TaskCreate
from timebill.routers.errors import to_http_exception
from timebill.services.directory_service import DirectoryService


router = APIRouter(prefix="/projects", tags=["projects"])


@router.post("", response_model=Project, status_code=status.HTTP_201_CREATED)
async def register_project(
    project_create: ProjectCreate,
    db=Depends(get_database),
):
    """
    Register a project and its client.

    - Re-registering an id replaces the previous record
    """
    service = DirectoryService(db)
    return await service.register_project(project_create)


@router.get("", response_model=list[Project])
async def list_projects(db=Depends(get_database)):
    """List registered projects."""
    service = DirectoryService(db)
    return await service.list_projects()


@router.get("/{project_id}", response_model=Project)
async def get_project(
    project_id: int,
    db=Depends(get_database),
):
    """Get a project by ID."""
    service = DirectoryService(db)
    try:
        return await service.get_project(project_id)
    except BillingEngineError as e:
        raise to_http_exception(e)


@router.post("/{project_id}/tasks", response_model=Task, status_code=status.HTTP_201_CREATED)
async def register_task(
    project_id: int,
    task_create: TaskCreate,
    db=Depends(get_database),
):
    """Register a task under a project."""
    service = DirectoryService(db)
    try:
        return await service.register_task(project_id, task_create)
    except BillingEngineError as e:
        raise to_http_exception(e)
