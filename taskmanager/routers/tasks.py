"""Task router. Every route is scoped to the authenticated owner."""
from fastapi import APIRouter, Body, Depends, Query, status
from typing import Any, Dict, List, Optional

from taskmanager.db.config import get_session
from taskmanager.errors import NotFound
from taskmanager.middleware.auth import AuthContext, get_current_user
from taskmanager.schemas.task import TASK_UPDATABLE_FIELDS, TaskCreate, TaskResponse, TaskUpdate
from taskmanager.schemas.updates import parse_update
from taskmanager.services.task_service import TaskService
from sqlmodel import Session

router = APIRouter(tags=["Tasks"])

TASK_NOT_FOUND = "Task not found"


def get_task_service(session: Session = Depends(get_session)) -> TaskService:
    """Dependency for getting TaskService instance."""
    return TaskService(session)


@router.post("/tasks", response_model=TaskResponse, status_code=status.HTTP_201_CREATED)
async def create_task(
    task_data: TaskCreate,
    auth: AuthContext = Depends(get_current_user),
    service: TaskService = Depends(get_task_service),
):
    """Create a task owned by the caller."""
    return service.create(auth.user.id, task_data)


@router.get("/tasks", response_model=List[TaskResponse])
async def list_tasks(
    auth: AuthContext = Depends(get_current_user),
    service: TaskService = Depends(get_task_service),
    completed: Optional[bool] = Query(None, description="Only tasks with this completion state"),
    includes: Optional[str] = Query(None, description="Substring the description must contain"),
    sort_by: Optional[str] = Query(None, description="field:asc or field:desc"),
    limit: Optional[int] = Query(None, ge=0, description="Maximum number of tasks, 0 for all"),
    skip: Optional[int] = Query(None, ge=0, description="Number of tasks to skip"),
):
    """List the caller's tasks with filtering, sorting and pagination."""
    return service.list_for_owner(
        owner_id=auth.user.id,
        completed=completed,
        includes=includes,
        sort_by=sort_by,
        limit=limit,
        skip=skip,
    )


@router.get("/tasks/{task_id}", response_model=TaskResponse)
async def get_task(
    task_id: str,
    auth: AuthContext = Depends(get_current_user),
    service: TaskService = Depends(get_task_service),
):
    """Get a specific task by ID."""
    task = service.get_by_id(task_id, auth.user.id)
    if not task:
        raise NotFound(TASK_NOT_FOUND)
    return task


@router.patch("/tasks/{task_id}", response_model=TaskResponse)
async def update_task(
    task_id: str,
    body: Dict[str, Any] = Body(...),
    auth: AuthContext = Depends(get_current_user),
    service: TaskService = Depends(get_task_service),
):
    """Update description and/or completed."""
    changes = parse_update(body, TASK_UPDATABLE_FIELDS, TaskUpdate)

    task = service.update(task_id, auth.user.id, changes)
    if not task:
        raise NotFound(TASK_NOT_FOUND)
    return task


@router.delete("/tasks/{task_id}", response_model=TaskResponse)
async def delete_task(
    task_id: str,
    auth: AuthContext = Depends(get_current_user),
    service: TaskService = Depends(get_task_service),
):
    """Delete a task and return it."""
    task = service.delete(task_id, auth.user.id)
    if not task:
        raise NotFound(TASK_NOT_FOUND)
    return task
