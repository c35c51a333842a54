"""Task service: owner-scoped CRUD with filtering, sorting and pagination."""
from sqlmodel import Session, select
from typing import List, Optional, Tuple
from datetime import datetime, timezone

from taskmanager.db.config import commit_or_fail
from taskmanager.models.task import Task
from taskmanager.schemas.task import TaskCreate, TaskUpdate

# sort_by field names accepted from clients, mapped onto columns
SORTABLE_FIELDS = {
    "description": Task.description,
    "completed": Task.completed,
    "created_at": Task.created_at,
    "createdAt": Task.created_at,
    "updated_at": Task.updated_at,
    "updatedAt": Task.updated_at,
}


def parse_sort(sort_by: Optional[str]) -> Optional[Tuple[str, bool]]:
    """
    Parse a ``field:asc|desc`` expression.

    Returns:
        (field, descending), or None when no usable field was given.
        Any direction other than "desc" sorts ascending.
    """
    if not sort_by:
        return None
    field, _, direction = sort_by.partition(":")
    field = field.strip()
    if field not in SORTABLE_FIELDS:
        return None
    return field, direction.strip().lower() == "desc"


class TaskService:
    """Service class for task CRUD. Every lookup is filtered by owner."""

    def __init__(self, session: Session):
        self.session = session

    def create(self, owner_id: str, data: TaskCreate) -> Task:
        task = Task(
            description=data.description,
            completed=data.completed,
            owner=owner_id,
        )
        self.session.add(task)
        commit_or_fail(self.session)
        self.session.refresh(task)
        return task

    def list_for_owner(
        self,
        owner_id: str,
        completed: Optional[bool] = None,
        includes: Optional[str] = None,
        sort_by: Optional[str] = None,
        limit: Optional[int] = None,
        skip: Optional[int] = None,
    ) -> List[Task]:
        """Get the owner's tasks matching the optional filters."""
        statement = select(Task).where(Task.owner == owner_id)

        if completed is not None:
            statement = statement.where(Task.completed == completed)

        if includes:
            statement = statement.where(Task.description.contains(includes, autoescape=True))

        sort = parse_sort(sort_by)
        if sort:
            field, descending = sort
            column = SORTABLE_FIELDS[field]
            statement = statement.order_by(column.desc() if descending else column.asc(), Task.created_at.asc())
        else:
            statement = statement.order_by(Task.created_at.asc())

        if skip:
            statement = statement.offset(skip)
        # 0 means no limit
        if limit:
            statement = statement.limit(limit)

        return list(self.session.exec(statement).all())

    def get_by_id(self, task_id: str, owner_id: str) -> Optional[Task]:
        """Get a specific task by ID, ensuring ownership."""
        statement = (
            select(Task)
            .where(Task.id == task_id)
            .where(Task.owner == owner_id)
        )
        return self.session.exec(statement).first()

    def update(self, task_id: str, owner_id: str, changes: TaskUpdate) -> Optional[Task]:
        """Update a task, ensuring ownership."""
        task = self.get_by_id(task_id, owner_id)
        if not task:
            return None

        if "description" in changes.model_fields_set:
            task.description = changes.description
        if "completed" in changes.model_fields_set:
            task.completed = changes.completed

        task.updated_at = datetime.now(timezone.utc)
        self.session.add(task)
        commit_or_fail(self.session)
        self.session.refresh(task)
        return task

    def delete(self, task_id: str, owner_id: str) -> Optional[Task]:
        """Delete a task, ensuring ownership. Returns the deleted task."""
        task = self.get_by_id(task_id, owner_id)
        if not task:
            return None

        self.session.delete(task)
        commit_or_fail(self.session)
        return task
