"""
Task Service - coordinator reminders.

Status changes are unrestricted (pending, in_progress and completed may
move to any other). "Overdue" and "due today" are derived on read and never
stored.
"""

import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from placecell.core.auth import Actor
from placecell.core.errors import NotFound, PermissionDenied, ValidationFailed, require_text
from placecell.models import Company, Task
from placecell.schemas.schemas import TaskCreate, TaskPriority, TaskStatus, TaskUpdate

logger = logging.getLogger(__name__)


def is_overdue(task, now: Optional[datetime] = None) -> bool:
    """Not completed and past its due moment."""
    now = now or datetime.utcnow()
    return task.status != TaskStatus.completed.value and task.due_date < now


def is_due_today(task, now: Optional[datetime] = None) -> bool:
    now = now or datetime.utcnow()
    return task.due_date.date() == now.date()


def toggled_status(status: str) -> str:
    """Checkbox behaviour: completed goes back to pending, anything else completes."""
    if status == TaskStatus.completed.value:
        return TaskStatus.pending.value
    return TaskStatus.completed.value


class TaskService:

    def __init__(self, db: Session):
        self.db = db

    def list_tasks(
        self,
        actor: Actor,
        coordinator: Optional[str] = None,
        status: Optional[TaskStatus] = None,
        priority: Optional[TaskPriority] = None
    ) -> List[Task]:
        """Own tasks by due date. Admins may look at one coordinator's list or everyone's."""
        query = select(Task).order_by(Task.due_date, Task.id)
        if actor.is_admin:
            if coordinator:
                query = query.where(Task.coordinator_name == coordinator)
        else:
            query = query.where(Task.coordinator_name == actor.name)
        if status:
            query = query.where(Task.status == status.value)
        if priority:
            query = query.where(Task.priority == priority.value)
        return list(self.db.scalars(query))

    def create(self, actor: Actor, data: TaskCreate) -> Task:
        title = require_text(data.title, "Title")
        self._check_company(data.company_id)
        task = Task(
            title=title,
            description=data.description,
            company_id=data.company_id,
            coordinator_name=actor.name,
            due_date=data.due_date,
            priority=data.priority.value,
            status=TaskStatus.pending.value,
        )
        self.db.add(task)
        self.db.commit()
        self.db.refresh(task)
        return task

    def update(self, actor: Actor, task_id: int, data: TaskUpdate) -> Task:
        task = self._owned(actor, task_id)
        updates = data.model_dump(exclude_unset=True)
        if "title" in updates:
            updates["title"] = require_text(updates["title"], "Title")
        if "due_date" in updates and updates["due_date"] is None:
            raise ValidationFailed("Due date is required")
        if "company_id" in updates:
            self._check_company(updates["company_id"])
        for field, value in updates.items():
            if isinstance(value, (TaskStatus, TaskPriority)):
                value = value.value
            elif field in ("status", "priority") and value is None:
                continue
            setattr(task, field, value)
        self.db.commit()
        self.db.refresh(task)
        return task

    def set_status(self, actor: Actor, task_id: int, status: TaskStatus) -> Task:
        task = self._owned(actor, task_id)
        task.status = status.value
        self.db.commit()
        self.db.refresh(task)
        return task

    def toggle(self, actor: Actor, task_id: int) -> Task:
        task = self._owned(actor, task_id)
        task.status = toggled_status(task.status)
        self.db.commit()
        self.db.refresh(task)
        return task

    def delete(self, actor: Actor, task_id: int) -> None:
        task = self._owned(actor, task_id)
        self.db.delete(task)
        self.db.commit()

    def _owned(self, actor: Actor, task_id: int) -> Task:
        task = self.db.get(Task, task_id)
        if not task:
            raise NotFound("Task not found")
        if task.coordinator_name != actor.name and not actor.is_admin:
            raise PermissionDenied("You can only change your own tasks")
        return task

    def _check_company(self, company_id: Optional[int]) -> None:
        if company_id is not None and not self.db.get(Company, company_id):
            raise NotFound("Company not found")
