"""
Task Routes

GET    /tasks - Own tasks by due date (admin: ?coordinator= or everyone)
POST   /tasks - Create task
PUT    /tasks/{id} - Update task
PATCH  /tasks/{id}/status - Set status
POST   /tasks/{id}/toggle - Checkbox: completed <-> pending
DELETE /tasks/{id} - Delete task
"""

from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from placecell.core.auth import Actor, get_current_actor
from placecell.db.postgres import get_db
from placecell.models import Task
from placecell.schemas.schemas import (
    MessageResponse, TaskCreate, TaskPriority, TaskResponse, TaskStatus, TaskStatusUpdate, TaskUpdate
)
from placecell.services.task_service import TaskService, is_due_today, is_overdue

router = APIRouter(prefix="/tasks", tags=["Tasks"])


def to_response(task: Task, now: Optional[datetime] = None) -> TaskResponse:
    now = now or datetime.utcnow()
    return TaskResponse.model_validate(task).model_copy(update={
        "is_overdue": is_overdue(task, now),
        "is_due_today": is_due_today(task, now),
    })


@router.get("", response_model=List[TaskResponse])
async def list_tasks(
    coordinator: Optional[str] = Query(None, description="Admin only: whose tasks to show"),
    status: Optional[TaskStatus] = Query(None),
    priority: Optional[TaskPriority] = Query(None),
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db)
):
    now = datetime.utcnow()
    return [to_response(task, now) for task in TaskService(db).list_tasks(actor, coordinator, status, priority)]


@router.post("", response_model=TaskResponse, status_code=201)
async def create_task(data: TaskCreate, actor: Actor = Depends(get_current_actor), db: Session = Depends(get_db)):
    return to_response(TaskService(db).create(actor, data))


@router.put("/{task_id}", response_model=TaskResponse)
async def update_task(
    task_id: int,
    data: TaskUpdate,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db)
):
    return to_response(TaskService(db).update(actor, task_id, data))


@router.patch("/{task_id}/status", response_model=TaskResponse)
async def set_task_status(
    task_id: int,
    data: TaskStatusUpdate,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db)
):
    return to_response(TaskService(db).set_status(actor, task_id, data.status))


@router.post("/{task_id}/toggle", response_model=TaskResponse)
async def toggle_task(task_id: int, actor: Actor = Depends(get_current_actor), db: Session = Depends(get_db)):
    return to_response(TaskService(db).toggle(actor, task_id))


@router.delete("/{task_id}", response_model=MessageResponse)
async def delete_task(task_id: int, actor: Actor = Depends(get_current_actor), db: Session = Depends(get_db)):
    TaskService(db).delete(actor, task_id)
    return MessageResponse(message="Task deleted")
