import logging
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlmodel import Session
from typing import List, Optional
import uuid

from tasknest.db.session import get_session
from tasknest.models.user import User, utcnow
from tasknest.models.task import Task
from tasknest.models.category import TaskFilter
from tasknest.schemas.task import TaskCreate, TaskRead, TaskUpdate, TaskStats, TaskView
from tasknest.api.deps import get_current_user, get_task_feed
from tasknest.services.live import TaskFeed, load_snapshot, publish_snapshot
from tasknest.services.task_view import compute_stats, derive_view

logger = logging.getLogger(__name__)

router = APIRouter()


def _clean_title(title: Optional[str]) -> str:
    cleaned = (title or "").strip()
    if not cleaned:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Please add a title for your task"
        )
    return cleaned


def _clean_description(description: Optional[str]) -> Optional[str]:
    if description is None:
        return None
    return description.strip() or None


def _owned_task(task_id: uuid.UUID, current_user: User, session: Session) -> Task:
    task = session.get(Task, task_id)
    if not task:
        raise HTTPException(status_code=404, detail="Task not found")
    if task.user_id != current_user.id:
        raise HTTPException(status_code=403, detail="Not authorized")
    return task


@router.get("/stats", response_model=TaskStats)
def get_task_stats(
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session)
):
    return compute_stats(load_snapshot(session, current_user.id))


@router.get("/view", response_model=TaskView)
def get_task_view(
    filter: TaskFilter = Query(TaskFilter.all),
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session)
):
    return derive_view(load_snapshot(session, current_user.id), filter)


@router.get("/", response_model=List[TaskRead])
def list_user_tasks(
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session)
):
    return load_snapshot(session, current_user.id)


@router.post("/", response_model=TaskRead, status_code=status.HTTP_201_CREATED)
def create_task(
    task_create: TaskCreate,
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
    feed: TaskFeed = Depends(get_task_feed)
):
    db_task = Task(
        user_id=current_user.id,
        title=_clean_title(task_create.title),
        description=_clean_description(task_create.description),
        category=task_create.category,
        completed=False
    )
    session.add(db_task)
    session.commit()
    session.refresh(db_task)
    logger.info("User %s created task %s", current_user.id, db_task.id)
    publish_snapshot(feed, session, current_user.id)
    return db_task


@router.get("/{task_id}", response_model=TaskRead)
def get_task(
    task_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session)
):
    return _owned_task(task_id, current_user, session)


@router.patch("/{task_id}", response_model=TaskRead)
def update_task(
    task_id: uuid.UUID,
    task_update: TaskUpdate,
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
    feed: TaskFeed = Depends(get_task_feed)
):
    task = _owned_task(task_id, current_user, session)

    # Merge semantics: only fields present in the request change
    task_data = task_update.model_dump(exclude_unset=True)
    if "title" in task_data:
        task_data["title"] = _clean_title(task_data["title"])
    if "description" in task_data:
        task_data["description"] = _clean_description(task_data["description"])
    for key in ("category", "completed"):
        if key in task_data and task_data[key] is None:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"{key} cannot be null"
            )
    for key, value in task_data.items():
        setattr(task, key, value)

    task.updated_at = utcnow()
    session.add(task)
    session.commit()
    session.refresh(task)
    logger.info("User %s updated task %s", current_user.id, task.id)
    publish_snapshot(feed, session, current_user.id)
    return task


@router.post("/{task_id}/toggle", response_model=TaskRead)
def toggle_task(
    task_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
    feed: TaskFeed = Depends(get_task_feed)
):
    task = _owned_task(task_id, current_user, session)
    task.completed = not task.completed
    task.updated_at = utcnow()
    session.add(task)
    session.commit()
    session.refresh(task)
    logger.info("User %s marked task %s completed=%s", current_user.id, task.id, task.completed)
    publish_snapshot(feed, session, current_user.id)
    return task


@router.delete("/{task_id}")
def delete_task(
    task_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
    feed: TaskFeed = Depends(get_task_feed)
):
    task = _owned_task(task_id, current_user, session)
    session.delete(task)
    session.commit()
    logger.info("User %s deleted task %s", current_user.id, task_id)
    publish_snapshot(feed, session, current_user.id)
    return {"ok": True}
