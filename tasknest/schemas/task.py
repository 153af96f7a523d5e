from sqlmodel import SQLModel
from typing import List, Optional
from datetime import datetime
import uuid
from ..models.category import TaskCategory, TaskFilter

class TaskBase(SQLModel):
    title: str
    description: Optional[str] = None
    category: TaskCategory = TaskCategory.personal

class TaskCreate(TaskBase):
    pass

class TaskRead(TaskBase):
    id: uuid.UUID
    user_id: uuid.UUID
    completed: bool
    created_at: datetime
    updated_at: datetime

class TaskUpdate(SQLModel):
    title: Optional[str] = None
    description: Optional[str] = None
    category: Optional[TaskCategory] = None
    completed: Optional[bool] = None

class TaskStats(SQLModel):
    total: int
    completed: int
    pending: int
    completion_rate: float

class TaskView(SQLModel):
    filter: TaskFilter
    tasks: List[TaskRead]
    stats: TaskStats

class CategoryRead(SQLModel):
    id: str
    label: str
    icon: str
    color: str
