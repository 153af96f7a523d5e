# This file ensures all models are loaded together to resolve circular references
from .user import User
from .task import Task
from .token import RevokedToken

__all__ = ["User", "Task", "RevokedToken"]
