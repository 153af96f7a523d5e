from sqlmodel import SQLModel
from typing import Optional
from datetime import datetime
import uuid


class UserBase(SQLModel):
    email: str
    name: str


class UserCreate(UserBase):
    password: str


class UserRead(UserBase):
    id: uuid.UUID
    created_at: datetime


class UserUpdate(SQLModel):
    name: Optional[str] = None


class UserLogin(SQLModel):
    email: str
    password: str


class PasswordChange(SQLModel):
    current_password: str
    new_password: str


class Token(SQLModel):
    access_token: str
    token_type: str
