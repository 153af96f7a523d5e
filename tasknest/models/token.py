from sqlmodel import SQLModel, Field
from datetime import datetime
import uuid

from .user import utcnow


class RevokedToken(SQLModel, table=True):
    """Access token ids invalidated by sign-out."""

    __tablename__ = "revoked_tokens"

    jti: str = Field(primary_key=True, max_length=64)
    user_id: uuid.UUID = Field(foreign_key="users.id", index=True, nullable=False)
    expires_at: datetime = Field(nullable=False)
    revoked_at: datetime = Field(default_factory=utcnow, nullable=False)
