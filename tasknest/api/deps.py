from dataclasses import dataclass
from datetime import datetime, timezone
import logging
from fastapi import Depends, HTTPException, Query, WebSocketException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlmodel import Session, select
from starlette.requests import HTTPConnection
from tasknest.core.security import decode_access_token
from tasknest.db.session import get_session
from tasknest.models.user import User
from tasknest.models.token import RevokedToken
from tasknest.services.live import TaskFeed
import jwt
from typing import Optional

logger = logging.getLogger(__name__)

security = HTTPBearer()


@dataclass(frozen=True)
class AuthContext:
    """The signed-in user for one request, plus the token that proved it."""

    user: User
    token_id: str
    expires_at: datetime


def resolve_token(token: str, session: Session) -> Optional[AuthContext]:
    """Decode a bearer token and load its user. Returns None when the token is unusable."""
    try:
        payload = decode_access_token(token)
    except jwt.exceptions.PyJWTError:
        return None

    email: Optional[str] = payload.get("sub")
    token_id: Optional[str] = payload.get("jti")
    if email is None or token_id is None:
        return None

    if session.get(RevokedToken, token_id) is not None:
        logger.info("Rejected revoked token %s", token_id)
        return None

    user = session.exec(select(User).where(User.email == email)).first()
    if user is None:
        return None

    expires_at = datetime.fromtimestamp(payload["exp"], tz=timezone.utc)
    return AuthContext(user=user, token_id=token_id, expires_at=expires_at)


def get_auth_context(
    token: HTTPAuthorizationCredentials = Depends(security),
    session: Session = Depends(get_session),
) -> AuthContext:
    context = resolve_token(token.credentials, session)
    if context is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return context


def get_current_user(context: AuthContext = Depends(get_auth_context)) -> User:
    return context.user


def get_ws_auth_context(
    token: str = Query(...),
    session: Session = Depends(get_session),
) -> AuthContext:
    # Browsers cannot set headers on a WebSocket handshake, so the token rides in the query.
    context = resolve_token(token, session)
    if context is None:
        raise WebSocketException(code=status.WS_1008_POLICY_VIOLATION, reason="Could not validate credentials")
    return context


def get_task_feed(connection: HTTPConnection) -> TaskFeed:
    return connection.app.state.task_feed
