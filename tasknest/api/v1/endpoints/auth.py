import logging
import re
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import delete
from sqlmodel import Session, select
from datetime import timedelta

from tasknest.db.session import get_session
from tasknest.models.user import User, utcnow
from tasknest.models.token import RevokedToken
from tasknest.schemas.user import UserCreate, UserRead, UserLogin, PasswordChange, Token
from tasknest.core.security import create_access_token, get_password_hash, verify_password, password_problem
from tasknest.api.deps import AuthContext, get_auth_context
from tasknest.core.config import settings

logger = logging.getLogger(__name__)

router = APIRouter()

EMAIL_PATTERN = re.compile(r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$')


def normalize_email(email: str) -> str:
    # Addresses are matched case-insensitively
    return email.strip().lower()


@router.post("/register", response_model=UserRead, status_code=status.HTTP_201_CREATED)
def register(user_create: UserCreate, session: Session = Depends(get_session)):
    name = user_create.name.strip()
    email = normalize_email(user_create.email)
    if not name or not email or not user_create.password:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Please fill in all fields"
        )

    if not EMAIL_PATTERN.match(email):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid email address"
        )

    # Check if user exists
    user = session.exec(select(User).where(User.email == email)).first()
    if user:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email already registered"
        )

    # Validate that the display name is not an email address
    if EMAIL_PATTERN.match(name):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Name cannot be an email address"
        )

    problem = password_problem(user_create.password)
    if problem:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=problem)

    # Create the account and its profile in one row
    db_user = User(
        email=email,
        password_hash=get_password_hash(user_create.password),
        name=name
    )

    session.add(db_user)
    session.commit()
    session.refresh(db_user)
    logger.info("Registered user %s", db_user.id)
    return db_user


@router.post("/login", response_model=Token)
def login(user_credentials: UserLogin, session: Session = Depends(get_session)):
    # Find user by email
    statement = select(User).where(User.email == normalize_email(user_credentials.email))
    user = session.exec(statement).first()

    if not user or not verify_password(user_credentials.password, user.password_hash):
        logger.info("Failed sign-in for %s", user_credentials.email)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    # Create access token
    access_token_expires = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    access_token = create_access_token(
        data={"sub": user.email}, expires_delta=access_token_expires
    )

    logger.info("User %s signed in", user.id)
    return Token(access_token=access_token, token_type="bearer")


@router.post("/logout")
def logout(context: AuthContext = Depends(get_auth_context), session: Session = Depends(get_session)):
    # Revocations only matter until the token would have expired anyway
    session.execute(delete(RevokedToken).where(RevokedToken.expires_at < utcnow()))
    session.add(RevokedToken(
        jti=context.token_id,
        user_id=context.user.id,
        expires_at=context.expires_at
    ))
    session.commit()
    logger.info("User %s signed out", context.user.id)
    return {"ok": True}


@router.post("/password")
def change_password(
    password_change: PasswordChange,
    context: AuthContext = Depends(get_auth_context),
    session: Session = Depends(get_session)
):
    user = context.user
    # Re-authenticate before touching the credential
    if not verify_password(password_change.current_password, user.password_hash):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Failed to update password. Please check your current password.",
            headers={"WWW-Authenticate": "Bearer"},
        )

    problem = password_problem(password_change.new_password)
    if problem:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=problem)

    user.password_hash = get_password_hash(password_change.new_password)
    user.updated_at = utcnow()
    session.add(user)
    session.commit()
    logger.info("User %s changed password", user.id)
    return {"ok": True}
