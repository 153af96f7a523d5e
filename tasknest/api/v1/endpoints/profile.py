import logging
from fastapi import APIRouter, Depends, HTTPException, status
from sqlmodel import Session

from tasknest.db.session import get_session
from tasknest.models.user import User, utcnow
from tasknest.schemas.user import UserRead, UserUpdate
from tasknest.api.deps import get_current_user

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=UserRead)
def get_profile(current_user: User = Depends(get_current_user)):
    return current_user


@router.patch("", response_model=UserRead)
def update_profile(
    user_update: UserUpdate,
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session)
):
    if user_update.name is not None:
        name = user_update.name.strip()
        if not name:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Name cannot be empty"
            )
        current_user.name = name

    current_user.updated_at = utcnow()
    session.add(current_user)
    session.commit()
    session.refresh(current_user)
    logger.info("User %s updated profile", current_user.id)
    return current_user
