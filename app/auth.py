"""
Acting-user resolution.

Authentication itself is handled upstream (gateway / session service); requests
reach this API with the authenticated user's id in the X-User-Id header.
"""

import logging
from typing import Optional

from fastapi import Depends, Header, HTTPException
from sqlalchemy.orm import Session

from .database import get_db
from .models import User

logger = logging.getLogger(__name__)


def get_current_user(
    x_user_id: Optional[int] = Header(None, alias="X-User-Id"),
    db: Session = Depends(get_db),
) -> User:
    """Resolve the acting user from the X-User-Id header"""
    if x_user_id is None:
        raise HTTPException(status_code=401, detail="Not authenticated")

    user = db.query(User).filter(User.id == x_user_id).first()
    if not user:
        logger.warning(f"⚠️ Unknown user id in X-User-Id header: {x_user_id}")
        raise HTTPException(status_code=401, detail="Not authenticated")
    if not user.is_active:
        logger.warning(f"⚠️ Inactive user {user.id} attempted access")
        raise HTTPException(status_code=401, detail="Account is deactivated")
    return user


def require_admin(current_user: User = Depends(get_current_user)) -> User:
    """Restrict a route to admins"""
    if current_user.role != "admin":
        raise HTTPException(status_code=403, detail="Admin access required")
    return current_user


def require_freelancer(current_user: User = Depends(get_current_user)) -> User:
    """Restrict a route to freelancers"""
    if current_user.role != "freelancer":
        raise HTTPException(status_code=403, detail="Freelancer access required")
    return current_user
