import logging
from typing import Optional

from fastapi import Depends, Header, HTTPException
from sqlalchemy.orm import Session

from .database import get_db
from .errors import PermissionDeniedError
from .models import User
from .shared.validators import validate_uuid

logger = logging.getLogger(__name__)


async def get_current_user(
    x_user_id: Optional[str] = Header(default=None),
    db: Session = Depends(get_db),
) -> User:
    """
    Load the caller from the X-User-Id header.

    Token verification happens at the gateway; it forwards the verified
    user id in this header.
    """
    if not x_user_id:
        logger.error("❌ No X-User-Id header provided")
        raise HTTPException(status_code=401, detail="Not authenticated")

    if not validate_uuid(x_user_id):
        logger.warning(f"⚠️ Malformed user id in X-User-Id: '{x_user_id[:40]}'")
        raise HTTPException(status_code=401, detail="Not authenticated")

    user = db.query(User).filter(User.id == x_user_id).first()
    if not user:
        logger.warning(f"⚠️ Unknown user id {x_user_id}")
        raise HTTPException(status_code=401, detail="Not authenticated")

    if user.status == "suspended":
        logger.warning(f"⚠️ Suspended user {user.id} attempted access")
        raise HTTPException(status_code=403, detail="Account suspended")

    logger.debug(f"✅ User authenticated: {user.email}")
    return user


async def get_business_user(user: User = Depends(get_current_user)) -> User:
    """Current user, required to hold the business role"""
    if user.role != "business":
        logger.warning(f"⚠️ User {user.email} attempted a business-only route (role={user.role})")
        raise PermissionDeniedError("business account required")
    return user
