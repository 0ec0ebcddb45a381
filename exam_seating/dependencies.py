import logging

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from exam_seating.database import get_db
from exam_seating.db_models import UserDB
from exam_seating.logging_config import set_user_id
from exam_seating.notifications import NotificationSink
from exam_seating.security import decode_token

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db)
) -> UserDB:
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authorized, no token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    payload = decode_token(credentials.credentials)
    if payload.get("type") != "access":
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token type")

    try:
        user_id = int(payload.get("sub"))
    except (TypeError, ValueError):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token payload")

    user = db.query(UserDB).filter(UserDB.id == user_id).first()
    if not user or not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authorized, user not found or inactive"
        )

    set_user_id(str(user.id))
    return user


def require_roles(*roles):
    """Dependency factory allowing only the given roles through"""

    def checker(current_user: UserDB = Depends(get_current_user)) -> UserDB:
        if current_user.role not in roles:
            logger.info("User %s with role '%s' refused, needs one of %s", current_user.id, current_user.role, roles)
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"User role '{current_user.role}' is not authorized to access this route"
            )
        return current_user

    return checker


def get_notification_sink(request: Request, db: Session = Depends(get_db)) -> NotificationSink:
    return request.app.state.notification_sink_factory(db)
