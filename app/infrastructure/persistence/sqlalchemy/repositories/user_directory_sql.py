import logging
from typing import Optional
from sqlmodel import Session, select

from .....db.models import User
from .....domain import ValidationError
from .....domain.value_objects import UserInfo
from .....application.ports.user_directory import UserDirectory

logger = logging.getLogger(__name__)


class SqlUserDirectory(UserDirectory):
    def __init__(self, session: Session):
        self.session = session

    def get_user(self, user_id: str) -> Optional[UserInfo]:
        u = self.session.exec(select(User).where(User.id == user_id).where(User.is_active == True)).first()  # noqa: E712
        if not u:
            return None
        try:
            return UserInfo.create(u.id, u.email, u.name, u.role)
        except ValidationError as e:
            logger.warning(f"User {user_id} has unusable contact details: {e}")
            return None
