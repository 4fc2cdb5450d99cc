from typing import Optional, Protocol

from ...domain.value_objects import UserInfo


class UserDirectory(Protocol):
    def get_user(self, user_id: str) -> Optional[UserInfo]:
        ...
