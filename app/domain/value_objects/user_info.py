from dataclasses import dataclass, field
from enum import Enum

from ..errors import ValidationError
from .email_address import EmailAddress
from .identifiers import UserId

MAX_NAME_LENGTH = 100


class UserRole(str, Enum):
    TUTOR = "tutor"
    STUDENT = "student"


@dataclass(frozen=True)
class UserInfo:
    id: UserId
    email: EmailAddress = field(compare=False)
    name: str = field(compare=False)
    role: UserRole = field(compare=False)

    def __post_init__(self):
        if not isinstance(self.name, str) or not self.name.strip():
            raise ValidationError("User name must not be empty")
        if len(self.name.strip()) > MAX_NAME_LENGTH:
            raise ValidationError(f"User name cannot exceed {MAX_NAME_LENGTH} characters")
        try:
            role = UserRole(self.role)
        except ValueError:
            raise ValidationError('User role must be "tutor" or "student"') from None
        object.__setattr__(self, "name", self.name.strip())
        object.__setattr__(self, "role", role)

    @classmethod
    def create(cls, user_id: str, email: str, name: str, role: str) -> "UserInfo":
        return cls(UserId(user_id), EmailAddress(email), name, role)

    def is_tutor(self) -> bool:
        return self.role is UserRole.TUTOR

    def is_student(self) -> bool:
        return self.role is UserRole.STUDENT

    def to_dict(self) -> dict:
        return {"id": self.id.value, "email": self.email.value, "name": self.name, "role": self.role.value}
