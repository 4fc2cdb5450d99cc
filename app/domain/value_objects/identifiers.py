import secrets
import string
from dataclasses import dataclass

from .. import clock
from ..errors import ValidationError

_BASE36 = string.digits + string.ascii_lowercase


def _to_base36(number: int) -> str:
    if number == 0:
        return "0"
    digits = []
    while number:
        number, rem = divmod(number, 36)
        digits.append(_BASE36[rem])
    return "".join(reversed(digits))


@dataclass(frozen=True)
class AppointmentId:
    value: str

    MIN_LENGTH = 5
    MAX_LENGTH = 64

    def __post_init__(self):
        if not isinstance(self.value, str) or not self.value.strip():
            raise ValidationError("Appointment id must not be empty")
        if len(self.value) < self.MIN_LENGTH:
            raise ValidationError(f"Appointment id must be at least {self.MIN_LENGTH} characters long")
        if len(self.value) > self.MAX_LENGTH:
            raise ValidationError(f"Appointment id cannot exceed {self.MAX_LENGTH} characters")

    @classmethod
    def generate(cls) -> "AppointmentId":
        # random part first, then the creation time in base36
        millis = int(clock.now().timestamp() * 1000)
        random_part = "".join(secrets.choice(_BASE36) for _ in range(11))
        return cls(f"{random_part}{_to_base36(millis)}")

    @classmethod
    def from_string(cls, value: str) -> "AppointmentId":
        return cls(value)

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class UserId:
    value: str

    MIN_LENGTH = 3
    MAX_LENGTH = 64

    def __post_init__(self):
        if not isinstance(self.value, str) or not self.value.strip():
            raise ValidationError("User id must not be empty")
        if len(self.value) < self.MIN_LENGTH:
            raise ValidationError(f"User id must be at least {self.MIN_LENGTH} characters long")
        if len(self.value) > self.MAX_LENGTH:
            raise ValidationError(f"User id cannot exceed {self.MAX_LENGTH} characters")

    @classmethod
    def from_string(cls, value: str) -> "UserId":
        return cls(value)

    def __str__(self) -> str:
        return self.value
