import re
from dataclasses import dataclass

from ..errors import ValidationError

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
MAX_EMAIL_LENGTH = 254


@dataclass(frozen=True)
class EmailAddress:
    """Lower-cased, trimmed e-mail address."""

    value: str

    def __post_init__(self):
        if not isinstance(self.value, str) or not self.value.strip():
            raise ValidationError("Email address must not be empty")
        candidate = self.value.strip()
        if not EMAIL_PATTERN.match(candidate):
            raise ValidationError("Email address has an invalid format")
        if len(candidate) > MAX_EMAIL_LENGTH:
            raise ValidationError(f"Email address cannot exceed {MAX_EMAIL_LENGTH} characters")
        object.__setattr__(self, "value", candidate.lower())

    @classmethod
    def from_string(cls, value: str) -> "EmailAddress":
        return cls(value)

    @property
    def local_part(self) -> str:
        return self.value.split("@")[0]

    @property
    def domain(self) -> str:
        return self.value.split("@")[1]

    def is_in_domain(self, domain: str) -> bool:
        return self.domain == domain.lower()

    def __str__(self) -> str:
        return self.value
