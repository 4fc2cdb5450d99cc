from dataclasses import dataclass, replace
from typing import Any, Iterable, Iterator, Mapping, Optional, Tuple, Union

from ..errors import ValidationError

MAX_TEXT_LENGTH = 1000


def _clean_text(value: Any, label: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{label} must not be empty")
    text = value.strip()
    if len(text) > MAX_TEXT_LENGTH:
        raise ValidationError(f"{label} cannot exceed {MAX_TEXT_LENGTH} characters")
    return text


@dataclass(frozen=True)
class TaskText:
    value: str

    def __post_init__(self):
        object.__setattr__(self, "value", _clean_text(self.value, "Task"))

    @property
    def word_count(self) -> int:
        return len(self.value.split())

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class ChecklistItem:
    description: TaskText
    completed: bool = False

    @classmethod
    def create(cls, description: str, completed: bool = False) -> "ChecklistItem":
        if not isinstance(completed, bool):
            raise ValidationError("Checklist item 'completed' flag must be a boolean")
        return cls(TaskText(description), completed)

    def mark_completed(self) -> "ChecklistItem":
        return replace(self, completed=True)

    def to_dict(self) -> dict:
        return {"description": self.description.value, "completed": self.completed}


ChecklistInput = Union[str, ChecklistItem, Mapping[str, Any]]


@dataclass(frozen=True)
class Checklist:
    """Ordered task list attached to an appointment. Replaced wholesale, never patched per item."""

    items: Tuple[ChecklistItem, ...] = ()

    @classmethod
    def empty(cls) -> "Checklist":
        return cls()

    @classmethod
    def create(cls, entries: Optional[Iterable[ChecklistInput]] = None) -> "Checklist":
        if entries is None:
            return cls()
        if isinstance(entries, (str, Mapping)):
            raise ValidationError("Checklist must be a list")
        return cls(tuple(_to_item(entry) for entry in entries))

    def __iter__(self) -> Iterator[ChecklistItem]:
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)

    def is_empty(self) -> bool:
        return not self.items

    @property
    def pending_items(self) -> Tuple[ChecklistItem, ...]:
        return tuple(i for i in self.items if not i.completed)

    @property
    def completed_items(self) -> Tuple[ChecklistItem, ...]:
        return tuple(i for i in self.items if i.completed)

    def complete_task(self, description: str) -> "Checklist":
        """Mark the matching item done, or append it as a done item."""
        task = TaskText(description)
        items = list(self.items)
        for index, item in enumerate(items):
            if item.description == task:
                items[index] = item.mark_completed()
                return Checklist(tuple(items))
        items.append(ChecklistItem(task, True))
        return Checklist(tuple(items))

    def to_list(self) -> list:
        return [item.to_dict() for item in self.items]


def _to_item(entry: ChecklistInput) -> ChecklistItem:
    if isinstance(entry, ChecklistItem):
        return entry
    if isinstance(entry, str):
        return ChecklistItem.create(entry)
    if isinstance(entry, Mapping):
        if "description" not in entry:
            raise ValidationError("Checklist item must have a description")
        return ChecklistItem.create(entry["description"], entry.get("completed", False))
    raise ValidationError("Checklist item must be a string or a {description, completed} object")


def normalize_reason(value: Optional[str]) -> Optional[str]:
    """Blank reasons clear the field."""
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError("Reason must be a string")
    if not value.strip():
        return None
    return _clean_text(value, "Reason")
