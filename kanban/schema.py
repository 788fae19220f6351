"""
Kanban card schema.

Workflow columns:
  To Do → Doing → Done

A card is a plain record; the server-side store owns it and clients only
hold copies that are refreshed from API responses.
"""
from enum import Enum
from dataclasses import dataclass
from typing import Dict, Any, List


class Column(Enum):
    """The three fixed workflow stages, in display order."""
    TODO = "todo"
    DOING = "doing"
    DONE = "done"

    @classmethod
    def from_str(cls, value: str) -> "Column":
        """Parse a wire value. Raises ValueError for anything outside the enum."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValueError(f"Invalid column: {value!r}") from None

    @classmethod
    def ordered(cls) -> List["Column"]:
        return list(cls)

    @property
    def label(self) -> str:
        return _LABELS[self]

    @property
    def index(self) -> int:
        return Column.ordered().index(self)

    @property
    def previous(self) -> "Column | None":
        """Column to the left, or None for the first column."""
        if self.index == 0:
            return None
        return Column.ordered()[self.index - 1]

    @property
    def next(self) -> "Column | None":
        """Column to the right, or None for the last column."""
        columns = Column.ordered()
        if self.index == len(columns) - 1:
            return None
        return columns[self.index + 1]


_LABELS = {
    Column.TODO: "To Do",
    Column.DOING: "Doing",
    Column.DONE: "Done",
}


@dataclass
class Card:
    """One kanban task."""

    card_id: str                   # Opaque, assigned by the server
    title: str
    column: Column = Column.TODO

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the wire form: {id, title, column}."""
        return {
            "id": self.card_id,
            "title": self.title,
            "column": self.column.value,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Card":
        """Deserialize from the wire form."""
        return cls(
            card_id=str(data.get("id", "")),
            title=data.get("title", ""),
            column=Column.from_str(data.get("column") or Column.TODO.value),
        )
