"""
Card view: renders one card and turns user input into intent events.

Display modes:
  normal  → editing   (click on the title)
  editing → normal    (Enter or blur commits, Escape cancels)

Every (re)render from attributes returns the view to normal mode. The view
never talks to the API; it only dispatches card-move / card-update /
card-delete events that bubble to its ancestors.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from markupsafe import Markup

from ..schema import Column
from .events import CARD_DELETE, CARD_MOVE, CARD_UPDATE, EventTarget, IntentEvent
from .render import render_card

OBSERVED_ATTRIBUTES = ("card-id", "title", "column")


class DisplayMode(Enum):
    NORMAL = "normal"
    EDITING = "editing"


@dataclass
class EditSession:
    """One inline edit. `done` guards against Enter and blur both committing."""
    original: str
    value: str
    done: bool = False


class CardView(EventTarget):
    """One kanban card on the board."""

    def __init__(self, card_id: str, title: str, column, parent: Optional[EventTarget] = None):
        super().__init__(parent)
        self._attrs = {
            "card-id": str(card_id),
            "title": title,
            "column": Column.from_str(column).value,
        }
        self.mode = DisplayMode.NORMAL
        self.dragging = False
        self._edit: Optional[EditSession] = None
        self.html: Markup = Markup("")
        self.render()

    # ── Attributes ──────────────────────────────────────────────────────────

    @property
    def card_id(self) -> str:
        return self._attrs["card-id"]

    @property
    def title(self) -> str:
        return self._attrs["title"]

    @property
    def column(self) -> Column:
        return Column(self._attrs["column"])

    def get_attribute(self, name: str) -> Optional[str]:
        return self._attrs.get(name)

    def set_attribute(self, name: str, value) -> None:
        """Change an observed attribute; any change re-renders in normal mode."""
        if name not in OBSERVED_ATTRIBUTES:
            raise KeyError(f"Unknown card attribute: {name}")
        if name == "column":
            value = Column.from_str(value).value
        self._attrs[name] = str(value)
        self.render()

    # ── Rendering ───────────────────────────────────────────────────────────

    def render(self) -> Markup:
        self.mode = DisplayMode.NORMAL
        self._edit = None
        self.html = render_card(self.card_id, self.title, self.column, dragging=self.dragging)
        return self.html

    def _render_editing(self) -> None:
        self.html = render_card(
            self.card_id, self.title, self.column,
            editing=True, draft=self._edit.value, dragging=self.dragging,
        )

    @property
    def move_left_disabled(self) -> bool:
        return self.column.previous is None

    @property
    def move_right_disabled(self) -> bool:
        return self.column.next is None

    # ── Inline edit ─────────────────────────────────────────────────────────

    def click_title(self) -> None:
        """Enter editing mode with an input pre-filled with the current title."""
        if self.mode is DisplayMode.EDITING:
            return
        self.mode = DisplayMode.EDITING
        self._edit = EditSession(original=self.title, value=self.title)
        self._render_editing()

    @property
    def draft(self) -> Optional[str]:
        return self._edit.value if self._edit else None

    def type_text(self, value: str) -> None:
        """Replace the input's value while editing."""
        if self._edit is None:
            raise RuntimeError("Card is not being edited")
        self._edit.value = value
        self._render_editing()

    def key_down(self, key: str) -> None:
        if self._edit is None:
            return
        if key == "Enter":
            self._commit()
        elif key == "Escape":
            self._cancel()

    def blur(self) -> None:
        if self._edit is not None:
            self._commit()

    def _commit(self) -> None:
        session = self._edit
        if session is None or session.done:
            return
        session.done = True
        new_title = session.value.strip()
        if new_title and new_title != session.original:
            self._emit(CARD_UPDATE, {"id": self.card_id, "title": new_title})
        # the board may already have re-rendered us; only reset our own session
        if self._edit is session:
            self.render()

    def _cancel(self) -> None:
        session = self._edit
        if session is None or session.done:
            return
        session.done = True
        self.render()

    # ── Actions ─────────────────────────────────────────────────────────────

    def click_move_left(self) -> None:
        target = self.column.previous
        if target is None:
            return  # disabled
        self._emit(CARD_MOVE, {"id": self.card_id, "column": target.value})

    def click_move_right(self) -> None:
        target = self.column.next
        if target is None:
            return  # disabled
        self._emit(CARD_MOVE, {"id": self.card_id, "column": target.value})

    def click_delete(self) -> None:
        self._emit(CARD_DELETE, {"id": self.card_id})

    def drag_start(self) -> str:
        """Begin dragging; returns the text/plain payload (the card id)."""
        self.dragging = True
        self.render()
        return self.card_id

    def drag_end(self) -> None:
        self.dragging = False
        self.render()

    def _emit(self, event_type: str, detail: dict) -> None:
        self.dispatch_event(IntentEvent(event_type, detail, bubbles=True))
