"""
Board view: owns the client-side card list and keeps it in step with the server.

Every mutation follows the same protocol:

    intent event → API call → update local list → full re-render

The API call always comes first, so a failed call leaves the local list
exactly as it was; the failure is shown in an error banner on the next
render instead of being rolled back. Listeners are bound once on the board
itself and card intents bubble up to it, so re-rendering never has to
re-bind anything.
"""
import logging
from typing import Any, Callable, Dict, List, Optional

from markupsafe import Markup

from ..client import CardMissing, KanbanAPIError
from ..schema import Card, Column
from .card import CardView
from .events import CARD_DELETE, CARD_MOVE, CARD_UPDATE, EventTarget, IntentEvent
from .render import render_board

logger = logging.getLogger(__name__)


class BoardView(EventTarget):
    """Three fixed columns of card views, backed by a card API client."""

    def __init__(self, client, parent: Optional[EventTarget] = None):
        super().__init__(parent)
        self.client = client
        self._cards: List[Card] = []
        self.card_views: List[CardView] = []
        self.loading = False
        self.mounted = False
        self.error: Optional[str] = None
        self.render_count = 0
        self._adding: Optional[Column] = None
        self._new_title = ""
        self._drag_over: Optional[Column] = None
        self._bind_events()

    def _bind_events(self) -> None:
        self.add_event_listener(CARD_MOVE, self._on_move)
        self.add_event_listener(CARD_UPDATE, self._on_update)
        self.add_event_listener(CARD_DELETE, self._on_delete)

    # ── Lifecycle ───────────────────────────────────────────────────────────

    def mount(self) -> None:
        """Show the loading state, fetch every card once, then render."""
        self.loading = True
        try:
            self._cards = list(self.client.list_cards())
            self.error = None
        except KanbanAPIError as e:
            logger.warning(f"Initial card fetch failed: {e}")
            self._cards = []
            self.error = f"Could not load cards: {e}"
        finally:
            self.loading = False
        self.mounted = True
        self.render()

    def render(self) -> Markup:
        """Full re-render: rebuild every card view and hide every add form."""
        for view in self.card_views:
            view.parent = None
        self.card_views = [
            CardView(card.card_id, card.title, card.column, parent=self)
            for card in self._cards
        ]
        self._adding = None
        self._new_title = ""
        self._drag_over = None
        self.render_count += 1
        return self.html

    @property
    def html(self) -> Markup:
        if self.loading or not self.mounted:
            return render_board(loading=True)
        columns = [
            (col, [view.html for view in self.cards_in(col)])
            for col in Column.ordered()
        ]
        return render_board(
            columns,
            error=self.error,
            adding=self._adding,
            new_title=self._new_title,
            drag_over=self._drag_over,
        )

    # ── Queries ─────────────────────────────────────────────────────────────

    @property
    def cards(self) -> List[Card]:
        return [Card(c.card_id, c.title, c.column) for c in self._cards]

    def cards_in(self, column) -> List[CardView]:
        column = Column.from_str(column)
        return [view for view in self.card_views if view.column is column]

    def column_counts(self) -> Dict[Column, int]:
        return {col: len(self.cards_in(col)) for col in Column.ordered()}

    def card_view(self, card_id: str) -> Optional[CardView]:
        for view in self.card_views:
            if view.card_id == card_id:
                return view
        return None

    def _find(self, card_id: str) -> Optional[Card]:
        for card in self._cards:
            if card.card_id == card_id:
                return card
        return None

    # ── Intent handlers ─────────────────────────────────────────────────────

    def _on_move(self, event: IntentEvent) -> None:
        card_id, column = event.detail["id"], event.detail["column"]
        updated = self._call(f"move card {card_id}", lambda: self.client.update_card(card_id, column=column), card_id)
        if updated is not None:
            self._replace(card_id, updated)
        self.render()

    def _on_update(self, event: IntentEvent) -> None:
        card_id, title = event.detail["id"], event.detail["title"]
        updated = self._call(f"rename card {card_id}", lambda: self.client.update_card(card_id, title=title), card_id)
        if updated is not None:
            self._replace(card_id, updated)
        self.render()

    def _on_delete(self, event: IntentEvent) -> None:
        card_id = event.detail["id"]
        if self._call(f"delete card {card_id}", lambda: self.client.delete_card(card_id)) is not None:
            self._cards = [c for c in self._cards if c.card_id != card_id]
        self.render()

    def _call(self, action: str, request: Callable[[], Any], card_id: Optional[str] = None) -> Any:
        """Run one API call; on failure record the error and return None."""
        try:
            result = request()
        except CardMissing as e:
            logger.warning(f"Could not {action}: {e}")
            if card_id is not None:
                # the server no longer has it; stop showing it
                self._cards = [c for c in self._cards if c.card_id != card_id]
            self.error = f"Could not {action}: it no longer exists"
            return None
        except KanbanAPIError as e:
            logger.warning(f"Could not {action}: {e}")
            self.error = f"Could not {action}: {e}"
            return None
        self.error = None
        return result

    def _replace(self, card_id: str, updated: Card) -> None:
        self._cards = [updated if c.card_id == card_id else c for c in self._cards]

    # ── Add form ────────────────────────────────────────────────────────────

    def open_add_form(self, column) -> None:
        """Reveal the add form of one column (only one is open at a time)."""
        self._adding = Column.from_str(column)
        self._new_title = ""

    @property
    def add_form_column(self) -> Optional[Column]:
        return self._adding

    def type_new_title(self, value: str) -> None:
        if self._adding is None:
            raise RuntimeError("No add form is open")
        self._new_title = value

    def add_form_key(self, key: str) -> None:
        if self._adding is None:
            return
        title = self._new_title.strip()
        if key == "Enter" and title:
            self.add_card(title, self._adding)
        elif key == "Escape":
            self.render()

    def add_card(self, title: str, column) -> None:
        column = Column.from_str(column)
        created = self._call("add card", lambda: self.client.create_card(title, column))
        if created is not None:
            self._cards.append(created)
        self.render()

    # ── Drag and drop ───────────────────────────────────────────────────────

    def drag_over(self, column) -> None:
        self._drag_over = Column.from_str(column)

    def drag_leave(self) -> None:
        self._drag_over = None

    @property
    def drag_over_column(self) -> Optional[Column]:
        return self._drag_over

    def drop(self, card_id: str, column) -> None:
        """Dropping onto a different column funnels into the card-move path."""
        self._drag_over = None
        target = Column.from_str(column)
        card = self._find(card_id)
        if card is None or card.column is target:
            return
        self.dispatch_event(IntentEvent(CARD_MOVE, {"id": card_id, "column": target.value}, bubbles=False))
