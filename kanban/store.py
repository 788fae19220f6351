"""
Kanban card storage backend (in-memory).

Provides CRUD operations for Kanban cards. The store is the single source of
truth for the board; it lives for the lifetime of the process and is not
shared between app instances.
"""
import logging
import time
from typing import List, Optional, Dict, Any, Iterable

from .schema import Card, Column

logger = logging.getLogger(__name__)

PATCHABLE_FIELDS = ("title", "column")

DEFAULT_SEED = [
    {"id": "1", "title": "Observe the situation", "column": "done"},
    {"id": "2", "title": "Orient and assess options", "column": "doing"},
    {"id": "3", "title": "Decide on next action", "column": "todo"},
]


class CardNotFound(Exception):
    """Raised when no card has the requested id."""

    def __init__(self, card_id: str):
        super().__init__(f"Card {card_id} not found")
        self.card_id = card_id


class ValidationError(Exception):
    """Raised when a create/patch payload would break a card invariant."""
    pass


def clean_title(title: Any) -> str:
    """Trim a title; blank titles are rejected."""
    if not isinstance(title, str) or not title.strip():
        raise ValidationError("title is required")
    return title.strip()


class CardStore:
    """Ordered, in-memory collection of cards."""

    def __init__(self, seed: Optional[Iterable[Dict[str, Any]]] = None):
        self._cards: List[Card] = []
        self._last_id = 0
        if seed:
            self.reset(seed)

    def reset(self, seed: Iterable[Dict[str, Any]]) -> None:
        """
        Replace all cards with the given wire-form dicts.

        Seed cards are held to the same rules as created ones: a non-empty id
        unique within the store, a non-blank title and a known column. Any
        violation raises ValidationError and leaves the store unchanged.
        """
        cards: List[Card] = []
        seen = set()
        for raw in seed:
            if not isinstance(raw, dict):
                raise ValidationError(f"Seed card must be a mapping, got {raw!r}")
            card_id = str(raw.get("id") or "").strip()
            if not card_id:
                raise ValidationError(f"Seed card has no id: {raw!r}")
            if card_id in seen:
                raise ValidationError(f"Duplicate seed card id {card_id}")
            seen.add(card_id)
            cards.append(Card(
                card_id=card_id,
                title=clean_title(raw.get("title")),
                column=_parse_column(raw.get("column") or Column.TODO),
            ))
        self._cards = cards
        logger.info(f"Store seeded with {len(self._cards)} cards")

    def _next_card_id(self) -> str:
        """Millisecond timestamp id, bumped so it never repeats within the store."""
        candidate = max(int(time.time() * 1000), self._last_id + 1)
        while self.get(str(candidate)) is not None:
            candidate += 1
        self._last_id = candidate
        return str(candidate)

    def list(self) -> List[Card]:
        return list(self._cards)

    def get(self, card_id: str) -> Optional[Card]:
        for card in self._cards:
            if card.card_id == card_id:
                return card
        return None

    def create(self, title: str, column: Any = Column.TODO) -> Card:
        """Append a new card and return it. Column defaults to todo."""
        card = Card(
            card_id=self._next_card_id(),
            title=clean_title(title),
            column=_parse_column(column if column is not None else Column.TODO),
        )
        self._cards.append(card)
        logger.info(f"Created card {card.card_id} in {card.column.value}")
        return card

    def patch(self, card_id: str, fields: Dict[str, Any]) -> Card:
        """
        Merge the supplied fields into a card.

        Only title and column are patchable; any other key (including id) is
        ignored. Raises CardNotFound for an unknown id and ValidationError for
        a blank title or unknown column, in which case nothing is changed.
        """
        card = self.get(card_id)
        if card is None:
            raise CardNotFound(card_id)

        updates: Dict[str, Any] = {}
        if "title" in fields:
            updates["title"] = clean_title(fields["title"])
        if "column" in fields:
            updates["column"] = _parse_column(fields["column"])

        for name, value in updates.items():
            setattr(card, name, value)
        if updates:
            logger.info(f"Patched card {card_id}: {sorted(updates)}")
        return card

    def delete(self, card_id: str) -> bool:
        """Remove a card. Succeeds whether or not the id exists."""
        before = len(self._cards)
        self._cards = [c for c in self._cards if c.card_id != card_id]
        if len(self._cards) < before:
            logger.info(f"Deleted card {card_id}")
        else:
            logger.debug(f"Delete of unknown card {card_id} ignored")
        return True

    def __len__(self) -> int:
        return len(self._cards)


def _parse_column(value: Any) -> Column:
    try:
        return Column.from_str(value)
    except ValueError as e:
        raise ValidationError(str(e)) from None
