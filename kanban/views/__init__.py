from .events import CARD_DELETE, CARD_MOVE, CARD_UPDATE, EventTarget, IntentEvent
from .card import CardView, DisplayMode
from .board import BoardView

__all__ = [
    "CARD_DELETE",
    "CARD_MOVE",
    "CARD_UPDATE",
    "EventTarget",
    "IntentEvent",
    "CardView",
    "DisplayMode",
    "BoardView",
]
