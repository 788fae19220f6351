"""Shared test fixtures for the kanban server and views."""

import sys
from pathlib import Path

import pytest

# Ensure the repo root (kanban/ and kanban_server.py) is importable
sys.path.insert(0, str(Path(__file__).parent.parent))

from kanban.client import CardMissing, KanbanAPIError
from kanban.schema import Card
from kanban.store import CardNotFound, CardStore
from kanban_server import create_app

SEED = [
    {"id": "1", "title": "A", "column": "todo"},
    {"id": "2", "title": "B", "column": "doing"},
    {"id": "3", "title": "C", "column": "done"},
]


class StoreClient:
    """In-process stand-in for KanbanClient, backed by a CardStore.

    Set `fail_next` to an exception to make the next call raise it.
    """

    def __init__(self, store: CardStore):
        self.store = store
        self.calls = []
        self.fail_next = None

    def _check(self, name, *args):
        self.calls.append((name,) + args)
        if self.fail_next is not None:
            exc, self.fail_next = self.fail_next, None
            raise exc

    def list_cards(self):
        self._check("list")
        return [_copy(card) for card in self.store.list()]

    def create_card(self, title, column):
        self._check("create", title, column)
        return _copy(self.store.create(title, column))

    def update_card(self, card_id, **fields):
        self._check("update", card_id, fields)
        try:
            return _copy(self.store.patch(card_id, fields))
        except CardNotFound as e:
            raise CardMissing(str(e), status=404) from e

    def delete_card(self, card_id):
        self._check("delete", card_id)
        return self.store.delete(card_id)


def _copy(card):
    return Card(card.card_id, card.title, card.column)


@pytest.fixture
def store():
    return CardStore(SEED)


@pytest.fixture
def app(store):
    app = create_app(store=store)
    app.config["TESTING"] = True
    return app


@pytest.fixture
def http(app):
    return app.test_client()


@pytest.fixture
def store_client(store):
    return StoreClient(store)


@pytest.fixture
def network_error():
    return KanbanAPIError("GET /api/cards failed: connection refused")
