"""
HTTP client for the card API.

Used by the board view for every round trip. Idempotent requests (GET and
DELETE) are retried with exponential backoff; every request has a timeout.
Any failure surfaces as KanbanAPIError so callers have one thing to catch.
"""
import logging
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from .schema import Card, Column

logger = logging.getLogger(__name__)

RETRY_METHODS = frozenset({"GET", "DELETE"})
RETRY_STATUSES = (502, 503, 504)


class KanbanAPIError(Exception):
    """A card API call failed (network, timeout, HTTP error or bad body)."""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


class CardMissing(KanbanAPIError):
    """The server no longer has the card (HTTP 404)."""
    pass


def build_session(max_retries: int = 2, backoff_factor: float = 0.2) -> requests.Session:
    """Session with retry/backoff mounted for http and https."""
    retry = Retry(
        total=max_retries,
        connect=max_retries,
        read=max_retries,
        status=max_retries,
        backoff_factor=backoff_factor,
        status_forcelist=RETRY_STATUSES,
        allowed_methods=RETRY_METHODS,
        raise_on_status=False,
    )
    adapter = HTTPAdapter(max_retries=retry)
    session = requests.Session()
    session.mount("http://", adapter)
    session.mount("https://", adapter)
    session.headers.update({"Accept": "application/json"})
    return session


class KanbanClient:
    """Thin wrapper over /api/cards returning Card objects."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 5.0,
        max_retries: int = 2,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or build_session(max_retries)

    @classmethod
    def from_config(cls, cfg) -> "KanbanClient":
        return cls(cfg.api_url, timeout=cfg.request_timeout, max_retries=cfg.max_retries)

    def _request(self, method: str, path: str, payload: Optional[Dict[str, Any]] = None) -> Any:
        url = f"{self.base_url}{path}"
        try:
            resp = self.session.request(method, url, json=payload, timeout=self.timeout)
        except requests.RequestException as e:
            logger.warning(f"{method} {path} failed: {e}")
            raise KanbanAPIError(f"{method} {path} failed: {e}") from e

        if resp.status_code == 404:
            raise CardMissing(f"{method} {path}: not found", status=404)
        if not resp.ok:
            logger.warning(f"{method} {path} returned {resp.status_code}")
            raise KanbanAPIError(
                f"{method} {path} returned {resp.status_code}: {_error_message(resp)}",
                status=resp.status_code,
            )
        try:
            return resp.json()
        except ValueError as e:
            raise KanbanAPIError(f"{method} {path}: invalid JSON body", status=resp.status_code) from e

    def list_cards(self) -> List[Card]:
        data = self._request("GET", "/api/cards")
        if not isinstance(data, list):
            raise KanbanAPIError("GET /api/cards: expected a list")
        return [_parse_card(raw) for raw in data]

    def create_card(self, title: str, column: Column = Column.TODO) -> Card:
        data = self._request("POST", "/api/cards", {"title": title, "column": Column.from_str(column).value})
        return _parse_card(data)

    def update_card(self, card_id: str, **fields: Any) -> Card:
        """PATCH title and/or column. Column may be a Column or its wire value."""
        payload = dict(fields)
        if "column" in payload:
            payload["column"] = Column.from_str(payload["column"]).value
        data = self._request("PATCH", _card_path(card_id), payload)
        return _parse_card(data)

    def delete_card(self, card_id: str) -> bool:
        data = self._request("DELETE", _card_path(card_id))
        return bool(isinstance(data, dict) and data.get("success"))


def _parse_card(raw: Any) -> Card:
    if not isinstance(raw, dict) or "id" not in raw:
        raise KanbanAPIError(f"Malformed card in response: {raw!r}")
    try:
        return Card.from_dict(raw)
    except ValueError as e:
        raise KanbanAPIError(str(e)) from e


def _error_message(resp: requests.Response) -> str:
    try:
        body = resp.json()
    except ValueError:
        return resp.text[:200]
    if isinstance(body, dict) and body.get("error"):
        return str(body["error"])
    return str(body)[:200]


def _card_path(card_id: str) -> str:
    return f"/api/cards/{quote(str(card_id), safe='')}"
