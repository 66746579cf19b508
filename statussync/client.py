"""
Trello REST transport.

Thin wrapper over requests: authenticates every call with key/token, raises
TrelloAPIError on any non-success response or network failure. No retries.
"""
import logging
from typing import Optional, Dict, Any, List

import requests

from .schema import Board, Card, CustomField, FieldOption

logger = logging.getLogger(__name__)

API_URL = "https://api.trello.com/1"
DEFAULT_TIMEOUT = 10

# Everything a reconciliation needs in one read
BOARD_SNAPSHOT_PARAMS = {
    "fields": "id,name",
    "cards": "visible",
    "card_fields": "id,idList,name,pos",
    "card_customFieldItems": "true",
    "lists": "open",
    "list_fields": "id,name",
    "customFields": "true",
}


class TrelloAPIError(Exception):
    """Raised when a Trello call fails."""

    def __init__(self, message: str, status_code: Optional[int] = None, response_text: Optional[str] = None):
        self.status_code = status_code
        self.response_text = response_text
        super().__init__(message)


class TrelloClient:
    """Authenticated access to the Trello API."""

    def __init__(
        self,
        key: str,
        token: str,
        base_url: str = API_URL,
        timeout: float = DEFAULT_TIMEOUT,
        session: Optional[requests.Session] = None,
    ):
        self.key = key
        self.token = token
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        # Without a session every call is a standalone requests.request
        self.session = session

    def request(
        self,
        endpoint: str,
        method: str = "GET",
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Dict[str, Any]] = None,
    ) -> Any:
        url = f"{self.base_url}/{endpoint.lstrip('/')}"
        query = {"key": self.key, "token": self.token}
        if params:
            query.update(params)

        requester = self.session or requests
        try:
            response = requester.request(
                method, url, params=query, json=json, timeout=self.timeout
            )
        except requests.RequestException as e:
            raise TrelloAPIError(f"Trello: {method} {endpoint} failed: {e}") from e

        if not response.ok:
            raise TrelloAPIError(
                f"Trello: {method} {endpoint} returned {response.status_code}: {response.text[:200]}",
                status_code=response.status_code,
                response_text=response.text,
            )

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise TrelloAPIError(
                f"Trello: {method} {endpoint} returned invalid JSON",
                status_code=response.status_code,
                response_text=response.text,
            ) from e

    # ── Reads ────────────────────────────────────────────────────────────────

    def fetch_board(self, board_id: str) -> Board:
        """Fresh snapshot of a board: lists, cards, custom fields and items."""
        data = self.request(f"boards/{board_id}", params=BOARD_SNAPSHOT_PARAMS)
        return Board.from_dict(data or {})

    def list_boards(self) -> List[Dict[str, Any]]:
        return self.request("members/me/boards", params={"fields": "id,name"}) or []

    # ── Mutations ────────────────────────────────────────────────────────────

    def set_field_value(self, card: Card, custom_field: CustomField, option: Optional[FieldOption]) -> Any:
        """Select `option` on the card, or clear the field when option is None."""
        return self.request(
            f"card/{card.id}/customField/{custom_field.id}/item",
            method="PUT",
            json={"idValue": option.id if option else ""},
        )

    def set_position(self, card: Card, pos: float) -> Any:
        return self.request(f"cards/{card.id}", method="PUT", params={"pos": pos})

    # ── Webhooks ─────────────────────────────────────────────────────────────

    def list_webhooks(self) -> List[Dict[str, Any]]:
        return self.request(f"tokens/{self.token}/webhooks") or []

    def create_webhook(self, id_model: str, callback_url: str, description: str) -> Dict[str, Any]:
        return self.request(
            f"tokens/{self.token}/webhooks",
            method="POST",
            params={
                "description": description,
                "idModel": id_model,
                "callbackURL": callback_url,
                "active": "true",
            },
        )

    def delete_webhook(self, webhook_id: str) -> Any:
        return self.request(f"webhooks/{webhook_id}", method="DELETE")
