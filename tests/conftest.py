"""Shared fixtures for status sync tests."""

import copy
import sys
from pathlib import Path

import pytest

# Ensure the repository root (sync_server.py, statussync/) is importable
sys.path.insert(0, str(Path(__file__).parent.parent))

from statussync.schema import Board


FIELD_NAME = "Status"

BOARD_DATA = {
    "id": "board-1",
    "name": "Sprint board",
    "lists": [
        {"id": "list-1", "name": "Sprint"},
        {"id": "list-2", "name": "Backlog"},
    ],
    "customFields": [
        {
            "id": "cf-status",
            "name": FIELD_NAME,
            "type": "list",
            "options": [
                {"id": "opt-todo", "value": {"text": "Todo"}},
                {"id": "opt-doing", "value": {"text": " Doing "}},
                {"id": "opt-done", "value": {"text": "DONE"}},
                {"id": "opt-blocked", "value": {"text": "Blocked"}},
            ],
        },
        {"id": "cf-points", "name": "Points", "type": "number"},
    ],
    "cards": [
        # Sprint: [## Todo, A, ## Doing, ## Done, B, ## Archive, C]
        {"id": "m-todo", "idList": "list-1", "name": "## Todo", "pos": 1000, "customFieldItems": []},
        {"id": "a", "idList": "list-1", "name": "A", "pos": 2000,
         "customFieldItems": [{"idCustomField": "cf-status", "idValue": "opt-todo"}]},
        {"id": "m-doing", "idList": "list-1", "name": "##  Doing", "pos": 3000, "customFieldItems": []},
        {"id": "m-done", "idList": "list-1", "name": "## Done", "pos": 4000, "customFieldItems": []},
        {"id": "b", "idList": "list-1", "name": "B", "pos": 5000, "customFieldItems": []},
        {"id": "m-archive", "idList": "list-1", "name": "## Archive", "pos": 6000, "customFieldItems": []},
        {"id": "c", "idList": "list-1", "name": "C", "pos": 7000,
         "customFieldItems": [{"idCustomField": "cf-status", "idValue": "opt-done"}]},
        # Backlog: no markers
        {"id": "x", "idList": "list-2", "name": "Loose", "pos": 100, "customFieldItems": []},
        {"id": "y", "idList": "list-2", "name": "Tagged", "pos": 200,
         "customFieldItems": [{"idCustomField": "cf-status", "idValue": "opt-blocked"}]},
    ],
}


@pytest.fixture
def board_data():
    """Raw boards/{id} response, safe to mutate per test."""
    return copy.deepcopy(BOARD_DATA)


@pytest.fixture
def board(board_data):
    return Board.from_dict(board_data)


@pytest.fixture
def make_payload():
    """Build a Trello webhook payload."""

    def _make(action_type, card_id="a", board_id="board-1", **data):
        action_data = {
            "card": {"id": card_id, "name": card_id},
            "board": {"id": board_id, "name": "Sprint board"},
        }
        action_data.update(data)
        return {
            "action": {
                "type": action_type,
                "data": action_data,
                "display": {"translationKey": f"action_{action_type}"},
            }
        }

    return _make


def select_option(board_data, card_id, option_id):
    """Select (or clear, with None) the status option of a card in raw board data."""
    for card in board_data["cards"]:
        if card["id"] == card_id:
            card["customFieldItems"] = (
                [{"idCustomField": "cf-status", "idValue": option_id}] if option_id else []
            )
            return
    raise KeyError(card_id)
