"""
Webhook classification.

Trello posts every board action to the webhook. Only two shapes matter:

  createCard / updateCard touching pos or idList  → STATUS (field follows position)
  updateCustomFieldItem on the tracked list field → POSITION (position follows field)

Everything else, including payloads that do not look like a Trello action,
is IGNORED. Classification never raises.
"""
from typing import Optional, Dict, Any

from .schema import ClassifiedEvent, TriggerKind, LIST_FIELD_TYPE

CREATE_CARD = "createCard"
UPDATE_CARD = "updateCard"
UPDATE_CUSTOM_FIELD_ITEM = "updateCustomFieldItem"

# Keys of action.data.old that mean the card changed place
POSITION_KEYS = ("pos", "idList")


def _dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _id(value: Any) -> Optional[str]:
    ident = _dict(value).get("id")
    return ident if isinstance(ident, str) and ident else None


def _kind(action_type: str, data: Dict[str, Any], field_name: Optional[str]) -> TriggerKind:
    if action_type == CREATE_CARD:
        return TriggerKind.STATUS

    if action_type == UPDATE_CARD:
        old = _dict(data.get("old"))
        if any(key in old for key in POSITION_KEYS):
            return TriggerKind.STATUS
        return TriggerKind.IGNORED

    if action_type == UPDATE_CUSTOM_FIELD_ITEM and field_name:
        custom_field = _dict(data.get("customField"))
        if custom_field.get("name") == field_name and custom_field.get("type") == LIST_FIELD_TYPE:
            return TriggerKind.POSITION

    return TriggerKind.IGNORED


def classify(payload: Any, field_name: Optional[str]) -> ClassifiedEvent:
    """Reduce a webhook payload to a ClassifiedEvent."""
    action = _dict(_dict(payload).get("action"))
    action_type = action.get("type")
    if not isinstance(action_type, str):
        return ClassifiedEvent.ignore()

    data = _dict(action.get("data"))
    kind = _kind(action_type, data, field_name)
    if kind is TriggerKind.IGNORED:
        return ClassifiedEvent.ignore(action_type)

    card_id = _id(data.get("card"))
    board_id = _id(data.get("board"))
    if not card_id or not board_id:
        return ClassifiedEvent.ignore(action_type)

    return ClassifiedEvent(
        kind=kind,
        action_type=action_type,
        card_id=card_id,
        board_id=board_id,
    )


def translation_key(payload: Any) -> str:
    """action.display.translationKey, used for log lines only."""
    display = _dict(_dict(_dict(payload).get("action")).get("display"))
    key = display.get("translationKey")
    return key if isinstance(key, str) else ""
