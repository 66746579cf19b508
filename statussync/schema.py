"""
Board snapshot schema and sync event types.

A snapshot is one consistent read of a Trello board:
  Board → lists, cards (with positions and custom field items), custom fields

Section markers are not a separate type: any card whose name starts with
"##" is a marker, and its label is the rest of the name, trimmed and
case-folded.
"""
from enum import Enum
from dataclasses import dataclass, field
from typing import Optional, List, Dict, Any


MARKER_PREFIX = "##"
LIST_FIELD_TYPE = "list"


def normalize_label(text: Optional[str]) -> Optional[str]:
    """Trim and case-fold a section label or option text."""
    if text is None:
        return None
    return text.strip().casefold()


class Direction(Enum):
    """Which representation follows the other."""
    STATUS = "status"        # field follows position
    POSITION = "position"    # position follows field


class TriggerKind(Enum):
    """Classification of an incoming webhook notification."""
    IGNORED = "ignored"
    STATUS = "status"        # card created or moved
    POSITION = "position"    # tracked custom field item changed

    @property
    def direction(self) -> Optional[Direction]:
        if self is TriggerKind.STATUS:
            return Direction.STATUS
        if self is TriggerKind.POSITION:
            return Direction.POSITION
        return None


class MutationKind(Enum):
    SET_FIELD = "set_field"
    CLEAR_FIELD = "clear_field"
    MOVE = "move"


@dataclass
class FieldOption:
    """One selectable value of a list-type custom field."""
    id: str
    text: str

    @property
    def label(self) -> Optional[str]:
        return normalize_label(self.text)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FieldOption":
        value = data.get("value") or {}
        return cls(id=data.get("id", ""), text=value.get("text", ""))


@dataclass
class CustomField:
    """Custom field definition on a board."""
    id: str
    name: str
    kind: str
    options: List[FieldOption] = field(default_factory=list)

    @property
    def is_list(self) -> bool:
        return self.kind == LIST_FIELD_TYPE

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CustomField":
        return cls(
            id=data.get("id", ""),
            name=data.get("name", ""),
            kind=data.get("type", ""),
            options=[FieldOption.from_dict(o) for o in data.get("options") or []],
        )


@dataclass
class FieldItem:
    """A card's value for one custom field."""
    id_custom_field: str
    id_value: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FieldItem":
        return cls(
            id_custom_field=data.get("idCustomField", ""),
            id_value=data.get("idValue"),
        )


@dataclass
class TrelloList:
    id: str
    name: str

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TrelloList":
        return cls(id=data.get("id", ""), name=data.get("name", ""))


@dataclass
class Card:
    """A card with its position inside its list."""
    id: str
    name: str
    pos: float
    id_list: str
    field_items: List[FieldItem] = field(default_factory=list)

    @property
    def is_marker(self) -> bool:
        return self.name.startswith(MARKER_PREFIX)

    @property
    def section_label(self) -> Optional[str]:
        """Label of the section this marker starts, None for ordinary cards."""
        if not self.is_marker:
            return None
        return normalize_label(self.name[len(MARKER_PREFIX):])

    def field_item(self, id_custom_field: str) -> Optional[FieldItem]:
        for item in self.field_items:
            if item.id_custom_field == id_custom_field:
                return item
        return None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Card":
        return cls(
            id=data.get("id", ""),
            name=data.get("name", ""),
            pos=float(data.get("pos") or 0),
            id_list=data.get("idList", ""),
            field_items=[FieldItem.from_dict(i) for i in data.get("customFieldItems") or []],
        )


@dataclass
class Board:
    """Snapshot of one board as returned by boards/{id}."""
    id: str
    name: str
    lists: List[TrelloList] = field(default_factory=list)
    cards: List[Card] = field(default_factory=list)
    custom_fields: List[CustomField] = field(default_factory=list)

    def find_card(self, card_id: str) -> Optional[Card]:
        for c in self.cards:
            if c.id == card_id:
                return c
        return None

    def find_list(self, list_id: str) -> Optional[TrelloList]:
        for lst in self.lists:
            if lst.id == list_id:
                return lst
        return None

    def tracked_field(self, name: Optional[str]) -> Optional[CustomField]:
        """The list-type custom field called `name`, if the board has one."""
        if not name:
            return None
        for f in self.custom_fields:
            if f.name == name and f.is_list:
                return f
        return None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Board":
        return cls(
            id=data.get("id", ""),
            name=data.get("name", ""),
            lists=[TrelloList.from_dict(lst) for lst in data.get("lists") or []],
            cards=[Card.from_dict(c) for c in data.get("cards") or []],
            custom_fields=[CustomField.from_dict(f) for f in data.get("customFields") or []],
        )


@dataclass(frozen=True)
class SuppressionEntry:
    """An outstanding echo of one of our own mutations."""
    card_id: str
    direction: Direction


@dataclass
class ClassifiedEvent:
    """A webhook notification reduced to what reconciliation needs."""
    kind: TriggerKind
    action_type: str = ""
    card_id: Optional[str] = None
    board_id: Optional[str] = None

    @property
    def ignored(self) -> bool:
        return self.kind is TriggerKind.IGNORED

    @classmethod
    def ignore(cls, action_type: str = "") -> "ClassifiedEvent":
        return cls(kind=TriggerKind.IGNORED, action_type=action_type)


@dataclass
class Mutation:
    """A single change to apply to the board, plus the echo to suppress."""
    kind: MutationKind
    card: Card
    suppress: Direction
    message: str = ""
    custom_field: Optional[CustomField] = None
    option: Optional[FieldOption] = None
    position: Optional[float] = None
