"""
Section partitioning of a list.

A list is split into sections by marker cards ("## Todo", "## Done", ...).
Every card belongs to the section of the nearest marker at or before its
position; cards above the first marker have no section. Sections are always
derived from the cards of a fresh snapshot and never cached.
"""
from dataclasses import dataclass
from itertools import groupby
from typing import Optional, List, Dict

from .schema import Board, Card

# Offset used when appending after the last marker of a list
TAIL_OFFSET = 10000


def midpoint(a: float, b: float) -> float:
    return a + (b - a) / 2


def list_cards(board: Board, id_list: str) -> List[Card]:
    """Cards of one list, sorted by position."""
    return sorted(
        (c for c in board.cards if c.id_list == id_list),
        key=lambda c: c.pos,
    )


def partition(cards: List[Card]) -> Dict[str, Optional[str]]:
    """
    Map each card id to the label of its enclosing section (or None).

    Cards sharing a position share a section: the last marker at that
    position counts as preceding all of them.
    """
    sections: Dict[str, Optional[str]] = {}
    current: Optional[str] = None
    for _, group in groupby(cards, key=lambda c: c.pos):
        group = list(group)
        for card in group:
            if card.is_marker:
                current = card.section_label
        for card in group:
            sections[card.id] = current
    return sections


def section_of(cards: List[Card], card: Card) -> Optional[Card]:
    """Marker card that starts the section containing `card`."""
    marker = None
    for c in cards:
        if c.pos > card.pos:
            break
        if c.is_marker:
            marker = c
    return marker


@dataclass
class SectionBounds:
    """Structural neighbours of one section inside a sorted list."""
    marker: Optional[Card] = None
    first: Optional[Card] = None
    last: Optional[Card] = None  # informational; insertion always uses top
    next_marker: Optional[Card] = None

    @property
    def found(self) -> bool:
        return self.marker is not None

    @property
    def label(self) -> Optional[str]:
        return self.marker.section_label if self.marker else None

    @property
    def top(self) -> Optional[float]:
        """Position right after the marker, ahead of the section's members."""
        if self.marker is None:
            return None
        if self.first is not None:
            return midpoint(self.marker.pos, self.first.pos)
        if self.next_marker is not None:
            return midpoint(self.marker.pos, self.next_marker.pos)
        return self.marker.pos + TAIL_OFFSET


def locate(cards: List[Card], label: Optional[str]) -> SectionBounds:
    """
    Find the section called `label` in a sorted list of cards.

    Returns empty bounds when `label` is None or no marker carries it.
    """
    bounds = SectionBounds()
    if label is None:
        return bounds

    for card in cards:
        section = card.section_label
        if section is not None:
            if section == label:
                bounds.marker = card
                continue
            if bounds.marker is not None:
                bounds.next_marker = card
                break

        if bounds.marker is not None:
            if bounds.first is None:
                bounds.first = card
            bounds.last = card

    return bounds
