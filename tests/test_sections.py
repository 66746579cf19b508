"""
Tests for section partitioning and insertion positions.
"""
from statussync.schema import Card
from statussync.sections import (
    TAIL_OFFSET,
    list_cards,
    locate,
    midpoint,
    partition,
    section_of,
)


def _cards(*entries):
    return [Card(id=name, name=name, pos=pos, id_list="l") for pos, name in entries]


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Markers
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


def test_marker_label_is_trimmed_and_casefolded():
    card = Card(id="m", name="##   In Progress  ", pos=1, id_list="l")
    assert card.is_marker
    assert card.section_label == "in progress"


def test_ordinary_card_has_no_label():
    card = Card(id="c", name="Fix # parser ##", pos=1, id_list="l")
    assert not card.is_marker
    assert card.section_label is None


def test_single_hash_is_not_a_marker():
    assert not Card(id="c", name="# Todo", pos=1, id_list="l").is_marker


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# partition() / section_of()
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


def test_partition_assigns_nearest_preceding_marker():
    """Cards inherit the label of the last marker at or before them"""
    cards = _cards((0, "Early"), (1, "## Todo"), (2, "A"), (3, "## Done"), (4, "B"))
    sections = partition(cards)
    assert sections["A"] == "todo"
    assert sections["B"] == "done"
    assert sections["Early"] is None


def test_partition_shared_position_takes_later_marker():
    """A card sharing its position with a marker belongs to that marker's section"""
    cards = _cards((1, "## Todo"), (5, "A"), (5, "## Done"), (6, "B"))
    sections = partition(cards)
    assert sections["A"] == "done"
    assert sections["## Done"] == "done"
    assert sections["B"] == "done"


def test_partition_agrees_with_section_of_on_ties():
    cards = _cards((1, "## Todo"), (2, "A"), (2, "## Doing"), (2, "B"), (3, "## Done"))
    sections = partition(cards)
    for card in cards:
        marker = section_of(cards, card)
        assert sections[card.id] == (marker.section_label if marker else None)


def test_section_of_matches_partition():
    cards = _cards((0, "Early"), (1, "## Todo"), (2, "A"), (3, "## Done"), (4, "B"))
    by_id = {c.id: c for c in cards}
    assert section_of(cards, by_id["A"]).id == "## Todo"
    assert section_of(cards, by_id["B"]).id == "## Done"
    assert section_of(cards, by_id["Early"]) is None


def test_section_of_marker_is_itself():
    cards = _cards((1, "## Todo"), (2, "A"))
    assert section_of(cards, cards[0]) is cards[0]


def test_section_of_counts_equal_positions_as_preceding():
    cards = _cards((1, "## Todo"), (5, "A"), (5, "## Done"))
    assert section_of(cards, cards[1]).id == "## Done"


def test_list_cards_filters_and_sorts(board):
    sprint = list_cards(board, "list-1")
    assert [c.id for c in sprint] == ["m-todo", "a", "m-doing", "m-done", "b", "m-archive", "c"]
    backlog = list_cards(board, "list-2")
    assert [c.id for c in backlog] == ["x", "y"]


def test_list_cards_sorts_out_of_order_input(board):
    board.cards.reverse()
    assert [c.id for c in list_cards(board, "list-2")] == ["x", "y"]


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# locate() / top
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


class TestLocate:

    def setup_method(self):
        self.cards = _cards(
            (100, "## Todo"), (200, "A"), (300, "B"),
            (400, "## Doing"),
            (500, "## Done"), (600, "C"),
        )

    def test_bounds_of_populated_section(self):
        bounds = locate(self.cards, "todo")
        assert bounds.found
        assert bounds.marker.id == "## Todo"
        assert bounds.first.id == "A"
        assert bounds.last.id == "B"
        assert bounds.next_marker.id == "## Doing"

    def test_top_of_populated_section_is_before_first_member(self):
        bounds = locate(self.cards, "todo")
        assert bounds.top == 150
        assert 100 < bounds.top < 200

    def test_top_of_empty_middle_section_is_between_markers(self):
        bounds = locate(self.cards, "doing")
        assert bounds.first is None
        assert bounds.next_marker.id == "## Done"
        assert 400 < bounds.top < 500

    def test_top_of_last_section(self):
        bounds = locate(self.cards, "done")
        assert bounds.next_marker is None
        assert bounds.top == 550

    def test_top_of_empty_last_section_uses_offset(self):
        cards = _cards((100, "## Todo"), (200, "A"), (300, "## Done"))
        assert locate(cards, "done").top == 300 + TAIL_OFFSET

    def test_unknown_label(self):
        bounds = locate(self.cards, "review")
        assert not bounds.found
        assert bounds.top is None
        assert bounds.label is None

    def test_none_label(self):
        assert not locate(self.cards, None).found

    def test_label_property(self):
        assert locate(self.cards, "doing").label == "doing"


def test_midpoint_handles_fractions():
    assert midpoint(1, 2) == 1.5
    assert 16384.5 < midpoint(16384.5, 16385) < 16385
