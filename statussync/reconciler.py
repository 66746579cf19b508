"""
Status/section reconciliation.

Reconciler decides, from a fresh board snapshot, which single mutation (if
any) brings a card's custom field and its section back in agreement:

  STATUS trigger   (card created/moved)   → field follows section
  POSITION trigger (field value changed)  → card moves to the field's section

SyncEngine wires it together for one webhook notification:
  classify → suppression check → fetch snapshot → decide → register + mutate
"""
import logging
import threading
from typing import Optional, Any

from .client import TrelloClient, TrelloAPIError
from .events import classify, translation_key
from .fields import current_option, option_for_label, option_label, same_option
from .schema import (
    Board,
    Card,
    ClassifiedEvent,
    CustomField,
    Direction,
    FieldOption,
    Mutation,
    MutationKind,
    TriggerKind,
    TrelloList,
)
from .sections import list_cards, locate, partition, section_of
from .suppress import LoopSuppressor

logger = logging.getLogger(__name__)


class Reconciler:
    """Pure decision logic over one snapshot."""

    def __init__(self, field_name: str):
        self.field_name = field_name

    def decide(self, event: ClassifiedEvent, board: Optional[Board]) -> Optional[Mutation]:
        """Mutation required for `event`, or None if the board already agrees."""
        if event.ignored or board is None or not event.card_id:
            return None

        custom_field = board.tracked_field(self.field_name)
        card = board.find_card(event.card_id)
        lst = board.find_list(card.id_list) if card else None
        if custom_field is None or card is None or lst is None:
            # Deleted or reconfigured since the notification was sent
            logger.debug(f"Card {event.card_id}: no longer relevant on board {board.id}")
            return None

        if event.kind is TriggerKind.STATUS:
            return self._status(board, lst, card, custom_field)
        return self._position(board, lst, card, custom_field)

    def _status(self, board: Board, lst: TrelloList, card: Card, custom_field: CustomField) -> Optional[Mutation]:
        cards = list_cards(board, card.id_list)
        label = partition(cards).get(card.id)
        expected = option_for_label(custom_field, label)
        current = current_option(card, custom_field)

        if expected is not None and not same_option(expected, current):
            return self._set_field(lst, card, custom_field, expected, label)
        if expected is None and current is not None:
            return self._set_field(lst, card, custom_field, None, label)
        return None

    def _position(self, board: Board, lst: TrelloList, card: Card, custom_field: CustomField) -> Optional[Mutation]:
        cards = list_cards(board, card.id_list)
        marker = section_of(cards, card)
        current = current_option(card, custom_field)
        target = locate(cards, option_label(current))

        if target.found and (marker is None or marker.id != target.marker.id):
            return Mutation(
                kind=MutationKind.MOVE,
                card=card,
                suppress=Direction.STATUS,
                message=f"List '{lst.name}': Card '{card.name}': Moved to section '{target.label}'",
                position=target.top,
            )

        if target.found:
            return None

        if marker is not None:
            # No section for the value: the section the card sits in wins
            label = marker.section_label
            section_option = option_for_label(custom_field, label)
            if not same_option(current, section_option):
                return self._set_field(lst, card, custom_field, section_option, label)
            return None

        if current is not None:
            return self._set_field(lst, card, custom_field, None, None)
        return None

    def _set_field(
        self,
        lst: TrelloList,
        card: Card,
        custom_field: CustomField,
        option: Optional[FieldOption],
        label: Optional[str],
    ) -> Mutation:
        if option is None:
            kind = MutationKind.CLEAR_FIELD
            message = f"List '{lst.name}': Card '{card.name}': Status cleared"
        else:
            kind = MutationKind.SET_FIELD
            message = f"List '{lst.name}': Card '{card.name}': Status changed to '{label}'"
        return Mutation(
            kind=kind,
            card=card,
            suppress=Direction.POSITION,
            message=message,
            custom_field=custom_field,
            option=option,
        )


class SyncEngine:
    """Handles webhook notifications end to end."""

    def __init__(self, client: TrelloClient, reconciler: Reconciler, suppressor: Optional[LoopSuppressor] = None):
        self.client = client
        self.reconciler = reconciler
        self.suppressor = suppressor if suppressor is not None else LoopSuppressor()

    def handle(self, payload: Any) -> Optional[Mutation]:
        """Reconcile one notification. Returns the mutation issued, if any."""
        event = classify(payload, self.reconciler.field_name)
        if event.ignored:
            logger.debug(f"Ignored {event.action_type or 'unknown'} / {translation_key(payload)}")
            return None

        direction = event.kind.direction
        if self.suppressor.should_suppress(event.card_id, direction):
            logger.debug(f"Card {event.card_id}: own {direction.value} echo suppressed")
            return None

        try:
            board = self.client.fetch_board(event.board_id)
        except TrelloAPIError as e:
            logger.error(f"Board {event.board_id}: fetch failed: {e}")
            return None

        mutation = self.reconciler.decide(event, board)
        if mutation is None:
            return None

        logger.info(mutation.message)
        # Registered before the call is confirmed: a failed call leaks the entry
        self.suppressor.register(mutation.card.id, mutation.suppress)
        try:
            self.apply(mutation)
        except TrelloAPIError as e:
            logger.error(f"Card {mutation.card.id}: {mutation.kind.value} failed: {e}")
        return mutation

    def apply(self, mutation: Mutation) -> None:
        if mutation.kind is MutationKind.MOVE:
            self.client.set_position(mutation.card, mutation.position)
        else:
            self.client.set_field_value(mutation.card, mutation.custom_field, mutation.option)

    def handle_async(self, payload: Any) -> threading.Thread:
        """Reconcile on a daemon thread so the webhook can be acknowledged at once."""
        thread = threading.Thread(target=self._run, args=(payload,), name="reconcile", daemon=True)
        thread.start()
        return thread

    def _run(self, payload: Any) -> None:
        try:
            self.handle(payload)
        except Exception:
            logger.exception("Unexpected error during reconciliation")
