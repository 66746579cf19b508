"""
Webhook bootstrap.

Makes the token's Trello webhooks match the configured boards: stale hooks
we created are deleted, missing ones are created.
"""
import logging
from typing import List, Dict, Any

from .client import TrelloClient

logger = logging.getLogger(__name__)

WEBHOOK_DESCRIPTION = "trello-notifications"


def setup_webhooks(
    client: TrelloClient,
    boards: List[str],
    callback_url: str,
    description: str = WEBHOOK_DESCRIPTION,
) -> List[Dict[str, Any]]:
    """Sync webhook registrations with `boards`. Returns the webhooks kept or created."""
    webhooks = []
    for webhook in client.list_webhooks():
        ours = webhook.get("description") == description
        url_match = webhook.get("callbackURL") == callback_url
        board_match = webhook.get("idModel") in boards

        if ours and (not url_match or not board_match):
            logger.info(f"Board {webhook.get('idModel')}: Deleting webhook")
            client.delete_webhook(webhook["id"])
            continue
        webhooks.append(webhook)

    for id_board in boards:
        if any(w.get("idModel") == id_board for w in webhooks):
            logger.info(f"Board {id_board}: Webhook exists")
            continue
        logger.info(f"Board {id_board}: Creating webhook")
        webhooks.append(client.create_webhook(id_board, callback_url, description))

    return webhooks
