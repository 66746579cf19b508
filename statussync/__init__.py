# Trello status sync: keeps a card's section and its status custom field in agreement
#
# Components:
#   schema.py     - Snapshot model (Board, Card, CustomField) and sync event types
#   sections.py   - Section partitioning of a list by "##" marker cards
#   fields.py     - Custom field option <-> section label lookups
#   events.py     - Webhook classification (status / position / ignored)
#   suppress.py   - Loop suppression of our own mutation echoes
#   reconciler.py - Decision logic and the end-to-end SyncEngine
#   client.py     - Trello REST transport
#   webhooks.py   - Webhook registration bootstrap
#   config.py     - YAML + environment configuration
