#!/usr/bin/env python3
"""
Trello Status Sync Server
--------------------------
Receives Trello webhooks and keeps each card's section (position under a
"## Section" marker card) and its status custom field in sync.

Usage:
    export TRELLO_KEY=... TRELLO_TOKEN=...
    python sync_server.py --config config.yaml

Access:
    Trello must reach <base_url>/webhook; base_url comes from the config.

API:
    GET  /          → Help (HTML)
    GET  /boards    → JSON: [{ id, name }] boards visible to the token
    HEAD /webhook   → 200, used by Trello to validate the callback URL
    POST /webhook   → Trello webhook; acknowledged at once, reconciled in background
    GET  /health    → JSON: { status, boards, field, pending_suppressions }

Add ?pretty to any JSON endpoint for indented output.
"""

import logging
import sys

from flask import Flask, Response, current_app, jsonify, request

from statussync.client import TrelloClient, TrelloAPIError
from statussync.config import SyncConfig, ConfigError
from statussync.reconciler import Reconciler, SyncEngine
from statussync.suppress import LoopSuppressor
from statussync.webhooks import setup_webhooks

logger = logging.getLogger(__name__)

HELP_HTML = """
<h1>Trello Status Sync</h1>
<p>Use 'pretty' uri parameter to output prettified json</p>
<p><b>GET /</b><br>Help</p>
<p><b>GET /boards</b><br>List available boards</p>
<p><b>GET /health</b><br>Service status</p>
<p><b>POST /webhook</b><br>Incoming Trello webhooks</p>
"""


def json_response(data, status: int = 200) -> Response:
    """JSON response, indented when the 'pretty' query parameter is present."""
    if "pretty" in request.args:
        return current_app.response_class(
            current_app.json.dumps(data, indent=2),
            status=status,
            mimetype="application/json",
        )
    resp = jsonify(data)
    resp.status_code = status
    return resp


def create_app(
    config: SyncConfig,
    client: TrelloClient = None,
    engine: SyncEngine = None,
) -> Flask:
    """Build the Flask app. Tests pass their own client/engine."""
    if client is None:
        client = TrelloClient(config.key, config.token, timeout=config.timeout)
    if engine is None:
        engine = SyncEngine(
            client,
            Reconciler(config.field_name),
            LoopSuppressor(config.max_pending),
        )

    app = Flask(__name__)
    app.config["SYNC"] = config
    app.extensions["statussync"] = engine

    # ── Routes ───────────────────────────────────────────────────────────────

    @app.route("/")
    def index():
        return HELP_HTML

    @app.route("/boards")
    def boards():
        try:
            return json_response(client.list_boards())
        except TrelloAPIError as e:
            logger.error(f"Listing boards failed: {e}")
            return json_response({"error": str(e)}, 502)

    @app.route("/webhook", methods=["HEAD"])
    def webhook_head():
        return Response(status=200)

    @app.route("/webhook", methods=["POST"])
    def webhook():
        payload = request.get_json(force=True, silent=True)
        if payload is None:
            logger.debug("Webhook without JSON body ignored")
        else:
            engine.handle_async(payload)
        return Response(status=200)

    @app.route("/health")
    def health():
        return json_response({
            "status": "ok",
            "boards": config.boards,
            "field": config.field_name,
            "pending_suppressions": len(engine.suppressor),
        })

    return app


def setup_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(asctime)s [statussync] %(levelname)s: %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )


# ── Main ─────────────────────────────────────────────────────────────────────

def main(argv=None) -> int:
    import argparse

    parser = argparse.ArgumentParser(description="Trello Status Sync Server")
    parser.add_argument("--config", help="Path to config.yaml (default: ./config.yaml)")
    parser.add_argument("--host", help="Bind address (overrides server.host)")
    parser.add_argument("--port", type=int, help="Port (overrides server.port)")
    parser.add_argument("--skip-webhooks", action="store_true",
                        help="Do not register/deregister Trello webhooks at startup")
    args = parser.parse_args(argv)

    try:
        config = SyncConfig.load(args.config)
    except ConfigError as e:
        print(f"Config error: {e}", file=sys.stderr)
        return 1

    if args.host:
        config.host = args.host
    if args.port:
        config.port = args.port

    setup_logging(config.log_level)

    client = TrelloClient(config.key, config.token, timeout=config.timeout)
    if not args.skip_webhooks:
        try:
            setup_webhooks(client, config.boards, config.callback_url, config.webhook_description)
        except TrelloAPIError as e:
            logger.error(f"Webhook setup failed: {e}")
            return 1

    app = create_app(config, client=client)
    logger.info(f"Listening on {config.host}:{config.port}")
    app.run(host=config.host, port=config.port, debug=False, threaded=True)
    return 0


if __name__ == "__main__":
    sys.exit(main())
