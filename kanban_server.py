#!/usr/bin/env python3
"""
Kanban Server
-------------
Serves the Kanban web UI and a JSON API backed by an in-memory card store.

Usage:
    python kanban_server.py
    python kanban_server.py --port 8080 --config kanban.yaml
    kanban-server --host 0.0.0.0

Access:
    Local:  http://localhost:3000

API:
    GET    /                 → Kanban UI (HTML, board rendered server-side)
    GET    /board            → Board HTML fragment (used for partial refresh)
    GET    /health           → JSON: { status, cards }
    GET    /api/cards        → JSON: [ {id, title, column}, ... ]
    POST   /api/cards        → JSON body: { title, column? }   → 201 card
    PATCH  /api/cards/<id>   → JSON body: { title?, column? }  → 200 card | 404
    DELETE /api/cards/<id>   → JSON: { success: true }  (also for unknown ids)
"""

import argparse
import logging
from pathlib import Path
from typing import Optional

from flask import Flask, current_app, jsonify, request, url_for

from kanban.config import Config, ConfigError, configure_logging
from kanban.store import CardNotFound, CardStore, ValidationError
from kanban.views.render import render_board_for, render_page

logger = logging.getLogger("kanban.server")

STATIC_DIR = Path(__file__).parent / "kanban" / "static"
STORE_KEY = "kanban_store"


def get_store() -> CardStore:
    return current_app.extensions[STORE_KEY]


def _json_body() -> dict:
    data = request.get_json(force=True, silent=True)
    return data if isinstance(data, dict) else {}


def create_app(config: Optional[Config] = None, store: Optional[CardStore] = None) -> Flask:
    """Build an app with its own card store (seeded from config unless one is given)."""
    cfg = config or Config()
    app = Flask(__name__, static_folder=str(STATIC_DIR), static_url_path="/static")
    app.config["KANBAN"] = cfg
    if store is None:
        try:
            store = CardStore(cfg.seed_cards)
        except ValidationError as e:
            raise ConfigError(f"Invalid seed_cards: {e}") from e
    app.extensions[STORE_KEY] = store

    # ── CORS ─────────────────────────────────────────────────────────────────

    @app.before_request
    def api_preflight():
        if request.method == "OPTIONS" and request.path.startswith("/api/"):
            return "", 204

    @app.after_request
    def api_cors_headers(response):
        if not request.path.startswith("/api/"):
            return response
        origins = cfg.cors_origins or []
        origin = request.headers.get("Origin", "")
        if "*" in origins:
            response.headers["Access-Control-Allow-Origin"] = "*"
        elif origin in origins:
            response.headers["Access-Control-Allow-Origin"] = origin
            response.headers["Vary"] = "Origin"
        response.headers["Access-Control-Allow-Methods"] = "GET, POST, PATCH, DELETE, OPTIONS"
        response.headers["Access-Control-Allow-Headers"] = "Content-Type"
        return response

    # ── Errors ───────────────────────────────────────────────────────────────

    @app.errorhandler(CardNotFound)
    def card_not_found(e):
        return jsonify({"error": "Not found"}), 404

    @app.errorhandler(ValidationError)
    def invalid_card(e):
        app.logger.info(f"Rejected {request.method} {request.path}: {e}")
        return jsonify({"error": str(e)}), 400

    @app.errorhandler(404)
    def not_found(e):
        if request.path.startswith("/api/"):
            return jsonify({"error": "Not found"}), 404
        return e

    # ── UI ───────────────────────────────────────────────────────────────────

    @app.route("/")
    def index():
        board = render_board_for(get_store().list())
        return render_page(
            board,
            script_url=url_for("static", filename="kanban.js"),
            stylesheet_url=url_for("static", filename="kanban.css"),
        )

    @app.route("/board")
    def board_fragment():
        return render_board_for(get_store().list())

    @app.route("/health")
    def health():
        return jsonify({"status": "ok", "cards": len(get_store())})

    # ── Card API ─────────────────────────────────────────────────────────────

    @app.route("/api/cards", methods=["GET"])
    def api_list_cards():
        return jsonify([card.to_dict() for card in get_store().list()])

    @app.route("/api/cards", methods=["POST"])
    def api_create_card():
        data = _json_body()
        card = get_store().create(data.get("title"), data.get("column"))
        return jsonify(card.to_dict()), 201

    @app.route("/api/cards/<card_id>", methods=["PATCH"])
    def api_patch_card(card_id):
        card = get_store().patch(card_id, _json_body())
        return jsonify(card.to_dict())

    @app.route("/api/cards/<card_id>", methods=["DELETE"])
    def api_delete_card(card_id):
        get_store().delete(card_id)
        return jsonify({"success": True})

    return app


# ── Main ─────────────────────────────────────────────────────────────────────

def main(argv=None) -> None:
    parser = argparse.ArgumentParser(description="Kanban Server")
    parser.add_argument("--host", help="Bind address (use 0.0.0.0 to expose on network)")
    parser.add_argument("--port", type=int)
    parser.add_argument("--config", help="Path to kanban.yaml (overrides KANBAN_CONFIG env var)")
    parser.add_argument("--log-level", help="DEBUG, INFO, WARNING, ...")
    args = parser.parse_args(argv)

    cfg = Config.load(args.config)
    if args.host:
        cfg.host = args.host
    if args.port:
        cfg.port = args.port
    if args.log_level:
        cfg.log_level = args.log_level
    configure_logging(cfg.log_level)

    app = create_app(cfg)
    logger.info(f"Server running at http://{cfg.host}:{cfg.port}")

    print(f"""
╔═══════════════════════════════════════╗
║  Kanban Server                        ║
╠═══════════════════════════════════════╣
║  URL:   http://{cfg.host}:{cfg.port:<18}║
║  Cards: {len(app.extensions[STORE_KEY]):<30}║
╚═══════════════════════════════════════╝
""")

    # The store has no locking; keep request handling single-threaded.
    app.run(host=cfg.host, port=cfg.port, debug=False, threaded=False)


if __name__ == "__main__":
    main()
