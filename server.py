#!/usr/bin/env python3
"""
FRED Relay HTTP server

Serves retrieval-augmented chat over stored FRED observations, plus the
observations themselves and per-series regression reports.

Endpoints:
- POST /chat            Chat with the configured (or requested) provider
- GET  /observations    Stored observations, optionally for one series
- GET  /analysis/<id>   Regression report for one series
- POST /query           Raw retrieval matches for a query
"""

import logging
import os
import time

from flask import Blueprint, Flask, g, jsonify, request

from analysis import analyze_series
from db import get_all_observations, get_series_observations, init_db
from errors import FredRelayError
from providers import parse_history, registry
from rag import ChatOrchestrator, get_retriever
from rag.retriever import DEFAULT_TOP_K
from version import VERSION

# Configure logging
logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

api = Blueprint("api", __name__)


# ============================================================================
# Request Logging / CORS
# ============================================================================


def log_request():
    """Log all incoming requests."""
    logger.info(f">>> {request.method} {request.path}")
    g.start_time = time.time()

    if request.data:
        data = request.get_json(silent=True)
        if isinstance(data, dict):
            # Summarize history so long conversations don't flood the log
            log_data = {
                k: (v if k != "history" else f"[{len(v or [])} messages]")
                for k, v in data.items()
            }
            logger.info(f"    Request data: {log_data}")


def log_response(response):
    """Log response status and attach CORS headers."""
    elapsed_ms = int((time.time() - getattr(g, "start_time", time.time())) * 1000)
    logger.info(f"<<< {response.status_code} {request.path} ({elapsed_ms}ms)")

    response.headers["Access-Control-Allow-Origin"] = "*"
    response.headers["Access-Control-Allow-Headers"] = "Content-Type"
    response.headers["Access-Control-Allow-Methods"] = "GET, POST, OPTIONS"
    return response


# ============================================================================
# Error Handlers - Return JSON instead of HTML for all errors
# ============================================================================


def bad_request(e):
    """Handle 400 Bad Request errors."""
    return jsonify(
        {"error": str(e.description) if hasattr(e, "description") else "Bad request"}
    ), 400


def not_found(e):
    """Handle 404 Not Found errors."""
    return jsonify({"error": f"Endpoint not found: {request.path}"}), 404


def method_not_allowed(e):
    """Handle 405 Method Not Allowed errors."""
    return jsonify(
        {"error": f"Method {request.method} not allowed for {request.path}"}
    ), 405


def internal_error(e):
    """Handle 500 Internal Server errors."""
    logger.exception("Internal server error")
    return jsonify({"error": "Internal server error"}), 500


def handle_exception(e):
    """Handle any unhandled exceptions."""
    logger.exception(f"Unhandled exception: {e}")
    return jsonify({"error": "Internal server error"}), 500


# ============================================================================
# Routes
# ============================================================================


@api.route("/", methods=["GET"])
def index():
    """Health check."""
    return jsonify({"status": "ok", "version": VERSION})


@api.route("/chat", methods=["POST"])
def chat():
    """
    Retrieval-augmented chat.

    Body: {"message": str, "history": [...], "systemInstruction": str,
    "provider": str}. Only ``message`` is required.
    """
    data = request.get_json(silent=True) or {}

    message = data.get("message")
    if not isinstance(message, str) or not message.strip():
        return jsonify({"error": "message is required"}), 400

    try:
        history = parse_history(data.get("history"))
        provider = registry.resolve(data.get("provider"))
    except ValueError as e:
        return jsonify({"error": str(e)}), 400

    try:
        reply = ChatOrchestrator(provider).chat(
            history, message, data.get("systemInstruction")
        )
    except FredRelayError as e:
        logger.error(f"Chat with {provider.name} failed: {e}")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify({"response": reply})


@api.route("/observations", methods=["GET"])
def observations():
    """Stored observations, optionally filtered by ?seriesId=."""
    series_id = request.args.get("seriesId")
    if series_id:
        rows = get_series_observations(series_id)
    else:
        rows = get_all_observations()
    return jsonify({"observations": [row.to_dict() for row in rows]})


@api.route("/analysis/<series_id>", methods=["GET"])
def analysis(series_id: str):
    """Regression report for one stored series."""
    result = analyze_series(series_id)
    if result is None:
        return jsonify({"error": f"No observations for series {series_id}"}), 404
    return jsonify(result.to_dict())


@api.route("/query", methods=["POST"])
def query():
    """Raw retrieval: {"query": str, "topK": int}."""
    data = request.get_json(silent=True) or {}

    text = data.get("query")
    if not isinstance(text, str) or not text.strip():
        return jsonify({"error": "query is required"}), 400

    top_k = data.get("topK", DEFAULT_TOP_K)
    if not isinstance(top_k, int) or isinstance(top_k, bool) or top_k < 1:
        return jsonify({"error": "topK must be a positive integer"}), 400

    try:
        matches = get_retriever().query(text, top_k)
    except FredRelayError as e:
        logger.error(f"Query failed: {e}")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify({"matches": [m.to_dict() for m in matches]})


def create_app() -> Flask:
    """Create the API Flask application."""
    application = Flask(__name__)

    # Create tables if needed (idempotent)
    init_db()

    application.before_request(log_request)
    application.after_request(log_response)

    application.register_error_handler(400, bad_request)
    application.register_error_handler(404, not_found)
    application.register_error_handler(405, method_not_allowed)
    application.register_error_handler(500, internal_error)
    application.register_error_handler(Exception, handle_exception)

    application.register_blueprint(api)
    return application


if __name__ == "__main__":
    port = int(os.environ.get("PORT", 5050))
    host = os.environ.get("HOST", "0.0.0.0")
    debug = os.environ.get("DEBUG", "false").lower() == "true"

    app = create_app()

    configured = registry.get_configured_providers()
    if not configured:
        logger.warning("No chat providers configured. Add API keys to .env.")

    logger.info("=" * 60)
    logger.info(f"FRED Relay v{VERSION}")
    logger.info("=" * 60)
    logger.info(f"API server:   http://{host}:{port}")
    logger.info(f"Configured providers: {', '.join(p.name for p in configured) or 'none'}")
    logger.info("=" * 60)

    app.run(host=host, port=port, debug=debug, threaded=True)
