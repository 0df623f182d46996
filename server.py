#!/usr/bin/env python3
"""MultiForge - web server streaming multi-model UI generation."""

import logging
import os

from flask import Flask, Response, jsonify, request, stream_with_context

from config.defaults import DEFAULTS
from config.settings import load_settings
from core.broadcaster import DeltaBroadcaster
from core.orchestrator import Orchestrator
from core.sessions import SessionStore
from core.state import CodeArtifact, ConversationTurn, ModelDone
from utils.sse import DONE_EVENT, format_event

logging.basicConfig(
    level=os.environ.get("MULTIFORGE_LOG_LEVEL", DEFAULTS["log_level"]),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("multiforge.server")

app = Flask(__name__)
settings = load_settings()
orchestrator = Orchestrator(settings)
sessions = SessionStore(ttl=settings.session_ttl, max_sessions=settings.max_sessions)


def _parse_history(data):
    """Conversation turns from the request body, or the bare prompt as one turn."""
    turns = [ConversationTurn.from_dict(t) for t in data.get("history") or []]
    prompt = (data.get("prompt") or "").strip()
    if not turns and prompt:
        turns.append(ConversationTurn(role="user", content=prompt))
    return turns


def _prior_codes(models, current_codes, session_id):
    """Prior artifact per model: the client's copy first, then the session's."""
    priors = {}
    for model in models:
        supplied = current_codes.get(model)
        if supplied:
            priors[model] = CodeArtifact.from_dict(supplied)
            continue
        stored = sessions.get(session_id, model)
        if stored is not None:
            priors[model] = stored
    return priors


def generate_events(models, history, priors, session_id):
    """Yield SSE records for one request; always ends with the done event."""
    broadcaster = DeltaBroadcaster()
    broadcaster.expect(models)
    try:
        for event in orchestrator.stream(models, history, priors):
            if isinstance(event, ModelDone):
                sessions.save(session_id, event.model, event.artifact)
            for payload in broadcaster.publish(event):
                yield format_event(payload)
    except Exception as e:
        logger.exception("Generation stream aborted")
        yield format_event({"type": "error", "error": f"Internal error: {e}"})
    yield DONE_EVENT


@app.route("/api/config")
def api_config():
    """Configured providers and their models (no secrets)."""
    return jsonify(settings.registry.list_providers())


@app.route("/api/generate", methods=["POST"])
def api_generate():
    data = request.get_json(silent=True)
    if not data:
        return jsonify({"error": "Missing request body"}), 400

    models = data.get("models") or []
    if not isinstance(models, list) or not models:
        return jsonify({"error": "Select at least one model"}), 400
    if not all(isinstance(m, str) for m in models):
        return jsonify({"error": "Model identifiers must be strings"}), 400

    try:
        history = _parse_history(data)
    except (AttributeError, ValueError) as e:
        return jsonify({"error": f"Invalid history: {e}"}), 400
    if not history:
        return jsonify({"error": "Missing prompt"}), 400

    current_codes = data.get("currentCodes") or {}
    if not isinstance(current_codes, dict):
        return jsonify({"error": "currentCodes must be an object"}), 400

    session_id = data.get("session_id") or sessions.new_id()
    models = list(dict.fromkeys(models))
    try:
        priors = _prior_codes(models, current_codes, session_id)
    except ValueError as e:
        return jsonify({"error": f"Invalid currentCodes: {e}"}), 400
    logger.info("Generating with %s (session %s)", ", ".join(models), session_id)

    return Response(
        stream_with_context(generate_events(models, history, priors, session_id)),
        mimetype="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "X-Accel-Buffering": "no",
            "X-Session-ID": session_id,
        },
    )


@app.route("/api/session/<session_id>")
def api_session(session_id):
    """Last generated code per model for a session."""
    artifacts = sessions.snapshot(session_id)
    if artifacts is None:
        return jsonify({"error": "Session not found or expired"}), 404
    return jsonify({
        "session_id": session_id,
        "models": {model: artifact.to_dict() for model, artifact in artifacts.items()},
    })


if __name__ == "__main__":
    port = int(os.environ.get("PORT", DEFAULTS["port"]))
    print(f"MultiForge running at http://localhost:{port}")
    app.run(debug=False, port=port, threaded=True)
