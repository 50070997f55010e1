# ABOUTME: Flask application exposing the single JSON endpoint.
# ABOUTME: POST / runs an action; GET / describes the service.

from flask import Blueprint, Flask, current_app, jsonify, request

from bookdrop.core.services import Services
from bookdrop.web.actions import ACTIONS, DEFAULT_ACTION, handle_action

EXTENSION_KEY = "bookdrop"

api_bp = Blueprint("api", __name__)


def _services() -> Services:
    return current_app.extensions[EXTENSION_KEY]


@api_bp.route("/", methods=["POST"])
def run_action():
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        payload = {}
    return jsonify(handle_action(payload, _services()))


@api_bp.route("/", methods=["GET"])
def describe():
    return jsonify({
        "service": "bookdrop",
        "actions": sorted(ACTIONS),
        "default_action": DEFAULT_ACTION,
    })


def create_app(services: Services) -> Flask:
    app = Flask(__name__)
    app.extensions[EXTENSION_KEY] = services
    app.register_blueprint(api_bp)
    return app
