"""Flask app: health check and the Telegram webhook endpoint."""

from __future__ import annotations

import hmac
import logging
from typing import Any, Awaitable, Callable, Dict

from flask import Flask, jsonify, request

from .config import BotConfig
from .models import db

logger = logging.getLogger(__name__)

SECRET_HEADER = "X-Telegram-Bot-Api-Secret-Token"

UpdateSubmitter = Callable[[Dict[str, Any]], Awaitable[None]]


class MalformedUpdateError(ValueError):
    """The webhook body is not a Telegram update."""


def create_app(config: BotConfig) -> Flask:
    """Flask app bound to the subscription database, with the health endpoint."""
    app = Flask(__name__)
    app.config['SQLALCHEMY_DATABASE_URI'] = config.database_url
    app.config['SQLALCHEMY_TRACK_MODIFICATIONS'] = False
    app.config['SQLALCHEMY_ENGINE_OPTIONS'] = {'pool_pre_ping': True}
    app.config['SERVICE_NAME'] = config.service_name
    db.init_app(app)

    @app.route('/')
    def index():
        return jsonify({'message': f"Hello from {app.config['SERVICE_NAME']}"}), 200

    return app


def register_callback(app: Flask, secret: str, submit_update: UpdateSubmitter) -> None:
    """Add ``POST /callback`` which hands verified updates to ``submit_update``."""

    @app.route('/callback', methods=['POST'])
    async def callback():
        token = request.headers.get(SECRET_HEADER, '')
        if not hmac.compare_digest(token.encode(), secret.encode()):
            logger.warning("Rejected webhook call with a bad secret token from %s", request.remote_addr)
            return jsonify({'success': False, 'error': 'Invalid signature'}), 403

        payload = request.get_json(silent=True)
        if not isinstance(payload, dict):
            return jsonify({'success': False, 'error': 'Request body must be a JSON object'}), 400

        try:
            await submit_update(payload)
        except MalformedUpdateError as e:
            return jsonify({'success': False, 'error': str(e)}), 400
        except Exception:
            logger.exception("Failed to process webhook update")
            return jsonify({'success': False, 'error': 'Internal error'}), 500

        return jsonify({'success': True}), 200
