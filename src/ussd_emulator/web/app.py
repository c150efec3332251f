import atexit
import logging
import os

from flask import Flask, jsonify, request
from werkzeug.exceptions import HTTPException

from ussd_emulator.engine.core.errors import MalformedRequestError, MenuConfigError, MissingFieldError, UssdError
from ussd_emulator.engine.factory import build_engine
from ussd_emulator.engine.session_engine import SessionEngine
from ussd_emulator.engine.sweeper import ExpirySweeper
from ussd_emulator.menu.config_store import MenuConfigStore
from ussd_emulator.settings import Settings, _get_int_env

logger = logging.getLogger(__name__)


def _get_json_body() -> dict:
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        raise MalformedRequestError()
    return payload


def create_app(
    settings: Settings | None = None,
    engine: SessionEngine | None = None,
    config_store: MenuConfigStore | None = None,
) -> Flask:
    settings = settings or Settings.from_env()

    if config_store is None:
        if engine is not None and isinstance(engine.tree_provider, MenuConfigStore):
            config_store = engine.tree_provider
        else:
            config_store = MenuConfigStore(settings.config_file)
    engine = engine or build_engine(settings, config_store=config_store)

    app = Flask(__name__)
    app.secret_key = settings.secret_key
    app.extensions["ussd_engine"] = engine
    app.extensions["ussd_config_store"] = config_store

    sweeper = ExpirySweeper(engine.store, timeout=settings.session_timeout, interval=settings.sweep_interval)
    sweeper.start()
    # The sweeper lives as long as the process.
    atexit.register(sweeper.stop)
    app.extensions["ussd_sweeper"] = sweeper

    @app.errorhandler(UssdError)
    def handle_ussd_error(e: UssdError):
        return jsonify({"ok": False, "error": str(e), "code": e.code}), e.status

    @app.errorhandler(MenuConfigError)
    def handle_menu_config_error(e: MenuConfigError):
        return jsonify({"ok": False, "error": str(e), "code": "invalid_config"}), 400

    @app.errorhandler(Exception)
    def handle_unexpected_error(e: Exception):
        if isinstance(e, HTTPException):
            return e
        logger.exception("[USSD] Unhandled error on %s %s", request.method, request.path)
        return jsonify({"ok": False, "error": "Internal server error", "code": "internal_error"}), 500

# starts a session when a dial code is given, otherwise continues the one named by sessionId
    @app.post("/api/ussd/session")
    def api_ussd_session():
        payload = _get_json_body()

        dial_code = payload.get("dialCode") or payload.get("ussdCode")
        if dial_code:
            result = engine.start_session(payload.get("phoneNumber"), dial_code)
        elif payload.get("sessionId"):
            result = engine.continue_session(payload.get("sessionId"), payload.get("input"))
        else:
            raise MissingFieldError("dialCode (new session)", "sessionId (continue)")

        return jsonify({"ok": True, **result.to_dict()})

    @app.delete("/api/ussd/session")
    def api_ussd_end_session():
        payload = _get_json_body()
        result = engine.end_session(payload.get("sessionId"))
        return jsonify({"ok": True, **result.to_dict()})

    @app.get("/api/ussd/config")
    def api_ussd_config():
        return jsonify({"ok": True, "data": config_store.get_current_tree().to_dict()})

    @app.post("/api/ussd/config")
    def api_ussd_save_config():
        payload = _get_json_body()
        tree = config_store.update(payload.get("codes"), payload.get("networkName"))
        return jsonify({"ok": True, "data": tree.to_dict()})

    @app.delete("/api/ussd/config")
    def api_ussd_reset_config():
        tree = config_store.reset()
        return jsonify({"ok": True, "data": tree.to_dict(), "message": "Config reset to defaults"})

    return app


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    app = create_app()

    host = os.getenv("HOST", "127.0.0.1")
    port = _get_int_env("PORT", 5000)
    debug = os.getenv("FLASK_DEBUG", "").strip() == "1"

    app.run(host=host, port=port, debug=debug)
