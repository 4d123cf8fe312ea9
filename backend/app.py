# backend/app.py
"""
shadeproxy: single-operator forward proxy behind a secret entry path
- First visit: setup form to choose the secure path
- Afterwards: "/" shows a stock nginx welcome page
- /<secure path> fetches any http(s) URL and keeps browsing inside the proxy
"""

import logging

from flask import Flask, Response, redirect, request
from flask_cors import CORS

from config import ProxyConfig
from gate.store import GateStore, GateStoreError
from proxy.handlers import handle_proxy
from utils.pages import render_decoy_page, render_entry_form, render_setup_page
from utils.validators import normalize_secure_path

logger = logging.getLogger(__name__)


def configure_logging(config: ProxyConfig) -> None:
    logging.basicConfig(
        level=getattr(logging, config.log_level, logging.INFO),
        format='%(asctime)s [%(threadName)s] %(levelname)s: %(message)s'
    )


def create_app(config: ProxyConfig = None, store: GateStore = None) -> Flask:
    """Build the Flask app around one config object and one gate store."""
    config = config or ProxyConfig.from_env()
    store = store or GateStore(config.gate_file)

    app = Flask(__name__)
    if config.cors_origins:
        CORS(app, origins=config.cors_origins)
        logger.info(f"CORS enabled for {', '.join(config.cors_origins)}")

    # ========================================================================
    # SETUP MODE
    # ========================================================================

    def setup():
        """Any path serves the setup form until a gate record exists."""
        if request.method != "POST" or "secure_path" not in request.form:
            return render_setup_page()

        ok, value = normalize_secure_path(request.form["secure_path"])
        if not ok:
            return Response(value, status=400, content_type="text/plain; charset=utf-8")

        try:
            created = store.create(value)
        except GateStoreError as e:
            logger.error(f"Setup failed: {e}")
            return Response("Could not save the secure path; check file permissions.",
                            status=500, content_type="text/plain; charset=utf-8")
        if not created:
            return Response("Already configured.", status=409,
                            content_type="text/plain; charset=utf-8")
        logger.info("[SETUP] Secure path configured")
        return redirect("/")

    # ========================================================================
    # ROUTES
    # ========================================================================

    @app.route("/", methods=["GET", "POST"])
    def index():
        if store.load() is None:
            return setup()
        return render_decoy_page()

    @app.route("/<path:req_path>", methods=["GET", "POST"])
    def entry(req_path):
        record = store.load()
        if record is None:
            return setup()

        if not record.matches(req_path.rstrip("/")):
            return Response("404 Not Found", status=404, content_type="text/plain; charset=utf-8")

        entry_path = "/" + record.secure_path
        if request.method == "POST" and "url" in request.form:
            return handle_proxy(request.form["url"], entry_path, config)
        if request.method == "GET" and "u" in request.args:
            hops = max(request.args.get("h", default=0, type=int), 0)
            return handle_proxy(request.args["u"], entry_path, config, hops=hops)
        return render_entry_form()

    return app


# ============================================================================
# MAIN
# ============================================================================

if __name__ == "__main__":
    config = ProxyConfig.from_env()
    configure_logging(config)
    app = create_app(config)
    logger.info(f"Starting shadeproxy on {config.host}:{config.port}")
    app.run(host=config.host, port=config.port, debug=False, use_reloader=False, threaded=True)
