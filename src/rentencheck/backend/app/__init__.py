"""Application factory for Rentencheck backend services."""

from __future__ import annotations

import os
from datetime import date
from warnings import warn

from flask import Flask, jsonify
from flask_cors import CORS

from rentencheck.backend.config.settings_store import ParameterProvider
from rentencheck.backend.version import get_project_version

from .http import PROVIDER_EXTENSION, register_error_handlers
from .routes import register_routes


def _parse_allowed_origins(raw: str | None) -> set[str]:
    """Convert an environment variable into a normalised set of origins."""

    if not raw:
        return set()

    return {origin.strip() for origin in raw.split(",") if origin.strip()}


def create_app(provider: ParameterProvider | None = None) -> Flask:
    """Create and configure the Flask application instance.

    ``provider`` replaces the packaged settings store as the source of pension
    parameters, which lets tests and deployments inject their own settings.
    """

    app = Flask(__name__)

    allowed_origins = _parse_allowed_origins(os.getenv("RENTENCHECK_ALLOWED_ORIGINS"))
    if not allowed_origins:
        warn(
            "No allowed origins configured; cross-origin requests will be rejected.",
            stacklevel=1,
        )

    CORS(
        app,
        resources={r"/api/*": {"origins": sorted(allowed_origins)}},
        supports_credentials=False,
        methods=["GET", "OPTIONS", "POST"],
        allow_headers=["Content-Type"],
    )

    if provider is not None:
        app.extensions[PROVIDER_EXTENSION] = provider

    register_routes(app)
    register_error_handlers(app)

    @app.route("/health", methods=["GET"])
    def health_check():
        """Simple health check endpoint for infrastructure monitoring."""

        return jsonify(
            {
                "status": "ok",
                "version": get_project_version(),
                "as_of": date.today().isoformat(),
            }
        )

    return app
