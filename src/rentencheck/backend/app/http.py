"""HTTP helper utilities shared across Flask blueprints."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping

from flask import Flask, current_app, jsonify
from werkzeug.exceptions import BadRequest

from rentencheck.backend.app.models import InvalidIntakeError
from rentencheck.backend.config.schema import ConfigurationError, MissingParameterError
from rentencheck.backend.config.settings_store import (
    ParameterProvider,
    load_settings_store,
)

PROVIDER_EXTENSION = "rentencheck.parameter_provider"

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProblemResponse:
    """Error payload returned by every endpoint: ``{"error", "message", ...}``."""

    error: str
    status: int
    message: str | None = None
    extra: Mapping[str, Any] | None = None

    def as_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"error": self.error}
        if self.message:
            payload["message"] = self.message
        if self.extra:
            payload.update(self.extra)
        return payload

    def to_response(self) -> tuple[Any, int]:
        return jsonify(self.as_dict()), self.status


def problem_response(
    error: str,
    *,
    status: int,
    message: str | None = None,
    **extra: Any,
) -> ProblemResponse:
    """Build a :class:`ProblemResponse`; extra keywords are merged into the body."""

    additional: Mapping[str, Any] | None = extra or None
    return ProblemResponse(error=error, status=status, message=message, extra=additional)


def current_parameter_provider() -> ParameterProvider:
    """Return the provider bound to the running app, or the packaged store."""

    provider = current_app.extensions.get(PROVIDER_EXTENSION)
    if provider is None:
        return load_settings_store()
    return provider


def register_error_handlers(app: Flask) -> None:
    """Map domain exceptions onto JSON problem responses."""

    @app.errorhandler(BadRequest)
    def handle_bad_request(error: BadRequest):
        message = error.description or "Invalid request"
        return problem_response("bad_request", status=400, message=message).to_response()

    @app.errorhandler(InvalidIntakeError)
    def handle_invalid_intake(error: InvalidIntakeError):
        return problem_response(
            "validation_error", status=400, message=str(error)
        ).to_response()

    @app.errorhandler(MissingParameterError)
    def handle_missing_parameters(error: MissingParameterError):
        _LOGGER.error("Pension parameters unavailable: %s", error)
        return problem_response(
            "parameters_unavailable",
            status=503,
            message=str(error),
            missing=list(error.keys),
        ).to_response()

    @app.errorhandler(ConfigurationError)
    def handle_configuration_error(error: ConfigurationError):
        _LOGGER.error("Invalid pension settings: %s", error)
        return problem_response(
            "configuration_error", status=500, message=str(error)
        ).to_response()

    @app.errorhandler(ValueError)
    def handle_value_error(error: ValueError):
        return problem_response(
            "validation_error", status=400, message=str(error)
        ).to_response()


__all__ = [
    "PROVIDER_EXTENSION",
    "ProblemResponse",
    "current_parameter_provider",
    "problem_response",
    "register_error_handlers",
]
