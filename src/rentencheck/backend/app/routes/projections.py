"""REST endpoints for pension projections."""

from __future__ import annotations

from typing import Any

from flask import Blueprint, jsonify, request

from rentencheck.backend.app.http import current_parameter_provider
from rentencheck.backend.app.services import (
    calculate_projection,
    parse_json_payload,
)

blueprint = Blueprint("projections", __name__, url_prefix="/api/v1")


@blueprint.post("/projections")
def create_projection() -> tuple[Any, int]:
    """Project the submitted intake against the parameters in force on ``as_of``."""

    payload, as_of = parse_json_payload(request)
    result = calculate_projection(payload, as_of, current_parameter_provider())

    return jsonify(result), 200
