"""Expose the pension parameters in force for a date.

The chart and the admin settings screen read the same grouped payload so that
neither has to duplicate the resolution rules of the settings store.
"""

from __future__ import annotations

from typing import Any

from flask import Blueprint, jsonify, request

from rentencheck.backend.app.http import current_parameter_provider
from rentencheck.backend.app.services import (
    build_parameters_payload,
    build_settings_overview,
    fallback_enabled,
    parse_as_of,
)
from rentencheck.backend.config.settings_store import SettingsStore, resolve_parameters

blueprint = Blueprint("parameters", __name__, url_prefix="/api/v1")


@blueprint.get("/parameters")
def get_parameters() -> tuple[Any, int]:
    """Return the grouped parameters resolved for ``?as_of=YYYY-MM-DD``."""

    as_of = parse_as_of(request.args.get("as_of"))
    parameters, defaults_applied = resolve_parameters(
        current_parameter_provider(), as_of, fallback_to_defaults=fallback_enabled()
    )

    return jsonify(
        {
            "as_of": as_of.isoformat(),
            "defaults_applied": defaults_applied,
            "data": build_parameters_payload(parameters),
        }
    ), 200


@blueprint.get("/parameters/settings")
def get_settings() -> tuple[Any, int]:
    """Return the effective settings rows grouped by category."""

    as_of = parse_as_of(request.args.get("as_of"))
    provider = current_parameter_provider()
    if not isinstance(provider, SettingsStore):
        return jsonify({"as_of": as_of.isoformat(), "data": {}}), 200

    return jsonify(
        {
            "as_of": as_of.isoformat(),
            "data": build_settings_overview(provider, as_of),
        }
    ), 200
