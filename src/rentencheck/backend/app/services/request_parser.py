"""Helpers for normalising incoming projection requests."""

from __future__ import annotations

from collections.abc import Mapping
from datetime import date
from typing import Any

from flask import Request
from werkzeug.exceptions import BadRequest


def parse_as_of(raw: Any) -> date:
    """Return the calculation date from ``raw`` (ISO string), defaulting to today."""

    if raw is None or raw == "":
        return date.today()
    if isinstance(raw, date):
        return raw
    if not isinstance(raw, str):
        raise BadRequest("'as_of' must be an ISO date (YYYY-MM-DD)")
    try:
        return date.fromisoformat(raw.strip())
    except ValueError as exc:
        raise BadRequest("'as_of' must be an ISO date (YYYY-MM-DD)") from exc


def parse_json_payload(req: Request) -> tuple[dict[str, Any], date]:
    """Extract the JSON intake and the calculation date from ``req``."""

    data = req.get_json(silent=True)
    if data is None:
        raise BadRequest("Request body must be valid JSON")
    if not isinstance(data, Mapping):
        raise BadRequest("Request JSON must be an object")

    payload = dict(data)
    raw_as_of = payload.pop("as_of", None)
    if raw_as_of is None:
        raw_as_of = req.args.get("as_of")

    return payload, parse_as_of(raw_as_of)
