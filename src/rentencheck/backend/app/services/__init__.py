"""Service-layer helpers for the Rentencheck backend."""

from .parameters_service import build_parameters_payload, build_settings_overview
from .projection_service import (
    calculate_projection,
    compute_projection,
    fallback_enabled,
    parse_intake,
)
from .request_parser import parse_as_of, parse_json_payload

__all__ = [
    "build_parameters_payload",
    "build_settings_overview",
    "calculate_projection",
    "compute_projection",
    "fallback_enabled",
    "parse_as_of",
    "parse_intake",
    "parse_json_payload",
]
