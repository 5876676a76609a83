"""Test configuration utilities and shared fixtures."""

import sys
from datetime import date
from pathlib import Path

# Ensure the ``src`` directory is importable when tests are executed without an
# editable install.
ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

import pytest  # noqa: E402
from flask import Flask  # noqa: E402
from flask.testing import FlaskClient  # noqa: E402

from rentencheck.backend.app import create_app  # noqa: E402
from rentencheck.backend.config.schema import SETTING_CATEGORIES, ParameterSet  # noqa: E402
from rentencheck.backend.config.settings_store import (  # noqa: E402
    default_parameters,
    load_default_values,
)


@pytest.fixture(autouse=True)
def _clear_runtime_flags(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep environment switches from leaking into tests."""

    for name in (
        "RENTENCHECK_FALLBACK_TO_DEFAULTS",
        "RENTENCHECK_PROFILE_CALCULATIONS",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture()
def app() -> Flask:
    """Return a configured Flask application for integration tests."""

    application = create_app()
    application.config.update(TESTING=True)
    return application


@pytest.fixture()
def client(app: Flask) -> FlaskClient:
    """Provide a test client bound to the configured Flask app."""

    return app.test_client()


@pytest.fixture()
def parameters() -> ParameterSet:
    """German 2024 reference parameters."""

    return default_parameters()


@pytest.fixture()
def default_rows() -> list[dict[str, object]]:
    """Settings rows carrying the default values, valid from 2024 onwards."""

    return [
        {
            "key": key,
            "category": SETTING_CATEGORIES[key],
            "value": value,
            "valid_from": date(2024, 1, 1),
        }
        for key, value in load_default_values().items()
    ]
