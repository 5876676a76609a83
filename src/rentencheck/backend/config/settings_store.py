"""Settings store loader and time-scoped parameter resolution."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from datetime import date, datetime
from functools import lru_cache
from pathlib import Path
from typing import Any, Protocol

import yaml
from pydantic import ValidationError

from .schema import (
    REQUIRED_SETTING_KEYS,
    SETTING_CATEGORIES,
    ConfigurationError,
    MissingParameterError,
    ParameterSet,
    PensionSetting,
    SettingsDocument,
)

CONFIG_DIRECTORY = Path(__file__).resolve().parent / "data"
SETTINGS_FILE = CONFIG_DIRECTORY / "pension_settings.yaml"
DEFAULTS_FILE = CONFIG_DIRECTORY / "pension_defaults.yaml"

_LOGGER = logging.getLogger(__name__)


class ParameterProvider(Protocol):
    """Read interface returning the parameters in force on a given date."""

    def get_parameters(self, as_of: date) -> ParameterSet:
        ...


def _load_yaml(path: Path) -> dict[str, Any]:
    with path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}
    if not isinstance(data, dict):
        raise ConfigurationError("Configuration file must define a mapping at the top level")
    return data


def _selection_key(setting: PensionSetting) -> tuple[date, datetime]:
    return setting.valid_from, setting.updated_at or datetime.min


class SettingsStore:
    """Resolve effective parameter values from a collection of setting rows."""

    def __init__(self, settings: Iterable[PensionSetting]) -> None:
        self._settings: tuple[PensionSetting, ...] = tuple(settings)

    @classmethod
    def from_rows(cls, rows: Iterable[Mapping[str, Any]]) -> SettingsStore:
        """Validate raw mapping rows and build a store from them."""

        try:
            document = SettingsDocument.model_validate({"settings": list(rows)})
        except ValidationError as error:
            raise ConfigurationError(f"Settings validation failed: {error}") from error
        return cls(document.settings)

    @property
    def settings(self) -> Sequence[PensionSetting]:
        return self._settings

    def effective_settings(self, as_of: date) -> dict[str, PensionSetting]:
        """Return the winning row per key for ``as_of``."""

        resolved: dict[str, PensionSetting] = {}
        for setting in self._settings:
            if not setting.is_effective_on(as_of):
                continue
            current = resolved.get(setting.key)
            if current is None or _selection_key(setting) > _selection_key(current):
                resolved[setting.key] = setting
        return resolved

    def effective_values(self, as_of: date) -> dict[str, float]:
        return {key: row.value for key, row in self.effective_settings(as_of).items()}

    def get_value(self, key: str, as_of: date) -> float | None:
        setting = self.effective_settings(as_of).get(key)
        return setting.value if setting is not None else None

    def get_parameters(self, as_of: date) -> ParameterSet:
        """Return the :class:`ParameterSet` in force on ``as_of``."""

        values = self.effective_values(as_of)
        missing = REQUIRED_SETTING_KEYS - set(values)
        if missing:
            raise MissingParameterError(missing, as_of)

        known = {key: value for key, value in values.items() if key in SETTING_CATEGORIES}
        _LOGGER.debug(
            "Resolved %d pension settings for %s", len(known), as_of.isoformat()
        )
        return ParameterSet.from_settings(known)


@lru_cache(maxsize=1)
def load_settings_store() -> SettingsStore:
    """Load and cache the settings store shipped with the package."""

    if not SETTINGS_FILE.exists():
        raise FileNotFoundError("Pension settings file not found")

    raw_settings = _load_yaml(SETTINGS_FILE)
    return SettingsStore.from_rows(raw_settings.get("settings") or [])


@lru_cache(maxsize=1)
def load_default_values() -> dict[str, float]:
    """Return the documented German 2024 fallback values keyed by setting."""

    if not DEFAULTS_FILE.exists():
        raise FileNotFoundError("Pension defaults file not found")

    raw_defaults = _load_yaml(DEFAULTS_FILE)
    values: dict[str, float] = {}
    for category, entries in raw_defaults.items():
        if category == "meta":
            continue
        if not isinstance(entries, Mapping):
            raise ConfigurationError(f"Defaults section '{category}' must be a mapping")
        for key, value in entries.items():
            expected = SETTING_CATEGORIES.get(key)
            if expected is None:
                raise ConfigurationError(f"Unknown default setting '{key}'")
            if expected != category:
                raise ConfigurationError(
                    f"Default setting '{key}' belongs to '{expected}', not '{category}'"
                )
            values[key] = float(value)
    return values


def default_parameters() -> ParameterSet:
    """Return the fallback :class:`ParameterSet` (German 2024 standards)."""

    return ParameterSet.from_settings(load_default_values())


def resolve_parameters(
    provider: ParameterProvider,
    as_of: date,
    *,
    fallback_to_defaults: bool = False,
) -> tuple[ParameterSet, bool]:
    """Fetch parameters from ``provider`` with an opt-in default fallback.

    Returns the parameter set and whether fallback values were applied. Without
    ``fallback_to_defaults`` a :class:`MissingParameterError` propagates
    unchanged so the caller never computes with silently defaulted values.
    """

    try:
        return provider.get_parameters(as_of), False
    except MissingParameterError as error:
        if not fallback_to_defaults:
            raise
        _LOGGER.warning(
            "Falling back to default pension parameters for %s: missing %s",
            as_of.isoformat(),
            ", ".join(error.keys),
        )

    if isinstance(provider, SettingsStore):
        merged = {**load_default_values(), **provider.effective_values(as_of)}
        return ParameterSet.from_settings(merged), True
    return default_parameters(), True


__all__ = [
    "CONFIG_DIRECTORY",
    "DEFAULTS_FILE",
    "ParameterProvider",
    "SETTINGS_FILE",
    "SettingsStore",
    "default_parameters",
    "load_default_values",
    "load_settings_store",
    "resolve_parameters",
]
