"""Utilities for validating the pension settings store and surfacing issues."""

from __future__ import annotations

import argparse
from collections import defaultdict
from datetime import date, timedelta
from typing import Iterable, Sequence

from .schema import (
    SETTING_CATEGORIES,
    ConfigurationError,
    MissingParameterError,
    PensionSetting,
)
from .settings_store import SettingsStore, load_settings_store


def _format_scope(scope: str, message: str) -> str:
    return f"{scope}: {message}"


def _validate_rows(settings: Sequence[PensionSetting]) -> list[str]:
    errors: list[str] = []

    for setting in settings:
        scope = f"settings.{setting.key}"
        expected_category = SETTING_CATEGORIES.get(setting.key)
        if expected_category is None:
            errors.append(_format_scope(scope, "unknown setting key"))
            continue
        if setting.category != expected_category:
            errors.append(
                _format_scope(
                    scope,
                    f"category '{setting.category}' should be '{expected_category}'",
                )
            )
        if setting.value < 0:
            errors.append(_format_scope(scope, "value must be non-negative"))
        if setting.unit == "%" and setting.value > 100:
            errors.append(_format_scope(scope, "percentages must not exceed 100"))

    return errors


def _validate_overlaps(settings: Sequence[PensionSetting]) -> list[str]:
    """Flag active rows for one key that share a start date."""

    errors: list[str] = []
    starts: dict[tuple[str, date], int] = defaultdict(int)
    for setting in settings:
        if setting.is_active:
            starts[(setting.key, setting.valid_from)] += 1

    for (key, valid_from), count in sorted(starts.items()):
        if count > 1:
            errors.append(
                _format_scope(
                    f"settings.{key}",
                    f"{count} active rows start on {valid_from.isoformat()}",
                )
            )
    return errors


def validate_settings_store(store: SettingsStore, as_of: date) -> list[str]:
    """Return a list of validation errors for ``store`` on ``as_of``."""

    errors = _validate_rows(store.settings)
    errors.extend(_validate_overlaps(store.settings))

    try:
        store.get_parameters(as_of)
    except (MissingParameterError, ConfigurationError) as exc:
        errors.append(_format_scope("parameters", str(exc)))

    return errors


def change_dates(store: SettingsStore) -> list[date]:
    """Return every date on which an active row starts applying or has just stopped."""

    dates: set[date] = set()
    for setting in store.settings:
        if not setting.is_active:
            continue
        dates.add(setting.valid_from)
        if setting.valid_until is not None:
            dates.add(setting.valid_until)
            dates.add(setting.valid_until + timedelta(days=1))
    return sorted(dates)


def validate_dates(dates: Iterable[date]) -> dict[date, list[str]]:
    """Validate the shipped settings store for each date in ``dates``."""

    store = load_settings_store()
    return {as_of: validate_settings_store(store, as_of) for as_of in dates}


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point for running validations from the command line."""

    parser = argparse.ArgumentParser(description="Validate the pension settings store")
    parser.add_argument(
        "--as-of",
        dest="dates",
        action="append",
        type=date.fromisoformat,
        help="Date (YYYY-MM-DD) to resolve; may be repeated. Defaults to today.",
    )
    parser.add_argument(
        "--all-windows",
        action="store_true",
        help="Also resolve every date on which a setting starts or ends.",
    )
    args = parser.parse_args(argv)

    dates = list(args.dates or [date.today()])
    if args.all_windows:
        dates = sorted({*dates, *change_dates(load_settings_store())})
    results = validate_dates(dates)
    exit_code = 0
    for as_of, errors in results.items():
        if errors:
            exit_code = 1
            print(f"[{as_of.isoformat()}] {len(errors)} issue(s) detected:")
            for error in errors:
                print(f"  - {error}")
        else:
            print(f"[{as_of.isoformat()}] OK")

    return exit_code


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    raise SystemExit(main())
