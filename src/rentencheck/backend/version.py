"""Expose the Rentencheck version for the health endpoint and reports."""

from __future__ import annotations

import re
from functools import lru_cache
from importlib import metadata
from pathlib import Path
from typing import Final

PACKAGE_NAME: Final = "rentencheck"
PYPROJECT_PATH: Final = Path(__file__).resolve().parents[3] / "pyproject.toml"

_PROJECT_VERSION = re.compile(
    r"^\[project\]\s*$(?:(?!^\[).)*?^version\s*=\s*\"([^\"]+)\"",
    re.MULTILINE | re.DOTALL,
)


@lru_cache(maxsize=1)
def get_project_version() -> str:
    """Return the installed version, or the one declared in ``pyproject.toml``."""

    try:
        return metadata.version(PACKAGE_NAME)
    except metadata.PackageNotFoundError:
        return _read_version_from_pyproject(PYPROJECT_PATH)


def _read_version_from_pyproject(path: Path) -> str:
    if not path.exists():  # pragma: no cover - checkout invariant
        raise RuntimeError(f"Unable to locate project metadata at {path}")

    match = _PROJECT_VERSION.search(path.read_text(encoding="utf-8"))
    if match is None:
        raise RuntimeError(f"No [project] version declared in {path}")
    return match.group(1)


__all__ = ["PACKAGE_NAME", "get_project_version"]
