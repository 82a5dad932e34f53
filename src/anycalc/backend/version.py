"""Expose the project version for health checks and metadata endpoints."""

from __future__ import annotations

import tomllib
from functools import lru_cache
from importlib import metadata
from pathlib import Path
from typing import Final

PACKAGE_NAME: Final = "anycalc"
PYPROJECT_PATH: Final = Path(__file__).resolve().parents[3] / "pyproject.toml"


@lru_cache(maxsize=1)
def get_project_version() -> str:
    """Return the installed distribution version, else the one in ``pyproject.toml``."""

    try:
        return metadata.version(PACKAGE_NAME)
    except metadata.PackageNotFoundError:
        return read_pyproject_version(PYPROJECT_PATH)


def read_pyproject_version(path: Path) -> str:
    """Read ``[project].version`` from the given ``pyproject.toml``."""

    if not path.exists():
        raise RuntimeError(f"Unable to locate project metadata at {path}")

    with path.open("rb") as handle:
        data = tomllib.load(handle)

    version = data.get("project", {}).get("version")
    if not isinstance(version, str) or not version.strip():
        raise RuntimeError(f"No project version declared in {path.name}")
    return version.strip()


__all__ = ["PACKAGE_NAME", "get_project_version", "read_pyproject_version"]
