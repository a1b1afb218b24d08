"""Utilities for locating runtime data and the bundled template catalog."""

from __future__ import annotations

import os
import shutil
from pathlib import Path

_ENV_VAR = "REVIEWR_TEMPLATES_DATA_DIR"
_DEFAULT_DIRNAME = ".reviewr_templates"
_PACKAGE_ROOT = Path(__file__).resolve().parents[1]
_SYSTEM_DIR = _PACKAGE_ROOT / "system"


def get_data_dir() -> Path:
    """Return the configured runtime data directory.

    Honors the REVIEWR_TEMPLATES_DATA_DIR environment variable (a relative
    value is taken from the current working directory); otherwise defaults to
    ~/.reviewr_templates on the current platform.
    """
    override = (os.getenv(_ENV_VAR) or "").strip()
    if override:
        return Path(override).expanduser().resolve()
    return (Path.home() / _DEFAULT_DIRNAME).resolve()


def ensure_data_dir() -> Path:
    """Ensure the data directory exists on disk and return it."""
    data_dir = get_data_dir()
    data_dir.mkdir(parents=True, exist_ok=True)
    _seed_from_system(data_dir)
    return data_dir


def resolve_data_path(*relative: str, ensure_parent: bool = False) -> Path:
    """Resolve a path underneath the runtime data directory."""
    data_dir = ensure_data_dir()
    full_path = data_dir.joinpath(*relative)
    if ensure_parent:
        full_path.parent.mkdir(parents=True, exist_ok=True)
    return full_path


def resolve_data_file(path: str, ensure_parent: bool = False) -> Path:
    """Resolve a configured file path against the data directory.

    Absolute paths are used as-is. Relative paths are interpreted relative to
    the runtime data dir.
    """
    candidate = Path(path).expanduser()
    if candidate.is_absolute():
        if ensure_parent:
            candidate.parent.mkdir(parents=True, exist_ok=True)
        return candidate
    return resolve_data_path(*candidate.parts, ensure_parent=ensure_parent)


def resolve_data_dir(*relative: str, ensure_exists: bool = False) -> Path:
    """Resolve a directory inside the runtime data directory."""
    directory = resolve_data_path(*relative)
    if ensure_exists:
        directory.mkdir(parents=True, exist_ok=True)
    return directory


def get_system_dir() -> Path:
    """Return the package's bundled system directory."""
    return _SYSTEM_DIR


def get_system_path(*relative: str) -> Path:
    """Return a path inside the package's system directory."""
    return _SYSTEM_DIR.joinpath(*relative)


def get_bundled_catalog_dir() -> Path:
    """Return the root of the template catalog shipped with the package."""
    return _SYSTEM_DIR / "catalog"


def _seed_from_system(target: Path) -> None:
    """Copy the bundled config and render templates into *target* when missing.

    The catalog itself is read in place and never copied.
    """
    if target.resolve() == _SYSTEM_DIR.resolve():
        return

    for name in ("config", "templates"):
        src = _SYSTEM_DIR / name
        if not src.exists():
            continue
        dest = target / name
        if dest.exists():
            continue
        try:
            shutil.copytree(src, dest)
        except FileExistsError:
            continue


__all__ = [
    "get_data_dir",
    "ensure_data_dir",
    "resolve_data_path",
    "resolve_data_file",
    "resolve_data_dir",
    "get_system_dir",
    "get_system_path",
    "get_bundled_catalog_dir",
]
