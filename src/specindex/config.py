"""Build configuration with XDG paths, atomic writes, and precedence resolution.

This module handles all configuration for a specindex build:

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.specindex/`` on macOS and Windows. Only the data directory is used,
  for crash logs. See :func:`get_data_dir`.
* **Project config** -- an optional ``./specindex.json`` holding any
  :class:`~specindex.models.BuildConfig` field. See :func:`load_project_config`.
* **Precedence resolution** -- :func:`resolve_config` merges CLI flags,
  environment variables, project-local config and defaults into the final
  :class:`~specindex.models.BuildConfig`.

Artifact writes use an atomic temp-file-then-rename strategy
(:func:`atomic_write`) so a consumer never reads a half-written file.
"""

from __future__ import annotations

import json
import os
import platform
import tempfile
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from specindex.exceptions import ConfigError
from specindex.models import BuildConfig

_APP_NAME = "specindex"
_PROJECT_CONFIG_FILENAME = "specindex.json"

# Environment variable -> BuildConfig field
ENV_OVERRIDES = {
    "SPECINDEX_SOURCE": "source",
    "SPECINDEX_OUTPUT_DIR": "output_dir",
    "SPECINDEX_PRODUCTS_FORMAT": "products_format",
}


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform supports XDG Base Directory spec (Linux/FreeBSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def _fallback_base_dir() -> Path:
    """Fallback base directory for non-XDG platforms (macOS, Windows)."""
    return Path.home() / f".{_APP_NAME}"


def _xdg_base(env_var: str, default_segments: tuple[str, ...]) -> Path:
    """Resolve an XDG base directory from an env var with fallback segments under $HOME."""
    env_value = os.environ.get(env_var, "")
    if env_value:
        return Path(env_value)
    base = Path.home()
    for seg in default_segments:
        base = base / seg
    return base


def get_data_dir() -> Path:
    """Return the data directory (crash logs), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/specindex/`` (default ``~/.local/share/specindex/``).
    On macOS/Windows: ``~/.specindex/logs/``.

    Returns:
        Absolute path to the data directory (guaranteed to exist).
    """
    if _is_xdg_platform():
        base = _xdg_base("XDG_DATA_HOME", (".local", "share"))
        path = base / _APP_NAME
    else:
        path = _fallback_base_dir() / "logs"
    path.mkdir(parents=True, exist_ok=True)
    return path


# --- Atomic file writes ---


def atomic_write(path: Path, data: str) -> None:
    """Write data to file atomically using temp file + rename.

    Parent directories are created as needed. The temporary file lives in
    the same directory as *path* so that ``os.replace`` is an atomic rename
    on POSIX systems. On any failure the temp file is cleaned up and the
    exception propagates.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    fd = None
    tmp_path: Optional[str] = None
    try:
        fd = tempfile.NamedTemporaryFile(
            mode="w",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
            encoding="utf-8",
            newline="",
        )
        tmp_path = fd.name
        fd.write(data)
        fd.flush()
        os.fsync(fd.fileno())
        fd.close()
        fd = None  # prevent double-close in finally
        os.replace(tmp_path, path)
    except BaseException:
        # Clean up the temp file on any error (including KeyboardInterrupt).
        if fd is not None:
            fd.close()
        if tmp_path is not None:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
        raise


# --- Project-local config ---


def load_project_config(directory: Optional[Path] = None) -> Optional[dict[str, Any]]:
    """Load project-local configuration from ``specindex.json``.

    Args:
        directory: Directory to look in. Defaults to the current working
            directory.

    Returns:
        The parsed JSON object, or ``None`` if the file does not exist.

    Raises:
        ConfigError: If the file exists but is not a JSON object.
    """
    path = (directory or Path.cwd()) / _PROJECT_CONFIG_FILENAME
    if not path.is_file():
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, OSError) as exc:
        raise ConfigError(f"Invalid project config at {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid project config at {path}: expected a JSON object")
    return data


# --- Precedence resolution ---


def resolve_config(
    cli_overrides: Optional[dict[str, Any]] = None,
    project_dir: Optional[Path] = None,
) -> BuildConfig:
    """Resolve the build config with full precedence chain.

    Precedence (high to low):
        1. CLI flags (non-``None`` entries of ``cli_overrides``)
        2. Environment variables (``SPECINDEX_SOURCE``,
           ``SPECINDEX_OUTPUT_DIR``, ``SPECINDEX_PRODUCTS_FORMAT``)
        3. Project config (``./specindex.json``)
        4. Defaults

    Args:
        cli_overrides: Field name to value, as collected by the CLI. ``None``
            values mean "not given".
        project_dir: Where to look for ``specindex.json``. Defaults to the
            current working directory.

    Returns:
        The effective :class:`~specindex.models.BuildConfig`.

    Raises:
        ConfigError: If the merged values fail validation.
    """
    # 4 + 3. Defaults are filled in by the model; project config layers on top
    merged: dict[str, Any] = dict(load_project_config(project_dir) or {})

    # 2. Environment variables
    for env_var, field in ENV_OVERRIDES.items():
        value = os.environ.get(env_var)
        if value:
            merged[field] = value

    # 1. CLI flags (highest precedence)
    for field, value in (cli_overrides or {}).items():
        if value is not None:
            merged[field] = value

    try:
        return BuildConfig.model_validate(merged)
    except ValidationError as exc:
        raise ConfigError(f"Invalid build configuration: {exc}") from exc
