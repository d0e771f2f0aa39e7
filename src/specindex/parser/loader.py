"""Load OpenAPI documents from a URL, local file, or stdin.

This module handles all input I/O for a build run and converts the raw
document into a Python dictionary.  It supports both JSON and YAML formats
with automatic format detection.  No OpenAPI schema validation is performed;
the only structural requirement is that the top level is an object.

The single public function is :func:`load_spec`.  After loading, the raw dict
is handed to :func:`~specindex.parser.projector.project_paths` and
:func:`~specindex.parser.projector.build_product_index`.
"""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import Any

import httpx
import yaml

from specindex.exceptions import FetchError, SpecParseError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0

_YAML_TIMESTAMP_TAG = "tag:yaml.org,2002:timestamp"


class _SpecYAMLLoader(yaml.SafeLoader):
    """Safe loader that leaves date and timestamp scalars as plain strings."""


_SpecYAMLLoader.yaml_implicit_resolvers = {
    first_char: [
        (tag, pattern) for tag, pattern in resolvers if tag != _YAML_TIMESTAMP_TAG
    ]
    for first_char, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}


def load_spec(source: str, timeout: float = DEFAULT_TIMEOUT) -> dict[str, Any]:
    """Load an OpenAPI spec from URL, file path, or stdin ('-').

    Supports JSON and YAML formats.
    Auto-detects format from content/extension.

    Args:
        source: A URL (http/https), file path, or '-' for stdin.
        timeout: Request timeout in seconds (URL sources only).

    Returns:
        The parsed spec as a dictionary.

    Raises:
        FetchError: If a URL source answers with a non-success status or
            cannot be reached.
        SpecParseError: If the content cannot be read or parsed.
    """
    if source == "-":
        return _load_from_stdin()
    elif source.startswith(("http://", "https://")):
        return _load_from_url(source, timeout=timeout)
    else:
        return _load_from_file(source)


def _load_from_stdin() -> dict[str, Any]:
    """Read spec from stdin, parsing as JSON then YAML."""
    try:
        content = sys.stdin.read()
    except Exception as exc:
        raise SpecParseError(f"Failed to read from stdin: {exc}") from exc

    if not content.strip():
        raise SpecParseError("No input received from stdin")

    return _parse_content(content, hint="stdin")


def _load_from_url(url: str, timeout: float = DEFAULT_TIMEOUT) -> dict[str, Any]:
    """Fetch spec from URL with a single GET. Supports JSON and YAML responses.

    Args:
        url: The HTTP(S) URL to fetch.
        timeout: Request timeout in seconds.

    Returns:
        The parsed spec dictionary.

    Raises:
        FetchError: If the response status is not 2xx or the request fails.
        SpecParseError: If the body cannot be parsed.
    """
    logger.debug("GET %s (timeout=%ss)", url, timeout)
    try:
        response = httpx.get(url, timeout=timeout, follow_redirects=True)
        response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        status = exc.response.status_code
        raise FetchError(
            f"Failed to fetch OpenAPI spec: HTTP {status} from {url}",
            status_code=status,
        ) from exc
    except httpx.RequestError as exc:
        raise FetchError(f"Failed to fetch OpenAPI spec from {url}: {exc}") from exc

    content = response.text
    # Use content-type as a hint for parsing
    content_type = response.headers.get("content-type", "")
    hint = ""
    if "json" in content_type:
        hint = "json"
    elif "yaml" in content_type or "yml" in content_type:
        hint = "yaml"

    return _parse_content(content, hint=hint)


def _load_from_file(path: str) -> dict[str, Any]:
    """Load spec from local file.

    Supports .json, .yaml, and .yml extensions. Falls back to content-based
    detection if the extension is not recognized.

    Raises:
        SpecParseError: If the file cannot be read or content cannot be parsed.
    """
    file_path = Path(path)
    if not file_path.is_file():
        raise SpecParseError(f"Spec file not found: {path}")

    try:
        content = file_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise SpecParseError(f"Failed to read spec file {path}: {exc}") from exc

    if not content.strip():
        raise SpecParseError(f"Spec file is empty: {path}")

    suffix = file_path.suffix.lower()
    hint = ""
    if suffix == ".json":
        hint = "json"
    elif suffix in (".yaml", ".yml"):
        hint = "yaml"

    return _parse_content(content, hint=hint)


def _parse_content(content: str, hint: str = "") -> dict[str, Any]:
    """Parse content as JSON or YAML.

    Tries JSON first (unless hint is 'yaml'), then falls back to YAML.
    Valid JSON is also valid YAML, but JSON parsing is stricter and much
    faster on multi-megabyte vendor specs.

    Args:
        content: The raw string content.
        hint: Optional format hint ('json' or 'yaml').

    Returns:
        The parsed dictionary.

    Raises:
        SpecParseError: If the content cannot be parsed as either format.
    """
    json_error: Exception | None = None
    yaml_error: Exception | None = None

    if hint != "yaml":
        try:
            result = json.loads(content)
        except json.JSONDecodeError as exc:
            json_error = exc
            if hint == "json":
                raise SpecParseError(f"Invalid JSON: {exc}") from exc
        else:
            if not isinstance(result, dict):
                raise SpecParseError(
                    "Spec must be a JSON/YAML object (got "
                    f"{type(result).__name__})"
                )
            return result

    try:
        result = yaml.load(content, Loader=_SpecYAMLLoader)
    except yaml.YAMLError as exc:
        yaml_error = exc
    else:
        if not isinstance(result, dict):
            raise SpecParseError(
                "Spec must be a JSON/YAML object (got "
                f"{type(result).__name__ if result is not None else 'empty document'})"
            )
        return result

    msg = "Failed to parse spec as JSON or YAML"
    if json_error:
        msg += f"\n  JSON error: {json_error}"
    if yaml_error:
        msg += f"\n  YAML error: {yaml_error}"
    raise SpecParseError(msg)
