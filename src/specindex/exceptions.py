"""Exception hierarchy for specindex.

All exceptions inherit from :class:`SpecIndexError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`specindex.exit_codes`.
The top-level error handler in :func:`specindex.app.main` catches
``SpecIndexError`` and exits with the appropriate code, while unexpected
exceptions produce a crash log and exit with :data:`EXIT_GENERIC_FAILURE`.

Subclass hierarchy::

    SpecIndexError (exit 1)
    +-- FetchError          (exit 6)
    +-- SpecParseError      (exit 7)
    +-- ConfigError         (exit 1)
"""

from __future__ import annotations

from typing import Optional

from specindex.exit_codes import (
    EXIT_FETCH_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_SPEC_PARSE_ERROR,
)


class SpecIndexError(Exception):
    """Base exception for all specindex errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`specindex.exit_codes`. The entry point catches
    this exception type and calls ``sys.exit(exc.exit_code)``.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class FetchError(SpecIndexError):
    """Raised when the spec cannot be retrieved from its URL.

    ``status_code`` is set when the server answered with a non-success
    status, and ``None`` for transport-level failures (timeout, DNS
    resolution, connection refused).
    """

    exit_code = EXIT_FETCH_ERROR

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class SpecParseError(SpecIndexError):
    """Raised when the fetched document is not a JSON/YAML object."""

    exit_code = EXIT_SPEC_PARSE_ERROR


class ConfigError(SpecIndexError):
    """Raised for configuration problems (invalid project config, bad env values)."""

    exit_code = EXIT_GENERIC_FAILURE
