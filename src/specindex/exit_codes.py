"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~specindex.exceptions.SpecIndexError` subclass.
Build scripts can inspect the exit code to tell a network failure from a
malformed document without parsing stderr.

Example::

    $ specindex build --source https://example.com/missing.json
    $ echo $?
    6   # EXIT_FETCH_ERROR -- the server answered 404
"""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred (including filesystem failures)."""

EXIT_FETCH_ERROR = 6
"""The spec could not be fetched (non-2xx status, timeout, DNS failure)."""

EXIT_SPEC_PARSE_ERROR = 7
"""The fetched document could not be parsed as JSON or YAML."""

EXIT_INTERRUPTED = 130
"""The run was cancelled with Ctrl-C."""
