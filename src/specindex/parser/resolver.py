"""Resolve ``$ref`` JSON Reference pointers inside an OpenAPI document.

OpenAPI documents commonly use ``$ref`` pointers (e.g.,
``{"$ref": "#/components/schemas/Zone"}``) to avoid repetition.  This module
walks an arbitrary JSON value and returns a new value in which every
reference has been replaced by the (recursively resolved) object it points
to inside the same document.

Only **internal** references (those starting with ``#/``) can be resolved.
A reference that cannot be followed -- external, or pointing at a missing
key -- is not an error: it resolves to *no value*.  Inside a mapping the key
is dropped, inside a list the element becomes ``None``.

Circular references are detected via a guard set of ``$ref`` strings on the
active resolution chain.  At the cycle point the reference is replaced by a
terminal placeholder ``{"$circular": "<ref>"}``.

The public functions are :func:`resolve_refs` and :func:`lookup_ref`.
"""

from __future__ import annotations

import logging
from typing import Any

logger = logging.getLogger(__name__)

REF_KEY = "$ref"
CIRCULAR_KEY = "$circular"
_ROOT_PREFIX = "#/"


class _Missing:
    """Sentinel type for a reference that resolves to nothing."""

    def __repr__(self) -> str:
        return "MISSING"


MISSING = _Missing()


def resolve_refs(
    value: Any,
    document: dict[str, Any],
    *,
    shared_visited: bool = False,
    missing: Any = None,
) -> Any:
    """Return *value* with every ``$ref`` replaced by its resolved target.

    The input is never mutated; dicts and lists in the result are new
    objects.

    Args:
        value: Any JSON-compatible value -- ``None``, a scalar, a list, or a
            dict (which may itself be a reference marker).
        document: The full OpenAPI document that references point into.
        shared_visited: When ``True``, one guard set is shared by every branch
            of this call, so a reference already expanded in one branch is
            reported as circular in later sibling branches.  This reproduces
            the output of the legacy build script.  The default scopes the
            guard set to the active resolution chain only.
        missing: Returned instead of the result when *value* itself is a
            reference that cannot be followed.

    Returns:
        The resolved value, or *missing* if *value* itself is a reference
        that cannot be followed.

    Example::

        doc = {"components": {"schemas": {"Id": {"type": "string"}}}}
        resolve_refs({"$ref": "#/components/schemas/Id"}, doc)
        # -> {"type": "string"}
    """
    result = _deep_resolve(value, document, set(), shared_visited)
    return missing if result is MISSING else result


def lookup_ref(ref: str, document: dict[str, Any]) -> Any:
    """Follow a single ``#/``-rooted JSON Pointer through *document*.

    Handles RFC 6901 escaping (``~1`` for ``/``, ``~0`` for ``~``).  Dicts
    are navigated by key and lists by integer index.

    Args:
        ref: The ``$ref`` string (e.g., ``"#/components/schemas/Zone"``).
        document: The root document to resolve against.

    Returns:
        The raw (unresolved) target value, or :data:`MISSING` if the pointer
        is external or any segment does not exist.
    """
    if not ref.startswith(_ROOT_PREFIX):
        logger.debug("External $ref not followed: %s", ref)
        return MISSING

    current: Any = document
    for segment in ref[len(_ROOT_PREFIX):].split("/"):
        segment = segment.replace("~1", "/").replace("~0", "~")

        if isinstance(current, dict):
            if segment not in current:
                logger.debug("Unresolved $ref %s: key '%s' not found", ref, segment)
                return MISSING
            current = current[segment]
        elif isinstance(current, list):
            try:
                current = current[int(segment)]
            except (ValueError, IndexError):
                logger.debug("Unresolved $ref %s: bad index '%s'", ref, segment)
                return MISSING
        else:
            logger.debug(
                "Unresolved $ref %s: cannot navigate into %s",
                ref,
                type(current).__name__,
            )
            return MISSING

    return current


def _is_ref(obj: dict[str, Any]) -> bool:
    return isinstance(obj.get(REF_KEY), str)


def _deep_resolve(
    obj: Any,
    document: dict[str, Any],
    seen: set[str],
    shared: bool,
) -> Any:
    """Recursively resolve all ``$ref`` pointers within *obj*.

    Walks dicts and lists depth-first.  A resolved target is processed in
    turn since it may contain further references.  Unless *shared* is set,
    a **new** guard set is created when a reference is entered, so that
    parallel sibling references to the same target do not interfere.
    """
    if isinstance(obj, dict):
        if _is_ref(obj):
            ref = obj[REF_KEY]
            if ref in seen:
                return {CIRCULAR_KEY: ref}
            if shared:
                seen.add(ref)
            else:
                seen = seen | {ref}
            target = lookup_ref(ref, document)
            if target is MISSING:
                return MISSING
            return _deep_resolve(target, document, seen, shared)

        resolved: dict[str, Any] = {}
        for key, value in obj.items():
            item = _deep_resolve(value, document, seen, shared)
            if item is not MISSING:
                resolved[key] = item
        return resolved

    if isinstance(obj, list):
        items = [_deep_resolve(item, document, seen, shared) for item in obj]
        return [None if item is MISSING else item for item in items]

    # Scalars pass through unchanged
    return obj
