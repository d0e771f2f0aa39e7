"""Project an OpenAPI document into the reduced search index.

This module walks the ``paths`` object of a raw (unresolved) OpenAPI
document and produces the two data sets written by the build:

* ``project_paths`` -- for every path + HTTP method pair, an
  :class:`~specindex.models.OperationEntry` holding summary, description,
  product-enriched tags, and ``$ref``-free parameters, request body and
  responses.
* ``build_product_index`` -- a :class:`~specindex.models.ProductIndex`
  counting how many paths belong to each *product*.

A product is the path segment right after the ``{account_id}`` or
``{zone_id}`` placeholder, e.g. ``/accounts/{account_id}/workers/scripts``
belongs to ``workers``.

Nothing here raises on missing data: absent fields are simply omitted from
the output.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Optional

from specindex.models import HTTPMethod, OperationEntry, ProductIndex
from specindex.parser.resolver import MISSING, resolve_refs

logger = logging.getLogger(__name__)

HTTP_METHODS: tuple[str, ...] = tuple(m.value for m in HTTPMethod)

_PRODUCT_PATTERNS = (
    re.compile(r"/accounts/\{[^}]+\}/([^/]+)"),
    re.compile(r"/zones/\{[^}]+\}/([^/]+)"),
)

# OpenAPI key and OperationEntry field for each resolved value, in output order.
_RESOLVED_FIELDS = (
    ("parameters", "parameters"),
    ("requestBody", "request_body"),
    ("responses", "responses"),
)


def extract_product(path: str) -> Optional[str]:
    """Return the product segment of *path*, or ``None``.

    The account pattern is tried before the zone pattern, and only the first
    occurrence of each is considered.

    Example::

        extract_product("/accounts/{account_id}/workers/scripts")  # "workers"
        extract_product("/zones/{zone_id}/dns_records")            # "dns_records"
        extract_product("/user/tokens")                            # None
    """
    for pattern in _PRODUCT_PATTERNS:
        match = pattern.search(path)
        if match:
            return match.group(1)
    return None


def build_tags(path: str, tags: Optional[list[str]]) -> list[str]:
    """Copy *tags* and prepend the path's product unless already present.

    The presence check compares lower-cased strings for exact equality, so
    ``"DNS Records"`` does not count as ``"dns_records"``.
    """
    result = list(tags) if tags else []
    product = extract_product(path)
    if product and not any(tag.lower() == product.lower() for tag in result):
        result.insert(0, product)
    return result


def build_operation_entry(
    path: str,
    operation: dict[str, Any],
    document: dict[str, Any],
    *,
    shared_visited: bool = False,
) -> OperationEntry:
    """Build the reduced record for one operation.

    ``parameters``, ``requestBody`` and ``responses`` are resolved
    independently; cycle tracking never crosses these three fields. Keys
    absent from *operation* stay unset on the entry, while an explicit
    ``null`` is carried through. A top-level ``$ref`` that cannot be
    followed leaves its field unset.

    Args:
        path: The path key the operation lives under.
        operation: The raw OpenAPI *Operation Object*.
        document: The full document that ``$ref`` pointers resolve against.
        shared_visited: Forwarded to :func:`~specindex.parser.resolver.resolve_refs`.
    """
    fields: dict[str, Any] = {"tags": build_tags(path, operation.get("tags"))}
    for key in ("summary", "description"):
        if key in operation:
            fields[key] = operation[key]
    for key, name in _RESOLVED_FIELDS:
        if key not in operation:
            continue
        resolved = resolve_refs(
            operation[key], document, shared_visited=shared_visited, missing=MISSING
        )
        if resolved is MISSING:
            continue
        fields[name] = resolved
    return OperationEntry(**fields)


def _iter_operations(path_item: dict[str, Any]):  # noqa: ANN202
    """Yield ``(method, operation)`` for each recognised method present."""
    for method in HTTP_METHODS:
        operation = path_item.get(method)
        if isinstance(operation, dict):
            yield method, operation


def _path_items(document: dict[str, Any]) -> dict[str, Any]:
    paths = document.get("paths")
    return paths if isinstance(paths, dict) else {}


def project_paths(
    document: dict[str, Any],
    *,
    shared_visited: bool = False,
) -> dict[str, dict[str, OperationEntry]]:
    """Build the reduced ``paths`` mapping for the whole document.

    Paths keep document order.  A path whose item is null or not an object
    is skipped entirely; a path with no recognised methods still appears,
    mapped to an empty dict.

    Returns:
        ``{path: {method: OperationEntry}}``.
    """
    reduced: dict[str, dict[str, OperationEntry]] = {}

    for path, path_item in _path_items(document).items():
        if not isinstance(path_item, dict):
            logger.debug("Skipping null path item: %s", path)
            continue

        reduced[path] = {
            method: build_operation_entry(
                path, operation, document, shared_visited=shared_visited
            )
            for method, operation in _iter_operations(path_item)
        }

    return reduced


def count_endpoints(document: dict[str, Any]) -> int:
    """Count path + method pairs over the recognised HTTP methods."""
    total = 0
    for path_item in _path_items(document).values():
        if isinstance(path_item, dict):
            total += sum(1 for _ in _iter_operations(path_item))
    return total


def build_product_index(document: dict[str, Any]) -> ProductIndex:
    """Count the paths belonging to each product.

    Path keys are visited in sorted order, which fixes the first-seen order
    used to break ties in :meth:`~specindex.models.ProductIndex.sorted_products`.
    """
    index = ProductIndex()
    for path in sorted(_path_items(document)):
        product = extract_product(path)
        if product:
            index.add(product)
    return index


def describe_document(document: dict[str, Any]) -> str:
    """Return a one-line banner: ``"<openapi> | <title> v<version>"``."""
    info = document.get("info")
    if not isinstance(info, dict):
        info = {}
    return (
        f"{document.get('openapi', '?')} | "
        f"{info.get('title', 'Untitled API')} v{info.get('version', '?')}"
    )
