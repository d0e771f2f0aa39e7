"""OpenAPI parser -- load a document, resolve ``$ref`` pointers, and project it.

This sub-package turns a raw vendor OpenAPI document (JSON or YAML, remote URL,
local file or stdin) into the reduced data written by a build.

Typical usage::

    from specindex.parser import load_spec, project_paths, build_product_index

    raw = load_spec("https://example.com/openapi.json")
    paths = project_paths(raw)
    products = build_product_index(raw).sorted_products()

Sub-modules:

* :mod:`~specindex.parser.loader` -- I/O layer (URL, file, stdin) plus format
  detection.
* :mod:`~specindex.parser.resolver` -- Recursive ``$ref`` resolution with
  circular-reference detection.
* :mod:`~specindex.parser.projector` -- Per-operation reduction, product
  derivation and the product index.
"""

from specindex.parser.loader import load_spec
from specindex.parser.projector import (
    build_product_index,
    count_endpoints,
    describe_document,
    extract_product,
    project_paths,
)
from specindex.parser.resolver import resolve_refs

__all__ = [
    "load_spec",
    "resolve_refs",
    "extract_product",
    "project_paths",
    "count_endpoints",
    "build_product_index",
    "describe_document",
]
