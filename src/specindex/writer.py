"""Render and persist the build artifacts.

Two files are produced in the configured output directory:

* ``spec.json`` -- ``{"paths": {path: {method: operation}}}`` with every
  ``$ref`` inlined, two-space indented, no trailing newline.
* ``products.ts`` (or ``products.py``) -- a generated module exporting the
  ordered product list and a type over its members.

Rendering is kept separate from writing so ``--dry-run`` can report sizes
without touching the filesystem.
"""

from __future__ import annotations

import json
from pathlib import Path

from specindex.config import atomic_write
from specindex.models import BuildConfig, OperationEntry, ProductsFormat


def render_spec_json(paths: dict[str, dict[str, OperationEntry]]) -> str:
    """Serialise the reduced paths mapping to the ``spec.json`` text."""
    document = {
        "paths": {
            path: {method: entry.to_json_dict() for method, entry in methods.items()}
            for path, methods in paths.items()
        }
    }
    return json.dumps(document, indent=2, ensure_ascii=False)


def _render_ts(products: list[str], vendor: str) -> str:
    array = json.dumps(products, separators=(",", ":"), ensure_ascii=False)
    return (
        f"// Auto-generated list of {vendor} products\n"
        f"export const PRODUCTS = {array} as const;\n"
        "export type Product = typeof PRODUCTS[number];\n"
    )


def _render_py(products: list[str], vendor: str) -> str:
    literals = [json.dumps(product, ensure_ascii=False) for product in products]
    members = ", ".join(literals)
    if len(literals) == 1:
        members += ","
    product_type = f"Literal[{', '.join(literals)}]" if literals else "str"
    return (
        f"# Auto-generated list of {vendor} products\n"
        "from typing import Literal\n"
        "\n"
        f"PRODUCTS = ({members})\n"
        "\n"
        f"Product = {product_type}\n"
    )


def render_products(
    products: list[str],
    fmt: ProductsFormat = ProductsFormat.TS,
    vendor: str = "Cloudflare",
) -> str:
    """Render the products module source in the requested language."""
    if fmt == ProductsFormat.PY:
        return _render_py(products, vendor)
    return _render_ts(products, vendor)


def write_artifacts(
    config: BuildConfig,
    spec_text: str,
    products_text: str,
) -> tuple[Path, Path]:
    """Write both artifacts under ``config.output_dir``.

    The output directory is created if absent. Errors from the filesystem
    propagate unchanged.

    Returns:
        ``(spec_path, products_path)``.
    """
    output_dir = Path(config.output_dir)
    spec_path = output_dir / config.spec_filename
    products_path = output_dir / config.products_filename

    atomic_write(spec_path, spec_text)
    atomic_write(products_path, products_text)
    return spec_path, products_path
