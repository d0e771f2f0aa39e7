"""One end-to-end build run.

:func:`run_build` is the whole program minus the CLI: load the document,
project it, render both artifacts and write them.  Progress is reported on
stderr through :mod:`specindex.output`; every failure propagates to the
caller, so either both artifacts are written or the run aborts.
"""

from __future__ import annotations

import logging
from pathlib import Path

from specindex.models import BuildConfig, BuildResult
from specindex.output import info
from specindex.parser import (
    build_product_index,
    count_endpoints,
    describe_document,
    load_spec,
    project_paths,
)
from specindex.writer import render_products, render_spec_json, write_artifacts

logger = logging.getLogger(__name__)


def run_build(config: BuildConfig, dry_run: bool = False) -> BuildResult:
    """Fetch, project and write the spec described by *config*.

    Args:
        config: The resolved build configuration.
        dry_run: Compute and render everything but write nothing.

    Returns:
        A :class:`~specindex.models.BuildResult` summarising the run.

    Raises:
        FetchError: The source URL answered with a non-success status or
            could not be reached.
        SpecParseError: The document is not a JSON/YAML object.
        OSError: An artifact could not be written.
    """
    info(f"Fetching OpenAPI spec from: {config.source}")
    document = load_spec(config.source, timeout=config.timeout)

    banner = describe_document(document)
    paths = document.get("paths")
    path_count = len(paths) if isinstance(paths, dict) else 0
    endpoint_count = count_endpoints(document)
    info(banner)
    info(f"Found {path_count} paths")
    info(f"Found {endpoint_count} endpoints")

    if config.shared_visited:
        logger.debug("Using shared $ref guard set (legacy output)")
    reduced = project_paths(document, shared_visited=config.shared_visited)
    spec_text = render_spec_json(reduced)

    index = build_product_index(document)
    products = index.sorted_products()
    products_text = render_products(products, config.products_format, config.vendor)

    output_dir = Path(config.output_dir)
    spec_path = output_dir / config.spec_filename
    products_path = output_dir / config.products_filename

    if dry_run:
        info(f"Dry run: would write {spec_path} and {products_path}")
    else:
        spec_path, products_path = write_artifacts(config, spec_text, products_text)
        info(f"Wrote spec to {spec_path} ({len(spec_text) / 1024:.0f} KB)")
        info(f"Wrote products to {products_path} ({len(products)} products)")

    return BuildResult(
        source=config.source,
        banner=banner,
        path_count=path_count,
        endpoint_count=endpoint_count,
        spec_file=str(spec_path),
        spec_size=len(spec_text),
        products_file=str(products_path),
        products=products,
        product_counts=dict(index.counts),
        dry_run=dry_run,
    )
