"""Canonical Pydantic models shared across all specindex modules.

This is the single source of truth for data shapes in the project. Every other
module imports from here rather than defining its own models. The models fall
into two groups:

**Configuration models** -- resolved from CLI flags, environment variables and
the project-local ``specindex.json``:
    :class:`ProductsFormat` and :class:`BuildConfig`.

**Projection output models** -- produced by the spec projector and consumed by
the artifact writer:
    :class:`HTTPMethod`, :class:`OperationEntry`, :class:`ProductIndex`, and
    :class:`BuildResult`.

All models use Pydantic v2. Resolved schema fragments (parameters, request
bodies, responses) are kept as plain JSON values typed ``Any`` so that they
serialise exactly as they appeared in the source document.
"""

from __future__ import annotations

import enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


DEFAULT_SOURCE_URL = (
    "https://raw.githubusercontent.com/cloudflare/api-schemas/main/openapi.json"
)
DEFAULT_OUTPUT_DIR = "src/data"


# --- Build Config ---


class ProductsFormat(str, enum.Enum):
    """Source language of the generated products artifact.

    ``ts`` emits the ``products.ts`` module consumed by the TypeScript search
    tool; ``py`` emits an equivalent ``products.py`` module.
    """

    TS = "ts"
    PY = "py"

    @property
    def filename(self) -> str:
        """Artifact file name for this format."""
        return f"products.{self.value}"


class BuildConfig(BaseModel):
    """Effective configuration for one build run.

    Produced by :func:`~specindex.config.resolve_config` after merging CLI
    flags, environment variables, the project config, and these defaults.

    Example::

        BuildConfig(
            source="https://example.com/openapi.json",
            output_dir="build/data",
            products_format="py",
        )
    """

    model_config = ConfigDict(extra="forbid")

    source: str = Field(
        default=DEFAULT_SOURCE_URL,
        description="URL, file path, or '-' for stdin",
    )
    output_dir: str = Field(
        default=DEFAULT_OUTPUT_DIR,
        description="Directory that receives both artifacts",
    )
    spec_filename: str = Field(default="spec.json")
    products_format: ProductsFormat = Field(default=ProductsFormat.TS)
    vendor: str = Field(
        default="Cloudflare",
        description="Vendor name used in the products artifact header",
    )
    timeout: float = Field(default=30.0, description="Fetch timeout in seconds")
    shared_visited: bool = Field(
        default=False,
        description=(
            "Share one $ref guard set across sibling branches, reproducing "
            "the legacy build script's output"
        ),
    )

    @field_validator("timeout")
    @classmethod
    def _positive_timeout(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("timeout must be positive")
        return value

    @property
    def products_filename(self) -> str:
        """File name of the products artifact (``products.ts`` or ``products.py``)."""
        return self.products_format.filename


# --- Projection Output Models ---


class HTTPMethod(str, enum.Enum):
    """HTTP methods projected into the reduced spec.

    Declaration order is the order in which methods are emitted for each path.
    Any other key on a path-item object (``options``, ``head``, ``parameters``)
    is ignored.
    """

    GET = "get"
    POST = "post"
    PUT = "put"
    PATCH = "patch"
    DELETE = "delete"


class OperationEntry(BaseModel):
    """The reduced record for one path + HTTP method pair.

    ``parameters``, ``request_body`` and ``responses`` hold ``$ref``-free JSON
    values. Fields that were absent in the source operation are left unset and
    are omitted by :meth:`to_json_dict`.
    """

    model_config = ConfigDict(populate_by_name=True)

    summary: Optional[str] = None
    description: Optional[str] = None
    tags: list[str] = Field(default_factory=list)
    parameters: Any = None
    request_body: Any = Field(default=None, alias="requestBody")
    responses: Any = None

    def to_json_dict(self) -> dict[str, Any]:
        """Return the OpenAPI-cased dict with unset fields dropped.

        A field passed explicitly as ``None`` is kept and serialises to
        ``null``; only fields never set on the model are omitted.
        """
        data = {
            "summary": ("summary", self.summary),
            "description": ("description", self.description),
            "tags": ("tags", list(self.tags)),
            "parameters": ("parameters", self.parameters),
            "requestBody": ("request_body", self.request_body),
            "responses": ("responses", self.responses),
        }
        return {
            key: value
            for key, (name, value) in data.items()
            if name == "tags" or name in self.model_fields_set
        }


class ProductIndex(BaseModel):
    """Product name to path count, in first-seen order."""

    counts: dict[str, int] = Field(default_factory=dict)

    def add(self, product: str) -> None:
        self.counts[product] = self.counts.get(product, 0) + 1

    def sorted_products(self) -> list[str]:
        """Distinct products by descending count.

        The sort is stable, so products with equal counts keep the order in
        which they were first added.
        """
        ranked = sorted(self.counts.items(), key=lambda item: item[1], reverse=True)
        return [product for product, _ in ranked]

    def __len__(self) -> int:
        return len(self.counts)


class BuildResult(BaseModel):
    """Summary of one build run, printed as JSON with ``--json``."""

    source: str
    banner: str
    path_count: int
    endpoint_count: int
    spec_file: str
    spec_size: int = Field(description="Length of the rendered spec.json text")
    products_file: str
    products: list[str] = Field(default_factory=list)
    product_counts: dict[str, int] = Field(
        default_factory=dict, description="Paths per product, for reporting only"
    )
    dry_run: bool = False
