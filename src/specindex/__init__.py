"""specindex -- Flatten a vendor OpenAPI spec into a searchable index.

This package fetches a vendor's OpenAPI document, inlines its internal
``$ref`` pointers, and writes two build artifacts for a downstream search
tool: a reduced ``spec.json`` keyed by path and method, and a generated list
of *products* derived from the path structure.

Typical workflow::

    specindex build                              # default Cloudflare schema
    specindex build --source openapi.json --output-dir build/data

Modules:
    app: Typer application and CLI entry point.
    pipeline: One end-to-end build run.
    models: Pydantic models for configuration and reduced output.
    config: Build configuration and precedence resolution.
    writer: Artifact rendering and atomic persistence.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes following clig.dev conventions.
    output: stdout/stderr formatting system with Rich support.
"""

__version__ = "0.1.0"
