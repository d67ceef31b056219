"""specflat -- Flatten OpenAPI 3.0 documents into typed entrypoints.

This package reads an OpenAPI document, resolves its ``$ref`` pointers
against the ``components`` registry, infers a native type for every
parameter, request body and response schema, and emits one flat
:class:`~specflat.models.Entrypoint` per operation. Anything that cannot be
resolved or typed is reported as a :class:`~specflat.models.Diagnostic`
rather than aborting the run.

Typical workflow::

    specflat entrypoints petstore.yaml     # table of typed operations
    specflat diagnostics petstore.yaml     # what had to be dropped

Modules:
    app: Typer application and CLI entry point.
    document: Pydantic models of the OpenAPI document tree.
    models: Native types, extractor output and config models.
    config: XDG-aware configuration and precedence resolution.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes following clig.dev conventions.
    output: stdout/stderr formatting system with Rich support.
    parser: Loading, reference resolution, type inference, extraction.
"""

__version__ = "0.1.0"
