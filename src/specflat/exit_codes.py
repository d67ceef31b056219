"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~specflat.exceptions.SpecflatError` subclass.
External tooling (CI scripts, shell wrappers) can inspect the exit code to
determine the failure class without parsing stderr.

Example::

    $ specflat --fail-on-diagnostics entrypoints petstore.yaml
    $ echo $?
    8   # EXIT_DIAGNOSTICS -- some parameters or responses were dropped
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments."""

EXIT_CONNECTION_ERROR = 6
"""A network-level error occurred while fetching a remote document."""

EXIT_SPEC_PARSE_ERROR = 7
"""The OpenAPI document could not be loaded or deserialized."""

EXIT_DIAGNOSTICS = 8
"""Extraction finished but recorded diagnostics (only with ``--fail-on-diagnostics``)."""

EXIT_EXTRACTION_ERROR = 9
"""A reference, type or extraction error escaped to the top level."""
