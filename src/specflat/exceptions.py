"""Exception hierarchy for specflat.

All exceptions inherit from :class:`SpecflatError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`specflat.exit_codes`.
The top-level error handler in :func:`specflat.app.main` catches
``SpecflatError`` and exits with the appropriate code.

Errors raised while processing a single parameter, request body or response
(:class:`ReferenceError_` and :class:`TypeError_` subclasses) are caught by
the extractor and turned into :class:`~specflat.models.Diagnostic` records.
:class:`MissingOperationIdError` drops a whole operation. Loader errors
(:class:`SpecParseError`) abort the run.

Subclass hierarchy::

    SpecflatError (exit 1)
    +-- InvalidUsageError        (exit 2)
    +-- ConnectionError_         (exit 6)
    +-- SpecParseError           (exit 7)
    +-- ConfigError              (exit 1)
    +-- ReferenceError_          (exit 9)
    |   +-- RefNotFoundError
    |   +-- InvalidPointerError
    |   +-- RecursiveReferenceError
    |   +-- NotConcreteError
    +-- TypeError_               (exit 9)
    |   +-- AmbiguousTypeArrayError
    |   +-- MissingItemsError
    |   +-- NullTypeUnsupportedError
    |   +-- FormatTypeMismatchError
    |   +-- NoTypeSpecifiedError
    +-- ExtractionError          (exit 9)
        +-- MissingOperationIdError
"""

from specflat.exit_codes import (
    EXIT_CONNECTION_ERROR,
    EXIT_EXTRACTION_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_SPEC_PARSE_ERROR,
)


class SpecflatError(Exception):
    """Base exception for all specflat errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`specflat.exit_codes`. The entry point catches
    this exception type and calls ``sys.exit(exc.exit_code)``.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(SpecflatError):
    """Raised for invalid CLI arguments."""

    exit_code = EXIT_INVALID_USAGE


class ConnectionError_(SpecflatError):
    """Raised on network-level failures while fetching a remote document.

    Named with a trailing underscore to avoid shadowing the built-in
    ``ConnectionError``.
    """

    exit_code = EXIT_CONNECTION_ERROR


class SpecParseError(SpecflatError):
    """Raised when the OpenAPI document cannot be loaded or deserialized."""

    exit_code = EXIT_SPEC_PARSE_ERROR


class ConfigError(SpecflatError):
    """Raised for configuration problems (invalid JSON, bad values)."""

    exit_code = EXIT_GENERIC_FAILURE


# --- Reference resolution ---


class ReferenceError_(SpecflatError):
    """Base class for ``$ref`` resolution failures.

    Named with a trailing underscore to avoid shadowing the built-in
    ``ReferenceError``.
    """

    exit_code = EXIT_EXTRACTION_ERROR


class RefNotFoundError(ReferenceError_):
    """The pointer's name is not present in the registry."""

    def __init__(self, name: str):
        super().__init__(f"Reference '{name}' not found in components")
        self.name = name


class InvalidPointerError(ReferenceError_):
    """The pointer string has no ``/`` separator before its name segment."""

    def __init__(self, pointer: str):
        super().__init__(f"Invalid reference pointer: '{pointer}'")
        self.pointer = pointer


class RecursiveReferenceError(ReferenceError_):
    """The registry entry a pointer names is itself a reference."""

    def __init__(self, pointer: str):
        super().__init__(
            f"Recursive reference: '{pointer}' points at another $ref"
        )
        self.pointer = pointer


class NotConcreteError(ReferenceError_):
    """A reference was found where no registry is available to resolve it."""

    def __init__(self, pointer: str):
        super().__init__(
            f"Reference '{pointer}' cannot be resolved: no registry available"
        )
        self.pointer = pointer


# --- Type inference ---


class TypeError_(SpecflatError):
    """Base class for schema-to-native-type inference failures.

    Named with a trailing underscore to avoid shadowing the built-in
    ``TypeError``.
    """

    exit_code = EXIT_EXTRACTION_ERROR


class AmbiguousTypeArrayError(TypeError_):
    """The schema declares more than one type tag."""


class MissingItemsError(TypeError_):
    """An ``array`` schema has no (or an empty) ``items`` description."""


class NullTypeUnsupportedError(TypeError_):
    """The schema's only type tag is ``null``."""


class FormatTypeMismatchError(TypeError_):
    """A known ``format`` is not compatible with the declared ``type``."""


class NoTypeSpecifiedError(TypeError_):
    """There is no schema to infer from (no ``schema`` and no ``content``)."""


# --- Extraction ---


class ExtractionError(SpecflatError):
    """Base class for failures that drop a whole operation."""

    exit_code = EXIT_EXTRACTION_ERROR


class MissingOperationIdError(ExtractionError):
    """The operation has no ``operationId``."""
