"""Exception hierarchy for contractgen.

All exceptions inherit from :class:`ContractgenError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`contractgen.exit_codes`.
The top-level error handler in :func:`contractgen.app.main` catches
``ContractgenError`` and exits with the appropriate code, while unexpected
exceptions produce a crash log and exit with :data:`EXIT_GENERIC_FAILURE`.

Every validation error is fatal: the contract that raised it produces no
output at all.

Subclass hierarchy::

    ContractgenError (exit 1)
    +-- ConfigurationError     (exit 2)
    |   +-- MissingName
    |   +-- InvalidName
    |   +-- UnknownFeature
    |   +-- UnknownPage
    |   +-- ProjectConfigError
    +-- InvalidEnumError       (exit 3)
    |   +-- InvalidMethod
    |   +-- InvalidReturnData
    |   +-- InvalidCacheStrategy
    +-- InvalidValueError      (exit 4)
    |   +-- InvalidTtl
    |   +-- InvalidBoolean
    +-- IoError                (exit 5)
"""

from __future__ import annotations

from typing import Iterable, Optional

from contractgen.exit_codes import (
    EXIT_CONFIGURATION_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_ENUM,
    EXIT_INVALID_VALUE,
    EXIT_IO_ERROR,
)


class ContractgenError(Exception):
    """Base exception for all contractgen errors.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


# --- Configuration ---


class ConfigurationError(ContractgenError):
    """Raised for missing identifiers and unknown feature/page directories."""

    exit_code = EXIT_CONFIGURATION_ERROR


class MissingName(ConfigurationError):
    """Raised when the endpoint, feature or page name is empty."""


class InvalidName(ConfigurationError):
    """Raised when a name would not start a Python identifier."""


class UnknownFeature(ConfigurationError):
    """Raised when the feature directory does not exist in the project tree."""


class UnknownPage(ConfigurationError):
    """Raised when the page directory does not exist under its feature."""


class ProjectConfigError(ConfigurationError):
    """Raised when ``contractgen.yaml`` or a batch file cannot be parsed."""


# --- Enumerations ---


class InvalidEnumError(ContractgenError):
    """Raised when a value falls outside one of the fixed enumerations.

    Args:
        field: Name of the offending input field (``method``, ``return-data``...).
        value: The rejected raw value.
        allowed: The allowed values, in display order.
    """

    exit_code = EXIT_INVALID_ENUM

    def __init__(self, field: str, value: str, allowed: Iterable[str]):
        self.field = field
        self.value = value
        self.allowed = tuple(allowed)
        super().__init__(
            f'Invalid {field} "{value}". Allowed values: {", ".join(self.allowed)}'
        )


class InvalidMethod(InvalidEnumError):
    """Raised for a method outside the 16-value method set."""


class InvalidReturnData(InvalidEnumError):
    """Raised for a return-data kind outside the 6-value set."""


class InvalidCacheStrategy(InvalidEnumError):
    """Raised for a cache strategy outside the 4-value set."""


# --- Values ---


class InvalidValueError(ContractgenError):
    """Raised when a scalar field cannot be parsed.

    Args:
        message: Error description.
        value: The rejected raw value, kept for callers that report it.
    """

    exit_code = EXIT_INVALID_VALUE

    def __init__(self, message: str, value: Optional[str] = None):
        super().__init__(message)
        self.value = value


class InvalidTtl(InvalidValueError):
    """Raised when ``ttl`` is not an integer or is negative."""


class InvalidBoolean(InvalidValueError):
    """Raised when ``keep-expired-cache`` is not exactly ``true`` or ``false``."""


# --- I/O ---


class IoError(ContractgenError):
    """Raised when reading or writing a file of the target project fails."""

    exit_code = EXIT_IO_ERROR
