"""Numeric process exit codes for contractgen.

Each constant maps to one error category of the contract compiler and is
referenced by the corresponding :class:`~contractgen.exceptions.ContractgenError`
subclass. Wrapper scripts can inspect the exit code to tell a bad operator
input apart from a file-system failure without parsing stderr.

Example::

    $ contractgen api login -f auth -p login --method fetch
    $ echo $?
    3   # EXIT_INVALID_ENUM -- method outside the allowed set
"""

EXIT_SUCCESS = 0
"""Generation completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_CONFIGURATION_ERROR = 2
"""A required name is missing or a feature/page directory does not exist."""

EXIT_INVALID_ENUM = 3
"""Method, return data or cache strategy is outside its fixed set."""

EXIT_INVALID_VALUE = 4
"""A TTL or boolean flag could not be parsed."""

EXIT_IO_ERROR = 5
"""Reading or writing a file in the target project failed."""
