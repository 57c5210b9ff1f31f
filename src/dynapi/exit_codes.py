"""Numeric process exit codes used by the ``dynapi`` command line.

Each constant maps to an error category and is referenced by the matching
:class:`~dynapi.exceptions.DynapiError` subclass. Shell wrappers can inspect
the exit code to tell a rejected request from a broken connection without
parsing stderr.

Example::

    $ dynapi call users/123/follow
    $ echo $?
    4   # EXIT_REQUEST_FAILED -- the API answered with success=false
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments or an unroutable path."""

EXIT_CONFIG_ERROR = 3
"""The configuration file or environment could not be loaded."""

EXIT_REQUEST_FAILED = 4
"""The API answered, but the normalized response reported ``success=False``."""

EXIT_CONNECTION_ERROR = 6
"""A network-level error occurred (timeout, DNS failure, connection refused)."""

EXIT_ABORTED = 7
"""The request was cancelled before a response arrived."""
