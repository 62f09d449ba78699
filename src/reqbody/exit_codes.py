"""Numeric process exit codes used by the ``reqbody`` CLI.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~reqbody.exceptions.ReqbodyError` subclass. Shell
scripts can inspect the exit code to tell a rejected body apart from a broken
spec without parsing stderr.

Example::

    $ reqbody parse openapi.json createPet --content-type text/csv --data 'a,b'
    $ echo $?
    3   # EXIT_UNSUPPORTED_MEDIA_TYPE -- no declared type matched
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments or missing required parameters."""

EXIT_UNSUPPORTED_MEDIA_TYPE = 3
"""The request content type was rejected (HTTP 415)."""

EXIT_BODY_PARSE_ERROR = 4
"""The request body could not be decoded by the selected parser."""

EXIT_SPEC_ERROR = 7
"""The OpenAPI document could not be loaded or uses an unsupported construct."""

EXIT_PLUGIN_ERROR = 10
"""An extension parser failed to load."""
