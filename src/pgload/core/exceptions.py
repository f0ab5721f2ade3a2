"""Exception hierarchy for pgload.

All exceptions carry a return_code for the host-facing dispatcher.
Return codes are defined in exit_codes.py.
"""

from pgload.core.exit_codes import ReturnCode


class PgLoadError(Exception):
    """Base exception for all pgload errors."""

    return_code: int = ReturnCode.DB_ERROR

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class UsageError(PgLoadError):
    """Malformed invocation or an operation called in the wrong phase."""

    return_code: int = ReturnCode.USAGE_ERROR


class DataInMemoryError(UsageError):
    """The host already holds data that prepare() would overwrite."""

    return_code: int = ReturnCode.DATA_IN_MEMORY


class ConnectionError(PgLoadError):
    """Connection could not be established or was lost."""


class QueryError(PgLoadError):
    """Transaction, cursor or fetch failure reported by the database."""


class SchemaResolutionError(QueryError):
    """The first fetch, which supplies field metadata, failed."""


class DateParseError(PgLoadError):
    """A date cell could not be parsed; aborts the current batch."""

    def __init__(self, message: str, obs: int, var: int) -> None:
        self.obs = obs
        self.var = var
        super().__init__(message)


class HostWriteError(PgLoadError):
    """The host rejected a value written into its storage."""


class ConfigError(PgLoadError):
    """Malformed config, missing profile."""

    return_code: int = ReturnCode.USAGE_ERROR


class InputError(PgLoadError):
    """Query file not found, no query given."""

    return_code: int = ReturnCode.USAGE_ERROR


class DegradedTypeWarning(UserWarning):
    """A column's wire type is only partially supported and is read as text."""
