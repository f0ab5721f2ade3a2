"""Return codes reported to the host for each invocation.

Values match the host's conventions: 198 is a syntax/usage error,
4 refuses to clobber data in memory.
"""

from enum import IntEnum


class ReturnCode(IntEnum):
    """Return codes for pgload operations."""

    OK = 0
    FINISHED = 1
    DATA_IN_MEMORY = 4
    USAGE_ERROR = 198
    DB_ERROR = 200
