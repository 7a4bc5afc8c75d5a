"""Exception hierarchy for swaggler.

Every error raised by the parser, generator and merge step derives from
:class:`SwagglerError`, which carries a stable machine-readable ``code``,
an optional ``details`` mapping and the process ``exit_code`` the CLI
should use when reporting it. The core never exits by itself.

Subclass hierarchy::

    SwagglerError              (exit 1)
    +-- MalformedInputError        MALFORMED_INPUT        (exit 2)
    +-- DuplicateOperationIdError  DUPLICATE_OPERATION_ID (exit 3)
    +-- MergeError                 MERGE_ERROR            (exit 4)
    +-- ExecutionError             EXECUTION_ERROR        (exit 5)
"""

from typing import Any

MALFORMED_INPUT = "MALFORMED_INPUT"
DUPLICATE_OPERATION_ID = "DUPLICATE_OPERATION_ID"
MERGE_ERROR = "MERGE_ERROR"
EXECUTION_ERROR = "EXECUTION_ERROR"


class SwagglerError(Exception):
    """Base exception for all swaggler errors.

    Args:
        message: Human-readable error description.
        code: Stable error code, defaults to the subclass code.
        details: Optional structured payload for reporting.
    """

    code: str = "SWAGGLER_ERROR"
    exit_code: int = 1

    def __init__(self, message: str, code: str | None = None, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code
        self.details = details or {}


class MalformedInputError(SwagglerError):
    """Raised when curl text or a JSON response cannot be understood."""

    code = MALFORMED_INPUT
    exit_code = 2


class DuplicateOperationIdError(SwagglerError):
    """Raised when a merge would introduce an operation id that already exists."""

    code = DUPLICATE_OPERATION_ID
    exit_code = 3

    def __init__(
        self,
        operation_id: str,
        existing_path: str,
        existing_method: str,
        new_path: str,
        new_method: str,
    ):
        super().__init__(
            "Operation ID conflict detected",
            details={
                "operationId": operation_id,
                "existingPath": existing_path,
                "existingMethod": existing_method,
                "newPath": new_path,
                "newMethod": new_method,
            },
        )
        self.operation_id = operation_id


class MergeError(SwagglerError):
    """Raised when an existing document cannot be loaded for merging."""

    code = MERGE_ERROR
    exit_code = 4


class ExecutionError(SwagglerError):
    """Raised when the curl process cannot be run or fails."""

    code = EXECUTION_ERROR
    exit_code = 5
