"""Common utilities and exceptions for ddlflow.

Exception Design:
    The exception system uses error codes for categorization rather than
    numerous specific exception classes. All exceptions inherit from
    DDLFlowError and include structured error information. MigrationError
    adds the failing unit's version and direction.
"""

from ddlflow.common.exceptions import (
    DDLFlowError,
    ErrorCode,
    MigrationError,
    # Helper functions
    configuration_error,
    validation_error,
    unsupported_operation_error,
    unmapped_type_error,
    query_execution_error,
    platform_not_supported_error,
    migration_failed_error,
)

__all__ = [
    # Base Exception and Error Codes
    "DDLFlowError",
    "ErrorCode",
    "MigrationError",
    # Helper functions
    "configuration_error",
    "validation_error",
    "unsupported_operation_error",
    "unmapped_type_error",
    "query_execution_error",
    "platform_not_supported_error",
    "migration_failed_error",
]
