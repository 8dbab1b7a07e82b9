from enum import Enum
from typing import Any, Dict, Optional


class ErrorCode(Enum):
    """Standard error codes for ddlflow operations.

    This enum provides categorized error codes that can be used
    to identify error types without creating numerous exception classes.
    Each category has a specific prefix for easy identification.

    Attributes:
        CONFIG_*: Configuration-related errors
        VALIDATION_*: Input validation errors
        COMPILATION_*: SQL generation errors
        EXECUTION_*: Runtime execution errors
        MIGRATION_*: Migration orchestration errors
        PLATFORM_*: Dialect and driver errors
    """
    # Configuration errors
    CONFIG_ERROR = "CONFIG_001"

    # Validation errors
    VALIDATION_ERROR = "VALIDATION_001"
    INVALID_ARGUMENT = "VALIDATION_002"
    DUPLICATE_OPERATION = "VALIDATION_003"

    # Compilation errors
    UNSUPPORTED_OPERATION = "COMPILATION_001"
    UNMAPPED_TYPE = "COMPILATION_002"

    # Execution errors
    EXECUTION_ERROR = "EXECUTION_001"
    QUERY_EXECUTION_ERROR = "EXECUTION_002"
    TRANSACTION_ERROR = "EXECUTION_003"

    # Migration errors
    MIGRATION_FAILED = "MIGRATION_001"
    DUPLICATE_VERSION = "MIGRATION_002"
    VERSION_NOT_FOUND = "MIGRATION_003"
    LEDGER_ERROR = "MIGRATION_004"

    # Platform errors
    PLATFORM_ERROR = "PLATFORM_001"
    PLATFORM_NOT_SUPPORTED = "PLATFORM_002"


class DDLFlowError(Exception):
    """Base exception for all ddlflow-related errors.

    This exception class uses error codes for categorization
    instead of creating numerous specific exception classes.

    Attributes:
        message: Error message
        error_code: Error code from ErrorCode enum
        details: Additional error details
        cause: Optional underlying exception
    """

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.EXECUTION_ERROR,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None,
    ):
        """Initialize ddlflow error.

        Args:
            message: Error message
            error_code: Error code from ErrorCode enum
            details: Additional error details
            cause: Optional underlying exception
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        self.cause = cause

        # Lazy import to avoid circular dependency
        from ddlflow.logging import get_logger
        logger = get_logger(__name__)
        logger.error(
            message,
            extra={
                "error_code": error_code.value,
                "details": self.details,
            },
            exc_info=cause if cause is not None else None,
        )

    def __str__(self) -> str:
        """String representation of the error."""
        msg = f"[{self.error_code.value}] {self.message}"
        if self.cause:
            msg = f"{msg} (caused by: {type(self.cause).__name__}: {str(self.cause)})"
        return msg

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for serialization."""
        return {
            "type": self.__class__.__name__,
            "message": self.message,
            "error_code": self.error_code.value,
            "error_name": self.error_code.name,
            "details": self.details,
        }


class MigrationError(DDLFlowError):
    """Failure of a single migration unit.

    Raised by the engine after the unit's transaction has been rolled back.
    The ledger still points at the last successfully applied version.

    Attributes:
        version: Version of the unit that failed
        direction: Direction the unit was being applied in
        migration_name: Class name of the failing unit
    """

    def __init__(
        self,
        message: str,
        version: int,
        direction: Any,
        migration_name: str,
        cause: Optional[Exception] = None,
        error_code: ErrorCode = ErrorCode.MIGRATION_FAILED,
    ):
        self.version = version
        self.direction = direction
        self.migration_name = migration_name
        super().__init__(
            message=message,
            error_code=error_code,
            details={
                "version": version,
                "direction": getattr(direction, "value", direction),
                "migration": migration_name,
            },
            cause=cause,
        )


# Helper functions for common error scenarios
def configuration_error(
    message: str,
    config_key: Optional[str] = None,
    **kwargs
) -> DDLFlowError:
    """Create a configuration error.

    Args:
        message: Error message
        config_key: Configuration key that caused the error
        **kwargs: Additional error details

    Returns:
        DDLFlowError with CONFIG_ERROR code
    """
    details = kwargs.get('details', {})
    if config_key:
        details["config_key"] = config_key

    return DDLFlowError(
        message=message,
        error_code=ErrorCode.CONFIG_ERROR,
        details=details,
        **{k: v for k, v in kwargs.items() if k != 'details'}
    )


def validation_error(
    message: str,
    field: Optional[str] = None,
    value: Any = None,
    **kwargs
) -> DDLFlowError:
    """Create a validation error.

    Args:
        message: Error message
        field: Field that failed validation
        value: Invalid value
        **kwargs: Additional error details

    Returns:
        DDLFlowError with VALIDATION_ERROR code
    """
    details = kwargs.get('details', {})
    if field:
        details["field"] = field
    if value is not None:
        details["value"] = str(value)

    return DDLFlowError(
        message=message,
        error_code=kwargs.pop('error_code', ErrorCode.VALIDATION_ERROR),
        details=details,
        **{k: v for k, v in kwargs.items() if k != 'details'}
    )


def unsupported_operation_error(
    kind: str,
    modifier: str,
    dialect: Optional[str] = None,
    **kwargs
) -> DDLFlowError:
    """Create an error for an operation/modifier pair with no handler.

    Args:
        kind: Operation kind
        modifier: Operation modifier
        dialect: Dialect that was compiling the operation

    Returns:
        DDLFlowError with UNSUPPORTED_OPERATION code
    """
    details = kwargs.get('details', {})
    details["kind"] = kind
    details["modifier"] = modifier
    if dialect:
        details["dialect"] = dialect

    return DDLFlowError(
        message=f"{modifier} is not supported for {kind} operations",
        error_code=ErrorCode.UNSUPPORTED_OPERATION,
        details=details,
        **{k: v for k, v in kwargs.items() if k != 'details'}
    )


def unmapped_type_error(
    data_type: str,
    dialect: str,
    column: Optional[str] = None,
    **kwargs
) -> DDLFlowError:
    """Create an error for a semantic type the dialect cannot render.

    Args:
        data_type: Semantic type that has no rendering
        dialect: Dialect name
        column: Column that declared the type

    Returns:
        DDLFlowError with UNMAPPED_TYPE code
    """
    details = kwargs.get('details', {})
    details["data_type"] = data_type
    details["dialect"] = dialect
    if column:
        details["column"] = column

    return DDLFlowError(
        message=f"Data type {data_type} has no mapping in dialect {dialect}",
        error_code=ErrorCode.UNMAPPED_TYPE,
        details=details,
        **{k: v for k, v in kwargs.items() if k != 'details'}
    )


def query_execution_error(
    query: str,
    original_error: Exception,
    **kwargs
) -> DDLFlowError:
    """Create a query execution error.

    Args:
        query: SQL command that failed
        original_error: The underlying exception
        **kwargs: Additional error details

    Returns:
        DDLFlowError with QUERY_EXECUTION_ERROR code
    """
    details = kwargs.get('details', {})
    details["query"] = query[:500] + "..." if len(query) > 500 else query

    return DDLFlowError(
        message=f"Query execution failed: {str(original_error)}",
        error_code=ErrorCode.QUERY_EXECUTION_ERROR,
        details=details,
        cause=original_error,
        **{k: v for k, v in kwargs.items() if k not in ['details', 'cause']}
    )


def platform_not_supported_error(
    platform: str,
    **kwargs
) -> DDLFlowError:
    """Create a platform not supported error.

    Args:
        platform: Dialect or platform name that is not supported
        **kwargs: Additional error details

    Returns:
        DDLFlowError with PLATFORM_NOT_SUPPORTED code
    """
    details = kwargs.get('details', {})
    details["platform"] = platform

    return DDLFlowError(
        message=f"Platform '{platform}' is not supported",
        error_code=ErrorCode.PLATFORM_NOT_SUPPORTED,
        details=details,
        **{k: v for k, v in kwargs.items() if k != 'details'}
    )


def migration_failed_error(
    version: int,
    direction: Any,
    migration_name: str,
    original_error: Exception,
) -> MigrationError:
    """Create the error reported when a migration unit fails.

    Args:
        version: Version of the failing unit
        direction: Direction the unit was applied in
        migration_name: Name of the failing unit
        original_error: The underlying exception

    Returns:
        MigrationError with MIGRATION_FAILED code
    """
    return MigrationError(
        message=(
            f"Migration {version} ({migration_name}) failed while migrating "
            f"{getattr(direction, 'value', direction)}: {original_error}"
        ),
        version=version,
        direction=direction,
        migration_name=migration_name,
        cause=original_error,
    )
