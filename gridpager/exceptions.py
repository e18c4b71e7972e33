from collections.abc import Generator
from contextlib import contextmanager
from typing import Any

from botocore.exceptions import ClientError


class GridPagerError(Exception):
    """Base exception for all gridpager errors."""

    def __init__(self, message: str, original_error: Exception | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.original_error = original_error


class InvalidArgumentError(GridPagerError, ValueError):
    """Raised for negative page indices/offsets/counts or a non-positive page size."""

    def __init__(self, argument: str, value: Any, requirement: str) -> None:
        super().__init__(f"{argument} must be {requirement}, got {value!r}")
        self.argument = argument
        self.value = value


class TokenDecodeError(GridPagerError):
    """Raised when a continuation token cannot be decoded back into a cursor."""

    def __init__(self, token: str, original_error: Exception | None = None) -> None:
        super().__init__("Malformed continuation token", original_error)
        self.token = token


class SerializationError(GridPagerError):
    """Raised when a cursor or item cannot be converted (e.g. unsupported type)."""

    def __init__(self, message: str, original_error: Exception | None = None) -> None:
        super().__init__(message, original_error)


class TableResponseError(GridPagerError):
    """Raised when a data source answers a table request with an error message."""

    def __init__(self, draw: int, error: str) -> None:
        super().__init__(f"Data source returned an error for draw {draw}: {error}")
        self.draw = draw
        self.error = error


class DataSourceError(GridPagerError):
    """Base class for failures raised by a backing data source."""


class TableNotFoundError(DataSourceError):
    """Raised when the DynamoDB table does not exist."""

    def __init__(self, table_name: str, original_error: Exception | None = None) -> None:
        super().__init__(f"Table '{table_name}' not found", original_error)
        self.table_name = table_name


class ProvisionedThroughputExceededError(DataSourceError):
    """Raised when DynamoDB throttles requests."""

    def __init__(
        self, message: str = "Request rate exceeded", original_error: Exception | None = None
    ) -> None:
        super().__init__(message, original_error)


class RequestTimeoutError(DataSourceError):
    """Raised when a request to DynamoDB times out."""

    def __init__(
        self, message: str = "Request timed out", original_error: Exception | None = None
    ) -> None:
        super().__init__(message, original_error)


class ValidationError(DataSourceError):
    """Raised when DynamoDB rejects request parameters (e.g. a stale ExclusiveStartKey)."""

    def __init__(self, message: str, original_error: Exception | None = None) -> None:
        super().__init__(message, original_error)


@contextmanager
def handle_dynamo_errors(table_name: str | None = None) -> Generator[None, None, None]:
    """
    Context manager that catches botocore.exceptions.ClientError
    and raises the appropriate DataSourceError subclass.

    Args:
        table_name: Optional table name for better error messages

    Usage:
        with handle_dynamo_errors(table_name="employees"):
            client.scan(...)
    """
    try:
        yield
    except ClientError as e:
        error_code = e.response.get("Error", {}).get("Code", "Unknown")
        error_message = e.response.get("Error", {}).get("Message", str(e))

        if error_code == "ResourceNotFoundException":
            raise TableNotFoundError(table_name=table_name or "unknown", original_error=e) from e

        if error_code in (
            "ProvisionedThroughputExceededException",
            "ThrottlingException",
            "RequestLimitExceeded",
        ):
            raise ProvisionedThroughputExceededError(message=error_message, original_error=e) from e

        if error_code in ("ValidationException", "SerializationException"):
            raise ValidationError(message=error_message, original_error=e) from e

        if error_code in ("RequestTimeout", "RequestTimeoutException"):
            raise RequestTimeoutError(message=error_message, original_error=e) from e

        # Unknown error: wrap in generic DataSourceError
        raise DataSourceError(
            message=f"DynamoDB error ({error_code}): {error_message}", original_error=e
        ) from e
