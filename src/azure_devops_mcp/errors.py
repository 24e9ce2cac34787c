"""Error taxonomy for Azure DevOps tool calls.

Every failure that leaves an operation is an ``AzureDevOpsError`` tagged with
an ``ErrorKind``. The dispatcher renders it with ``format_error``, which is a
lookup on the kind rather than an isinstance chain.
"""

from collections.abc import Iterator
from contextlib import contextmanager
from enum import Enum
from typing import Any


class ErrorKind(str, Enum):
    """Category of a failed tool call."""

    VALIDATION = "validation"
    RESOURCE_NOT_FOUND = "resource_not_found"
    AUTHENTICATION = "authentication"
    OPERATION_FAILED = "operation_failed"


ERROR_PREFIXES: dict[ErrorKind, str] = {
    ErrorKind.VALIDATION: "Validation Error",
    ErrorKind.RESOURCE_NOT_FOUND: "Not Found",
    ErrorKind.AUTHENTICATION: "Authentication Failed",
    ErrorKind.OPERATION_FAILED: "Error",
}


class AzureDevOpsError(Exception):
    """A tool-call failure with its kind and identifying context.

    Attributes:
        kind: Error category
        message: Human-readable message (no category prefix)
        context: Identifying fields, e.g. ``{"pull_request_id": 42}``
    """

    def __init__(self, kind: ErrorKind, message: str, **context: Any) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.context = context

    def __repr__(self) -> str:
        return f"AzureDevOpsError(kind={self.kind.value!r}, message={self.message!r})"


def validation_error(message: str, **context: Any) -> AzureDevOpsError:
    return AzureDevOpsError(ErrorKind.VALIDATION, message, **context)


def resource_not_found(message: str, **context: Any) -> AzureDevOpsError:
    return AzureDevOpsError(ErrorKind.RESOURCE_NOT_FOUND, message, **context)


def authentication_error(message: str, **context: Any) -> AzureDevOpsError:
    return AzureDevOpsError(ErrorKind.AUTHENTICATION, message, **context)


def operation_failed(action: str, cause: BaseException | str) -> AzureDevOpsError:
    """Wrap a provider failure as ``Failed to <action>: <original message>``."""
    original = cause.message if isinstance(cause, AzureDevOpsError) else str(cause)
    return AzureDevOpsError(ErrorKind.OPERATION_FAILED, f"Failed to {action}: {original}", action=action)


@contextmanager
def operation_context(action: str) -> Iterator[None]:
    """Re-wrap any failure inside the block as an OPERATION_FAILED error.

    RESOURCE_NOT_FOUND errors pass through unchanged so they are not masked
    by the generic wrapper.

    Args:
        action: Operation description, e.g. "get pull request"
    """
    try:
        yield
    except AzureDevOpsError as e:
        if e.kind is ErrorKind.RESOURCE_NOT_FOUND:
            raise
        raise operation_failed(action, e) from e
    except Exception as e:
        raise operation_failed(action, e) from e


def format_error(error: BaseException) -> str:
    """Render any exception as the user-facing text of a failed tool call.

    Args:
        error: The exception caught by the dispatcher

    Returns:
        "<Category>: <message>" string
    """
    if isinstance(error, AzureDevOpsError):
        return f"{ERROR_PREFIXES[error.kind]}: {error.message}"
    return f"Error: {error}"
