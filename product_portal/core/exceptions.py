from fastapi import status
from typing import Any, Dict, Optional, Union


class APIException(Exception):
    """
    Base exception for API errors.

    All custom exceptions should inherit from this class.
    """

    def __init__(
        self,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail: str = "An unexpected error occurred",
        code: str = "internal_error",
        context: Optional[Dict[str, Any]] = None
    ):
        self.status_code = status_code
        self.detail = detail
        self.code = code
        self.context = context or {}
        super().__init__(self.detail)

    def to_dict(self, request_id: Optional[str] = None) -> Dict[str, Any]:
        """Convert exception to a dictionary for consistent response format."""
        error = {
            "code": self.code,
            "message": self.detail,
            "status_code": self.status_code,
            "context": self.context
        }
        if request_id:
            error["request_id"] = request_id
        return {"error": error}


class ConfigurationError(APIException):
    """Exception raised when the gateway client cannot be configured."""

    def __init__(
        self,
        detail: str = "Invalid client configuration",
        code: str = "configuration_error",
        setting: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None
    ):
        merged_context = {"setting": setting} if setting else {}
        if context:
            merged_context.update(context)

        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=detail,
            code=code,
            context=merged_context
        )


class QueryError(APIException):
    """Exception raised when a call to the remote gateway fails."""

    def __init__(
        self,
        detail: str = "Remote query failed",
        code: str = "query_error",
        upstream_status: Optional[int] = None,
        context: Optional[Dict[str, Any]] = None,
        original_exception: Optional[Exception] = None
    ):
        merged_context: Dict[str, Any] = {}
        if upstream_status is not None:
            merged_context["upstream_status"] = upstream_status
        if context:
            merged_context.update(context)

        super().__init__(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=detail,
            code=code,
            context=merged_context
        )
        self.upstream_status = upstream_status
        self.original_exception = original_exception

        if original_exception is not None:
            self.context["original_error"] = str(original_exception)


class ValidationException(APIException):
    """Exception raised when data validation fails."""

    def __init__(
        self,
        detail: str = "Validation error",
        code: str = "validation_error",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None
    ):
        merged_context = {"field": field} if field else {}
        if context:
            merged_context.update(context)

        super().__init__(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=detail,
            code=code,
            context=merged_context
        )


class NotFoundError(APIException):
    """Exception raised when a requested resource is not found."""

    def __init__(
        self,
        resource_type: str,
        resource_id: Union[str, int],
        detail: Optional[str] = None,
        code: str = "not_found_error",
        context: Optional[Dict[str, Any]] = None
    ):
        if detail is None:
            detail = f"{resource_type} with id '{resource_id}' not found"

        merged_context = {
            "resource_type": resource_type,
            "resource_id": str(resource_id)
        }
        if context:
            merged_context.update(context)

        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=detail,
            code=code,
            context=merged_context
        )
