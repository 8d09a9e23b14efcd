"""Braspress-specific exceptions."""
from typing import Any, Dict, Optional, Union

from freightscout.carriers.base.exceptions import CarrierError


class BraspressError(CarrierError):
    """Exception raised for Braspress-specific errors."""

    def __init__(
        self,
        message: str,
        http_status: Optional[int] = None,
        raw_response: Optional[Union[str, Dict[str, Any]]] = None
    ):
        super().__init__(
            message=message,
            carrier="Braspress",
            http_status=http_status,
            raw_response=raw_response
        )


class BraspressValidationError(BraspressError):
    """Raised when credentials, volumes or quotation arguments are rejected locally."""
    pass


class BraspressConnectionError(BraspressError):
    """Raised when we can't reach Braspress or can't read what it sent back."""
    pass


class BraspressAPIError(BraspressError):
    """Raised when Braspress answers with a non-200 status."""

    def __init__(self, message: str, http_status: int, raw_response: Optional[str] = None):
        super().__init__(message, http_status=http_status, raw_response=raw_response)
