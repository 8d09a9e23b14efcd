"""Carrier-specific exceptions module."""
import json
from typing import Any, Dict, Optional, Union


class CarrierError(Exception):
    """Base class for all carrier-related errors.

    Carries an optional HTTP status code and the raw response body so callers
    can tell validation failures (neither set) apart from API failures (both
    set) without inspecting the message.
    """

    def __init__(
        self,
        message: str,
        carrier: str,
        http_status: Optional[int] = None,
        raw_response: Optional[Union[str, Dict[str, Any]]] = None
    ):
        self.message = message
        self.carrier = carrier
        self.http_status = http_status
        self.raw_response = raw_response
        super().__init__(message)

    def __str__(self) -> str:
        if isinstance(self.raw_response, (dict, list)):
            response_details = json.dumps(self.raw_response, ensure_ascii=False)
        elif self.raw_response is None:
            response_details = ""
        else:
            response_details = str(self.raw_response)
        http_status = "" if self.http_status is None else self.http_status
        return (
            f"{self.__class__.__name__}: [{self.carrier}]: {self.message}\n"
            f"HTTP Code: {http_status}\n"
            f"Response: {response_details}\n"
        )
