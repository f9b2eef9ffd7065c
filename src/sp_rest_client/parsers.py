"""
Response parsers.

A parser turns a RawResponse into the value handed back to the caller.
All parsers share the same error handling: a non-success status raises
HttpRequestError with the service's odata error message when one is present.
"""

from __future__ import annotations
import json
from abc import ABC, abstractmethod
from typing import Any, Optional

from .transport import RawResponse
from .runtime.errors import ErrorCode, HttpRequestError, ParseError


class ODataParser(ABC):
    """Base class for response parsers."""

    async def parse(self, response: RawResponse) -> Any:
        """Check the response status, then parse the body."""
        self.handle_error(response)
        return self.parse_body(response)

    @abstractmethod
    def parse_body(self, response: RawResponse) -> Any:
        """Parse a successful response."""

    def handle_error(self, response: RawResponse) -> None:
        """
        Raise for non-success responses.

        Raises:
            HttpRequestError: If the response status is not 2xx
        """
        if response.ok:
            return

        message = f"Error making HttpClient request in queryable [{response.status}] {response.reason}"
        details = {}
        server_message = _odata_error_message(response)
        if server_message:
            message = f"{message} ::> {server_message}"
            details["server_message"] = server_message

        raise HttpRequestError(message, response.status, response.reason, response, details)

    def _load_json(self, response: RawResponse) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise ParseError(
                "Response body is not valid JSON",
                code=ErrorCode.INVALID_JSON,
                details={"status": response.status},
                cause=e,
            ) from e


class ODataDefaultParser(ODataParser):
    """
    Parses OData JSON, unwrapping the response envelope.

    Handles verbose (``{"d": {"results": [...]}}`` / ``{"d": {...}}``) and
    light (``{"value": [...]}``) payloads; 204 and empty bodies become ``{}``.
    """

    def parse_body(self, response: RawResponse) -> Any:
        if response.status == 204 or not response.body.strip():
            return {}
        return parse_odata_json(self._load_json(response))


class JSONParser(ODataParser):
    """Returns the JSON body as-is."""

    def parse_body(self, response: RawResponse) -> Any:
        return self._load_json(response)


class TextParser(ODataParser):

    def parse_body(self, response: RawResponse) -> str:
        return response.text()


class BufferParser(ODataParser):

    def parse_body(self, response: RawResponse) -> bytes:
        return response.body


def parse_odata_json(payload: Any) -> Any:
    """Strip the OData envelope from a decoded JSON payload."""
    if not isinstance(payload, dict):
        return payload
    if "d" in payload:
        inner = payload["d"]
        if isinstance(inner, dict) and "results" in inner:
            return inner["results"]
        return inner
    if "value" in payload:
        return payload["value"]
    return payload


def _odata_error_message(response: RawResponse) -> Optional[str]:
    try:
        payload = json.loads(response.body)
    except ValueError:
        return None
    if not isinstance(payload, dict):
        return None
    error = payload.get("odata.error") or payload.get("error")
    if not isinstance(error, dict):
        return None
    message = error.get("message")
    if isinstance(message, dict):
        return message.get("value")
    return message
