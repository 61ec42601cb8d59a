"""
JSON codec used at the HTTP boundary.

The codec is passed into the app (see topology.service.create_app) so tests
can swap in a failing implementation for any of the three steps.
"""

import json
from typing import Any, Dict, Optional

from topology.errors import RequestDecodeError, ResponseEncodeError


class JsonCodec:
    """Decode request bodies and query targets, encode responses."""

    def decode_body(self, body: bytes) -> Optional[Any]:
        """
        Parse a request body.

        Returns:
            Parsed JSON, or None when the body is empty

        Raises:
            RequestDecodeError: On malformed JSON
        """
        if not body or not body.strip():
            return None
        try:
            return json.loads(body)
        except (ValueError, UnicodeDecodeError) as e:
            raise RequestDecodeError(f"decoding body: {e}") from e

    def decode_target(self, target: str) -> Dict[str, str]:
        """Parse a JSON-encoded {field: substring} target (backslashes are stripped first)."""
        cleaned = target.replace("\\", "")
        try:
            parsed = json.loads(cleaned)
        except ValueError as e:
            raise RequestDecodeError(f"unmarshalling target: {cleaned}") from e

        if not isinstance(parsed, dict) or not all(isinstance(v, str) for v in parsed.values()):
            raise RequestDecodeError(f"target must be an object of strings: {cleaned}")
        return {str(key): value for key, value in parsed.items()}

    def encode(self, payload: Any) -> bytes:
        try:
            return json.dumps(payload).encode("utf-8")
        except (TypeError, ValueError) as e:
            raise ResponseEncodeError(f"marshalling response: {e}") from e
