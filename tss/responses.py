"""HTTP response handling shared by the transport and token provider."""

from __future__ import annotations

import httpx

from tss.errors import TransportError

ERROR_BODY_LENGTH = 255


def handle_response(response: httpx.Response) -> bytes:
    """Return the body of a 2xx response, raise TransportError otherwise.

    Error bodies are truncated to ERROR_BODY_LENGTH bytes.
    """
    data = response.content
    if 200 <= response.status_code < 300:
        return data

    if len(data) >= ERROR_BODY_LENGTH:
        data = data[:ERROR_BODY_LENGTH] + b"..."
    raise TransportError(response.status_code, response.reason_phrase, data)
