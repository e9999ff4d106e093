"""
Authenticated HTTP transport for the Secret Server REST API.

Wraps httpx.Client. Every call fetches a bearer token through the
TokenProvider; a 401/403 answer drops the cached token so the next call
re-authenticates. Nothing is retried here.

Usage:
    with Transport(get_config()) as transport:
        data = transport.request("GET", "secrets", "42")
"""

from __future__ import annotations

import logging

import httpx

from tss.auth import TokenCache, TokenProvider
from tss.config import Configuration
from tss.errors import TransportError, UnknownResourceError
from tss.models import RequestBody
from tss.responses import handle_response

logger = logging.getLogger(__name__)

SECRETS_RESOURCE = "secrets"
TEMPLATES_RESOURCE = "secret-templates"

RESOURCES = frozenset({SECRETS_RESOURCE, TEMPLATES_RESOURCE})
SEARCHABLE_RESOURCES = frozenset({SECRETS_RESOURCE})

SEARCH_PAGE_SIZE = 30
EXTENDED_SEARCH_FIELDS = ("Machine", "Notes", "Username")

_JSON_METHODS = frozenset({"POST", "PUT", "PATCH"})
_AUTH_FAILURES = frozenset({401, 403})


class Transport:
    """Issue authenticated requests against one Secret Server."""

    def __init__(
        self,
        config: Configuration,
        cache: TokenCache | None = None,
        client: httpx.Client | None = None,
    ) -> None:
        self.config = config
        self._owns_client = client is None
        self._client = client or httpx.Client(timeout=config.timeout)
        self.tokens = TokenProvider(config, self._client, cache or TokenCache())

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> Transport:
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def request(
        self,
        method: str,
        resource: str,
        path: str = "",
        body: RequestBody | None = None,
    ) -> bytes:
        """Call ``{resource}/{path}`` and return the raw response body."""
        if resource not in RESOURCES:
            logger.error("unknown resource: %s", resource)
            raise UnknownResourceError(resource)

        content = body.to_request_json() if body is not None else None
        headers = self._auth_headers()
        if method in _JSON_METHODS:
            headers["Content-Type"] = "application/json"

        url = self.config.url_for(resource, path)
        logger.debug("calling %s %s", method, url)
        return self._send(method, url, headers=headers, content=content)

    def upload_file(self, secret_id: int, slug: str, filename: str, content: bytes) -> None:
        """Upload ``content`` as the file attachment of field ``slug``."""
        url = self.config.url_for(SECRETS_RESOURCE, f"{secret_id}/fields/{slug}")
        headers = self._auth_headers()
        logger.debug("uploading file with PUT %s", url)
        self._send("PUT", url, headers=headers, files={"file": (filename, content)})

    def search(self, resource: str, search_text: str, field: str = "") -> bytes:
        """Search ``resource``; an empty ``field`` searches name and extended fields."""
        if resource not in SEARCHABLE_RESOURCES:
            logger.error("unknown resource: %s", resource)
            raise UnknownResourceError(resource)

        params: list[tuple[str, str | int]] = [
            ("paging.filter.searchText", search_text),
            ("paging.filter.searchField", field),
            ("paging.filter.doNotCalculateTotal", "true"),
            ("paging.take", SEARCH_PAGE_SIZE),
            ("paging.skip", 0),
        ]
        if field:
            params.append(("paging.filter.isExactMatch", "true"))
        else:
            params.extend(("paging.filter.extendedFields", name) for name in EXTENDED_SEARCH_FIELDS)

        url = self.config.url_for(resource)
        logger.debug("calling GET %s", url)
        return self._send("GET", url, headers=self._auth_headers(), params=params)

    def _auth_headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.tokens.get_access_token()}"}

    def _send(self, method: str, url: str, **kwargs) -> bytes:
        response = self._client.request(method, url, **kwargs)
        try:
            return handle_response(response)
        except TransportError as e:
            if e.status_code in _AUTH_FAILURES:
                logger.debug("%s from %s, dropping cached token", e.status_code, url)
                self.tokens.invalidate()
            raise
