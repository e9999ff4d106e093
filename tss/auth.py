"""
Access-token acquisition and caching.

The cache is an explicit object keyed by server base URL, handed to the
transport at construction time. There is no process-wide token state.
"""

from __future__ import annotations

import json
import logging
import math
import time
from dataclasses import dataclass

import httpx

from tss.config import Configuration
from tss.errors import ResponseParseError
from tss.responses import handle_response

logger = logging.getLogger(__name__)


@dataclass
class CachedToken:
    access_token: str
    expires_at: float


class TokenCache:
    """Access tokens keyed by base URL.

    No locking: two callers racing on an empty slot may both fetch a token,
    and the last write wins.
    """

    def __init__(self, clock=time.time) -> None:
        self._clock = clock
        self._entries: dict[str, CachedToken] = {}

    def get(self, base_url: str) -> str | None:
        entry = self._entries.get(base_url)
        if entry is None or self._clock() >= entry.expires_at:
            return None
        return entry.access_token

    def set(self, base_url: str, access_token: str, expires_in: int) -> None:
        # Keep the token for the first tenth of its lifetime only
        expires_at = self._clock() + expires_in - math.floor(expires_in * 0.9)
        self._entries[base_url] = CachedToken(access_token, expires_at)

    def invalidate(self, base_url: str) -> None:
        self._entries.pop(base_url, None)


class TokenProvider:
    """Resolve the bearer token for one configured server."""

    def __init__(self, config: Configuration, client: httpx.Client, cache: TokenCache) -> None:
        self.config = config
        self.client = client
        self.cache = cache

    def get_access_token(self) -> str:
        credentials = self.config.credentials
        if credentials.token:
            return credentials.token

        cached = self.cache.get(self.config.base_url)
        if cached:
            return cached

        form = {
            "username": credentials.username,
            "password": credentials.password,
            "grant_type": "password",
        }
        if credentials.domain:
            form["domain"] = credentials.domain

        logger.debug("requesting an access token from %s", self.config.token_url)
        data = handle_response(self.client.post(self.config.token_url, data=form))

        try:
            grant = json.loads(data)
            access_token = grant["access_token"]
            expires_in = int(grant.get("expires_in", 0))
        except (ValueError, KeyError, TypeError) as e:
            logger.error("parsing grant response: %s", e)
            raise ResponseParseError("error parsing the token grant response", data) from e

        self.cache.set(self.config.base_url, access_token, expires_in)
        return str(access_token)

    def invalidate(self) -> None:
        self.cache.invalidate(self.config.base_url)
