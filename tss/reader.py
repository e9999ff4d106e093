"""
Secret reads.

File attachments are downloaded and substituted for the placeholder value the
server returns in the secret record, so callers always see file contents.
"""

from __future__ import annotations

import logging

from pydantic import ValidationError

from tss.errors import ResponseParseError
from tss.models import SearchResult, Secret
from tss.transport import SECRETS_RESOURCE, Transport

logger = logging.getLogger(__name__)

# Attachment bytes are carried in str values; surrogateescape keeps any byte intact
FILE_ENCODING = "utf-8"
FILE_ERRORS = "surrogateescape"


def read_secret(transport: Transport, secret_id: int) -> Secret:
    """Fetch a secret with its file attachments inlined."""
    data = transport.request("GET", SECRETS_RESOURCE, str(secret_id))
    try:
        secret = Secret.model_validate_json(data)
    except ValidationError as e:
        logger.error("error parsing response from /%s/%d: %r", SECRETS_RESOURCE, secret_id, data)
        raise ResponseParseError(f"error parsing secret {secret_id}", data) from e

    for field in secret.fields:
        if field.is_file and field.file_attachment_id != 0 and field.filename:
            logger.debug("downloading file attachment '%s' of field '%s'", field.filename, field.slug)
            content = transport.request("GET", SECRETS_RESOURCE, f"{secret_id}/fields/{field.slug}")
            field.item_value = content.decode(FILE_ENCODING, FILE_ERRORS)

    return secret


def search_secrets(transport: Transport, search_text: str, field: str = "") -> list[Secret]:
    """Find secrets matching ``search_text`` and read each of them in full.

    With ``field`` set, only exact matches on that field are returned.
    """
    data = transport.search(SECRETS_RESOURCE, search_text, field)
    try:
        result = SearchResult.model_validate_json(data)
    except ValidationError as e:
        logger.error("error parsing search response from /%s: %r", SECRETS_RESOURCE, data)
        raise ResponseParseError("error parsing secret search result", data) from e

    logger.debug("search for '%s' matched %d secret(s)", search_text, len(result.records))
    return [read_secret(transport, record.id) for record in result.records]
