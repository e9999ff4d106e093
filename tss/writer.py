"""
Secret writes: create, update, delete.

A write is more than one request. File fields cannot travel in the JSON body,
so they are split off (see tss.classifier), uploaded or cleared one by one
after the secret itself is written, and the secret is then re-read so the
caller gets the server's view including inlined file contents.

When the caller asks the server to generate SSH keys or a passphrase, the
generator owns the file fields and the field list is sent untouched.

Uploads are sequential. A failure on one file field leaves the earlier ones
committed, so a failed write may be partially applied.
"""

from __future__ import annotations

import logging
import re

import httpx
from pydantic import ValidationError

from tss.classifier import resolve_slug, separate_file_fields
from tss.errors import BusinessRuleError, FileFieldError, ResponseParseError, TSSError
from tss.models import Secret, SecretField, SecretPatch, SecretTemplate
from tss.reader import FILE_ENCODING, FILE_ERRORS, read_secret
from tss.templates import get_template
from tss.transport import SECRETS_RESOURCE, Transport

logger = logging.getLogger(__name__)

DEFAULT_FILENAME = "File.txt"
DEFAULT_EXTENSION = ".txt"

_HAS_EXTENSION = re.compile(r"[^.]+\.\w+$")


def create_secret(transport: Transport, secret: Secret) -> Secret:
    return write_secret(transport, secret, "POST", "")


def update_secret(transport: Transport, secret: Secret) -> Secret:
    """Update an existing secret. SSH key/passphrase generation is refused."""
    if secret.ssh_key_args is not None and secret.ssh_key_args.requested:
        raise BusinessRuleError(
            "SSH key and passphrase generation is only supported during secret creation. "
            f"Could not update the secret named '{secret.name}'"
        )
    secret = secret.model_copy(update={"ssh_key_args": None})
    return write_secret(transport, secret, "PUT", str(secret.id))


def delete_secret(transport: Transport, secret_id: int) -> None:
    transport.request("DELETE", SECRETS_RESOURCE, str(secret_id))


def write_secret(transport: Transport, secret: Secret, method: str, path: str) -> Secret:
    """Write ``secret`` with ``method`` at ``path``, reconcile its file fields,
    and return the secret as re-read from the server."""
    secret = secret.model_copy(deep=True)
    template = get_template(transport, secret.secret_template_id)

    file_fields: list[SecretField] = []
    if secret.ssh_key_args is None or not secret.ssh_key_args.requested:
        file_fields, secret.fields = separate_file_fields(secret.fields, template)

    # Any sshKeyArgs object, even all-false, is rejected by templates
    # without SSH generation support
    if secret.ssh_key_args is not None and not secret.ssh_key_args.requested:
        secret.ssh_key_args = None

    data = transport.request(method, SECRETS_RESOURCE, path, secret)
    try:
        written = Secret.model_validate_json(data)
    except ValidationError as e:
        logger.error("error parsing response from /%s: %r", SECRETS_RESOURCE, data)
        raise ResponseParseError("error parsing written secret", data) from e

    update_files(transport, written.id, file_fields, template)
    return read_secret(transport, written.id)


def update_files(
    transport: Transport,
    secret_id: int,
    file_fields: list[SecretField],
    template: SecretTemplate,
) -> None:
    """Upload each file field's value, or delete the attachment if it is empty."""
    for field in file_fields:
        slug = resolve_slug(field, template)
        try:
            if field.item_value == "":
                logger.debug("clearing the file attachment of field '%s'", slug)
                transport.request(
                    "PATCH", SECRETS_RESOURCE, f"{secret_id}/general", SecretPatch.clear_field(slug)
                )
            else:
                filename = upload_filename(field.filename)
                logger.debug("uploading a file to the '%s' field with filename '%s'", slug, filename)
                content = field.item_value.encode(FILE_ENCODING, FILE_ERRORS)
                transport.upload_file(secret_id, slug, filename, content)
        except (TSSError, httpx.HTTPError) as e:
            raise FileFieldError(slug, e) from e


def upload_filename(filename: str) -> str:
    """The server needs a filename with an extension for every upload."""
    if not filename:
        logger.debug("field has no filename, setting its filename to '%s'", DEFAULT_FILENAME)
        return DEFAULT_FILENAME
    if not _HAS_EXTENSION.search(filename):
        logger.debug("field has no filename extension, setting its filename to '%s'", filename + DEFAULT_EXTENSION)
        return filename + DEFAULT_EXTENSION
    return filename
