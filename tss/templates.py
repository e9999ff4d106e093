"""Secret template retrieval and server-side password generation."""

from __future__ import annotations

import json
import logging

from pydantic import ValidationError

from tss.errors import ResponseParseError, SchemaMismatchError
from tss.models import SecretTemplate
from tss.transport import TEMPLATES_RESOURCE, Transport

logger = logging.getLogger(__name__)


def get_template(transport: Transport, template_id: int) -> SecretTemplate:
    """Fetch the secret template with the given ID."""
    data = transport.request("GET", TEMPLATES_RESOURCE, str(template_id))
    try:
        return SecretTemplate.model_validate_json(data)
    except ValidationError as e:
        logger.error("error parsing response from /%s/%d: %r", TEMPLATES_RESOURCE, template_id, data)
        raise ResponseParseError(f"error parsing secret template {template_id}", data) from e


def generate_password(transport: Transport, slug: str, template: SecretTemplate) -> str:
    """Generate a password for the field ``slug`` of ``template``.

    The password follows the requirements attached to that field, so this is
    only meaningful for password fields.
    """
    field_id, found = template.field_slug_to_id(slug)
    if not found:
        logger.error("the alias '%s' does not identify a field on the template named '%s'", slug, template.name)
        raise SchemaMismatchError(
            f"field name '{slug}' is not defined on the secret template with id '{template.id}'"
        )

    data = transport.request("POST", TEMPLATES_RESOURCE, f"generate-password/{field_id}")
    try:
        password = json.loads(data)
    except ValueError as e:
        raise ResponseParseError("error parsing generated password", data) from e
    if not isinstance(password, str):
        raise ResponseParseError("generated password is not a string", data)
    return password
