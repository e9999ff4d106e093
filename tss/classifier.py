"""Split a secret's fields into file fields and general fields by template."""

from __future__ import annotations

import logging

from tss.errors import SchemaMismatchError
from tss.models import SecretField, SecretTemplate

logger = logging.getLogger(__name__)


def resolve_slug(field: SecretField, template: SecretTemplate) -> str:
    """Return the field's slug, looking it up by field ID when it has none."""
    if field.slug:
        return field.slug
    slug, found = template.field_id_to_slug(field.field_id)
    if not found:
        raise SchemaMismatchError(
            f"field id '{field.field_id}' is not defined on the secret template with id '{template.id}'"
        )
    return slug


def separate_file_fields(
    fields: list[SecretField], template: SecretTemplate
) -> tuple[list[SecretField], list[SecretField]]:
    """Partition ``fields`` into (file fields, general fields).

    The template decides what is a file field; the fields' own ``is_file``
    flags are ignored. Input order is kept within each group. Raises
    SchemaMismatchError if any field is unknown to the template.
    """
    file_fields: list[SecretField] = []
    general_fields: list[SecretField] = []

    for field in fields:
        slug = resolve_slug(field, template)
        template_field, found = template.get_field(slug)
        if not found or template_field is None:
            raise SchemaMismatchError(
                f"field name '{slug}' is not defined on the secret template with id '{template.id}'"
            )
        if template_field.is_file:
            file_fields.append(field)
        else:
            general_fields.append(field)

    logger.debug(
        "separated %d file field(s) and %d general field(s) using template '%s'",
        len(file_fields),
        len(general_fields),
        template.name,
    )
    return file_fields, general_fields
