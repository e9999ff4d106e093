"""
Secret Server data models.

Wire keys are camelCase. Incoming keys are matched case-insensitively, since
the server and older clients use both camelCase and PascalCase, and JSON nulls
fall back to the field default.

Request bodies form a small tagged union (``RequestBody``): a full ``Secret``
for create/update, or a ``SecretPatch`` for partial field updates. Each
variant serializes itself via ``to_request_json()``.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

logger = logging.getLogger(__name__)

# Secret keys the server rejects as zero; sent only when set
_OMIT_WHEN_ZERO = ("secretPolicyId", "passwordTypeWebScriptId")


class WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    @model_validator(mode="before")
    @classmethod
    def _match_keys(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        known: dict[str, str] = {}
        for name, info in cls.model_fields.items():
            known[name.lower()] = name
            if info.alias:
                known[info.alias.lower()] = info.alias
        return {
            known.get(key.lower(), key): value
            for key, value in data.items()
            if value is not None
        }


# ─── Secrets ─────────────────────────────────────────────────────────────


class SecretField(WireModel):
    """An item (field) of a secret.

    ``is_file``/``is_notes``/``is_password`` are reliable on read only; on a
    write they are cross-checked against the template.
    """

    item_id: int = 0
    field_id: int = 0
    file_attachment_id: int = 0
    field_name: str = ""
    slug: str = ""
    field_description: str = ""
    filename: str = ""
    item_value: str = ""
    is_file: bool = False
    is_notes: bool = False
    is_password: bool = False


class SshKeyArgs(WireModel):
    """Create-time request to generate an SSH key pair and/or passphrase.

    Only ever sent in write requests; never present in responses.
    """

    generate_passphrase: bool = False
    generate_ssh_keys: bool = False

    @property
    def requested(self) -> bool:
        return self.generate_passphrase or self.generate_ssh_keys


class Secret(WireModel):
    name: str = ""
    id: int = 0
    folder_id: int = 0
    site_id: int = 0
    secret_template_id: int = 0
    secret_policy_id: int = 0
    password_type_web_script_id: int = 0
    launcher_connect_as_secret_id: int = 0
    check_out_interval_minutes: int = 0
    active: bool = False
    checked_out: bool = False
    check_out_enabled: bool = False
    auto_change_enabled: bool = False
    check_out_change_password_enabled: bool = False
    delay_indexing: bool = False
    enable_inherit_permissions: bool = False
    enable_inherit_secret_policy: bool = False
    proxy_enabled: bool = False
    requires_comment: bool = False
    session_recording_enabled: bool = False
    web_launcher_requires_incognito_mode: bool = False
    fields: list[SecretField] = Field(default_factory=list, alias="items")
    ssh_key_args: SshKeyArgs | None = None

    def field(self, field_name: str) -> tuple[str, bool]:
        """Return the value of the first field whose name or slug is ``field_name``."""
        for f in self.fields:
            if field_name in (f.field_name, f.slug):
                logger.debug("field with name '%s' matches '%s'", f.field_name, field_name)
                return f.item_value, True
        logger.debug("no matching field for name '%s' in secret '%s'", field_name, self.name)
        return "", False

    def field_by_id(self, field_id: int) -> tuple[str, bool]:
        """Return the value of the first field with the given field ID."""
        for f in self.fields:
            if f.field_id == field_id:
                logger.debug("field with name '%s' matches field ID '%d'", f.field_name, field_id)
                return f.item_value, True
        logger.debug("no matching field for ID '%d' in secret '%s'", field_id, self.name)
        return "", False

    def to_request_json(self) -> bytes:
        payload = self.model_dump(by_alias=True, mode="json")
        if self.ssh_key_args is None:
            payload.pop("sshKeyArgs", None)
        for key in _OMIT_WHEN_ZERO:
            if not payload.get(key):
                payload.pop(key, None)
        return json.dumps(payload).encode("utf-8")


class FieldMod(WireModel):
    slug: str
    dirty: bool = True
    value: str | None = None


class FieldMods(WireModel):
    secret_fields: list[FieldMod] = Field(default_factory=list)


class SecretPatch(WireModel):
    """Partial update of individual secret fields (``PATCH secrets/{id}/general``)."""

    data: FieldMods = Field(default_factory=FieldMods)

    @classmethod
    def clear_field(cls, slug: str) -> SecretPatch:
        """Patch that deletes a field's content, e.g. a file attachment."""
        return cls(data=FieldMods(secret_fields=[FieldMod(slug=slug, dirty=True, value=None)]))

    def to_request_json(self) -> bytes:
        return self.model_dump_json(by_alias=True).encode("utf-8")


RequestBody = Secret | SecretPatch


class SearchRecord(WireModel):
    id: int = 0
    name: str = ""
    folder_id: int = 0
    secret_template_id: int = 0


class SearchResult(WireModel):
    records: list[SearchRecord] = Field(default_factory=list)


# ─── Templates ───────────────────────────────────────────────────────────


class SecretTemplateField(WireModel):
    secret_template_field_id: int = 0
    field_slug_name: str = ""
    display_name: str = ""
    description: str = ""
    name: str = ""
    list_type: str = ""
    is_file: bool = False
    is_list: bool = False
    is_notes: bool = False
    is_password: bool = False
    is_required: bool = False
    is_url: bool = False


class SecretTemplate(WireModel):
    """A secret template: the schema a secret's fields are checked against.

    The lookups below are linear scans and the first match wins.
    """

    name: str = ""
    id: int = 0
    fields: list[SecretTemplateField] = Field(default_factory=list)

    def field_id_to_slug(self, field_id: int) -> tuple[str, bool]:
        """Return the slug of the field with the given ID, and whether it exists."""
        for f in self.fields:
            if f.secret_template_field_id == field_id:
                logger.debug(
                    "template field with slug '%s' matches the given ID '%d'",
                    f.field_slug_name,
                    field_id,
                )
                return f.field_slug_name, True
        logger.debug("no matching template field with id '%d' in template '%s'", field_id, self.name)
        return "", False

    def field_slug_to_id(self, slug: str) -> tuple[int, bool]:
        """Return the ID of the field with the given slug, and whether it exists."""
        f, found = self.get_field(slug)
        if f is not None:
            return f.secret_template_field_id, found
        return 0, found

    def get_field(self, slug: str) -> tuple[SecretTemplateField | None, bool]:
        """Return the field with the given slug, and whether it exists."""
        for f in self.fields:
            if f.field_slug_name == slug:
                logger.debug(
                    "template field with ID '%d' matches the given slug '%s'",
                    f.secret_template_field_id,
                    slug,
                )
                return f, True
        logger.debug("no matching template field with slug '%s' in template '%s'", slug, self.name)
        return None, False

    def is_file_field(self, slug: str) -> bool:
        f, _ = self.get_field(slug)
        return f is not None and f.is_file
