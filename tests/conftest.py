"""
Test fixtures for the Secret Server client.

FakeSecretServer stands in for the transport: it keeps secrets, templates and
file attachments in memory and answers request()/upload_file()/search() the
way the REST API does, recording every call.
"""

from __future__ import annotations

import json
from typing import Any

import pytest

from tss.errors import TransportError
from tss.models import (
    SearchRecord,
    SearchResult,
    Secret,
    SecretField,
    SecretPatch,
    SecretTemplate,
)

FILE_PLACEHOLDER = "*** Not Valid For Display ***"


class FakeSecretServer:
    def __init__(self, templates: list[SecretTemplate] | None = None) -> None:
        self.templates = {t.id: t for t in templates or []}
        self.secrets: dict[int, Secret] = {}
        self.files: dict[tuple[int, str], bytes] = {}
        self.calls: list[tuple[str, str, str, Any]] = []
        self.uploads: list[tuple[int, str, str, bytes]] = []
        self.failures: dict[tuple[str, str], Exception] = {}
        self.raw_responses: dict[tuple[str, str], bytes] = {}
        self.next_id = 100
        self.next_attachment_id = 1

    # ── transport interface ──

    def request(self, method: str, resource: str, path: str = "", body: Any = None) -> bytes:
        self.calls.append((method, resource, path, body))
        if (method, path) in self.failures:
            raise self.failures[(method, path)]
        if (method, path) in self.raw_responses:
            return self.raw_responses[(method, path)]
        if resource == "secret-templates":
            return self._templates(method, path)
        return self._secrets(method, path, body)

    def upload_file(self, secret_id: int, slug: str, filename: str, content: bytes) -> None:
        self.calls.append(("PUT", "secrets", f"{secret_id}/fields/{slug}", content))
        if ("PUT", f"{secret_id}/fields/{slug}") in self.failures:
            raise self.failures[("PUT", f"{secret_id}/fields/{slug}")]
        self.uploads.append((secret_id, slug, filename, content))
        field = self._field(secret_id, slug)
        field.filename = filename
        field.file_attachment_id = self.next_attachment_id
        self.next_attachment_id += 1
        self.files[(secret_id, slug)] = content

    def search(self, resource: str, search_text: str, field: str = "") -> bytes:
        self.calls.append(("SEARCH", resource, search_text, field))
        records = [
            SearchRecord(id=s.id, name=s.name)
            for s in self.secrets.values()
            if search_text.lower() in s.name.lower()
        ]
        return SearchResult(records=records).model_dump_json(by_alias=True).encode()

    # ── helpers ──

    @property
    def writes(self) -> list[tuple[str, str, str, Any]]:
        return [c for c in self.calls if c[0] in ("POST", "PUT", "PATCH", "DELETE")]

    def add_secret(self, secret: Secret) -> Secret:
        self.secrets[secret.id] = secret
        return secret

    def _templates(self, method: str, path: str) -> bytes:
        if method == "GET" and path.isdigit() and int(path) in self.templates:
            return self.templates[int(path)].model_dump_json(by_alias=True).encode()
        if method == "POST" and path.startswith("generate-password/"):
            return json.dumps(f"generated-{path.rsplit('/', 1)[1]}").encode()
        raise TransportError(404, "Not Found", b'{"message": "template not found"}')

    def _secrets(self, method: str, path: str, body: Any) -> bytes:
        parts = path.split("/") if path else []
        if method == "POST" and not parts:
            secret = Secret.model_validate_json(body.to_request_json())
            secret.id = self.next_id
            secret.active = True
            self.next_id += 1
            self._apply_template(secret)
            if secret.ssh_key_args is not None:
                self._generate(secret)
            self.secrets[secret.id] = secret
            return self._render(secret)
        if not parts or not parts[0].isdigit() or int(parts[0]) not in self.secrets:
            raise TransportError(404, "Not Found", b'{"message": "secret not found"}')

        secret_id = int(parts[0])
        secret = self.secrets[secret_id]
        if method == "GET" and len(parts) == 1:
            return self._render(secret)
        if method == "GET" and len(parts) == 3 and parts[1] == "fields":
            return self.files[(secret_id, parts[2])]
        if method == "PUT" and len(parts) == 1:
            update = Secret.model_validate_json(body.to_request_json())
            for new in update.fields:
                field = self._match(secret, new.slug, new.field_id)
                field.item_value = new.item_value
            secret.name = update.name or secret.name
            return self._render(secret)
        if method == "PATCH" and parts[1:] == ["general"]:
            patch = SecretPatch.model_validate_json(body.to_request_json())
            for mod in patch.data.secret_fields:
                field = self._field(secret_id, mod.slug)
                if mod.dirty and mod.value is None:
                    field.filename = ""
                    field.file_attachment_id = 0
                    self.files.pop((secret_id, mod.slug), None)
            return self._render(secret)
        if method == "DELETE" and len(parts) == 1:
            secret.active = False
            return b"{}"
        raise TransportError(405, "Method Not Allowed", b"")

    def _apply_template(self, secret: Secret) -> None:
        template = self.templates[secret.secret_template_id]
        for field in secret.fields:
            slug = field.slug or template.field_id_to_slug(field.field_id)[0]
            tf, _ = template.get_field(slug)
            field.slug = slug
            field.field_id = tf.secret_template_field_id
            field.field_name = tf.display_name
            field.is_file = tf.is_file
            field.is_password = tf.is_password
            field.is_notes = tf.is_notes
        present = {f.slug for f in secret.fields}
        for tf in template.fields:
            if tf.field_slug_name not in present:
                secret.fields.append(
                    self._blank_field(tf.field_slug_name, tf.secret_template_field_id, tf.display_name, tf.is_file)
                )

    @staticmethod
    def _blank_field(slug: str, field_id: int, name: str, is_file: bool) -> SecretField:
        return SecretField(slug=slug, field_id=field_id, field_name=name, is_file=is_file)

    def _generate(self, secret: Secret) -> None:
        args = secret.ssh_key_args
        for field in secret.fields:
            if field.is_file and args.generate_ssh_keys:
                kind = "PRIVATE" if "private" in field.slug else "PUBLIC"
                self.files[(secret.id, field.slug)] = f"-----BEGIN {kind} KEY-----\n{'A' * 200}\n".encode()
                field.filename = field.filename or field.field_name
                field.file_attachment_id = self.next_attachment_id
                self.next_attachment_id += 1
            elif field.slug.endswith("passphrase") and args.generate_passphrase:
                field.item_value = "generated-passphrase-0123"

    def _match(self, secret: Secret, slug: str, field_id: int):
        for field in secret.fields:
            if (slug and field.slug == slug) or (not slug and field.field_id == field_id):
                return field
        raise TransportError(400, "Bad Request", f"no field {slug or field_id}".encode())

    def _field(self, secret_id: int, slug: str):
        return self._match(self.secrets[secret_id], slug, 0)

    def _render(self, secret: Secret) -> bytes:
        shown = secret.model_copy(deep=True)
        shown.ssh_key_args = None
        for field in shown.fields:
            if field.is_file:
                field.item_value = FILE_PLACEHOLDER if field.file_attachment_id else ""
        return shown.to_request_json()


# ─── Templates ───────────────────────────────────────────────────────────


@pytest.fixture
def password_template() -> SecretTemplate:
    return SecretTemplate.model_validate(
        {
            "id": 6007,
            "name": "Password",
            "fields": [
                {"secretTemplateFieldId": 108, "fieldSlugName": "resource", "displayName": "Resource"},
                {"secretTemplateFieldId": 111, "fieldSlugName": "username", "displayName": "Username"},
                {
                    "secretTemplateFieldId": 110,
                    "fieldSlugName": "password",
                    "displayName": "Password",
                    "isPassword": True,
                },
                {"secretTemplateFieldId": 112, "fieldSlugName": "notes", "displayName": "Notes", "isNotes": True},
            ],
        }
    )


@pytest.fixture
def ssh_template() -> SecretTemplate:
    return SecretTemplate.model_validate(
        {
            "id": 6026,
            "name": "Unix Account (SSH Key)",
            "fields": [
                {"secretTemplateFieldId": 301, "fieldSlugName": "machine", "displayName": "Machine"},
                {"secretTemplateFieldId": 302, "fieldSlugName": "username", "displayName": "Username"},
                {
                    "secretTemplateFieldId": 303,
                    "fieldSlugName": "password",
                    "displayName": "Password",
                    "isPassword": True,
                },
                {
                    "secretTemplateFieldId": 304,
                    "fieldSlugName": "private-key",
                    "displayName": "Private Key",
                    "isFile": True,
                },
                {
                    "secretTemplateFieldId": 305,
                    "fieldSlugName": "public-key",
                    "displayName": "Public Key",
                    "isFile": True,
                },
                {
                    "secretTemplateFieldId": 306,
                    "fieldSlugName": "private-key-passphrase",
                    "displayName": "Private Key Passphrase",
                    "isPassword": True,
                },
            ],
        }
    )


@pytest.fixture
def fake_server(password_template: SecretTemplate, ssh_template: SecretTemplate) -> FakeSecretServer:
    return FakeSecretServer([password_template, ssh_template])
