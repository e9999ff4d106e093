"""
Server — the client entry point.

Usage:
    from tss import Server

    with Server.from_env() as tss:
        secret = tss.secret(42)
        password, ok = secret.field("password")
"""

from __future__ import annotations

import httpx

from tss import reader, templates, writer
from tss.auth import TokenCache
from tss.config import Configuration, get_config
from tss.models import Secret, SecretTemplate
from tss.transport import Transport


class Server:
    """Access to the secrets stored in one Secret Server."""

    def __init__(
        self,
        config: Configuration,
        cache: TokenCache | None = None,
        client: httpx.Client | None = None,
    ) -> None:
        self.config = config
        self.transport = Transport(config, cache=cache, client=client)

    @classmethod
    def from_env(cls, cache: TokenCache | None = None) -> Server:
        return cls(get_config(), cache=cache)

    def close(self) -> None:
        self.transport.close()

    def __enter__(self) -> Server:
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def secret(self, secret_id: int) -> Secret:
        return reader.read_secret(self.transport, secret_id)

    def secrets(self, search_text: str, field: str = "") -> list[Secret]:
        return reader.search_secrets(self.transport, search_text, field)

    def create_secret(self, secret: Secret) -> Secret:
        return writer.create_secret(self.transport, secret)

    def update_secret(self, secret: Secret) -> Secret:
        return writer.update_secret(self.transport, secret)

    def delete_secret(self, secret_id: int) -> None:
        writer.delete_secret(self.transport, secret_id)

    def secret_template(self, template_id: int) -> SecretTemplate:
        return templates.get_template(self.transport, template_id)

    def generate_password(self, slug: str, template: SecretTemplate) -> str:
        return templates.generate_password(self.transport, slug, template)
