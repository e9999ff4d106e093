"""
tss — Python client for the Delinea Secret Server REST API.

Public API:
    Server(config)                  → client bound to one server
    Server.secret(id)               → secret with file attachments inlined
    Server.secrets(text, field)     → secrets matching a search
    Server.create_secret(secret)    → created secret, re-read from the server
    Server.update_secret(secret)    → updated secret, re-read from the server
    Server.delete_secret(id)
    Server.secret_template(id)      → the template's field definitions
    Server.generate_password(slug, template)
"""

from __future__ import annotations

from tss.auth import TokenCache
from tss.config import Configuration, UserCredential, get_config
from tss.errors import (
    BusinessRuleError,
    ConfigurationError,
    FileFieldError,
    ResponseParseError,
    SchemaMismatchError,
    TransportError,
    TSSError,
    UnknownResourceError,
)
from tss.models import (
    Secret,
    SecretField,
    SecretPatch,
    SecretTemplate,
    SecretTemplateField,
    SshKeyArgs,
)
from tss.server import Server

__version__ = "0.1.0"

__all__ = [
    "BusinessRuleError",
    "Configuration",
    "ConfigurationError",
    "FileFieldError",
    "ResponseParseError",
    "SchemaMismatchError",
    "Secret",
    "SecretField",
    "SecretPatch",
    "SecretTemplate",
    "SecretTemplateField",
    "Server",
    "SshKeyArgs",
    "TSSError",
    "TokenCache",
    "TransportError",
    "UnknownResourceError",
    "UserCredential",
    "get_config",
]
