"""
Signing-related data models.

SigningConfig mirrors a per-profile entry in project configuration;
KeystoreCredential is the resolved, absolute form handed to a signer.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, Field, SecretStr


class CredentialSource(str, Enum):
    """Where a resolved credential came from."""

    ENVIRONMENT = "environment"
    PROJECT = "project"
    DEBUG = "debug"


class SigningConfig(BaseModel):
    """Signing entry declared in project configuration for one profile."""

    store_path: Path = Field(description="Keystore path relative to the project root")
    store_password: str = Field(description="Keystore password")
    key_alias: str | None = Field(default=None, description="Key alias inside the keystore")
    key_password: str | None = Field(default=None, description="Password of the aliased key")

    model_config = {"extra": "ignore"}


class KeystoreCredential(BaseModel):
    """Resolved keystore credential for a single signing invocation.

    Never cached and never written to disk.
    """

    path: Path = Field(description="Absolute keystore path")
    store_password: SecretStr
    alias: str | None = Field(default=None)
    key_password: SecretStr | None = Field(default=None)
    source: CredentialSource = Field(default=CredentialSource.PROJECT)

    model_config = {"frozen": True}

    @classmethod
    def single(
        cls, path: Path, store_password: str, source: CredentialSource = CredentialSource.PROJECT
    ) -> KeystoreCredential:
        """Credential for a keystore used with its default key."""
        return cls(path=path, store_password=SecretStr(store_password), source=source)

    def with_key(self, alias: str, key_password: str) -> KeystoreCredential:
        """Copy of this credential selecting an aliased key."""
        return self.model_copy(update={"alias": alias, "key_password": SecretStr(key_password)})

    @property
    def alias_or_empty(self) -> str:
        return self.alias or ""

    @property
    def key_password_or_empty(self) -> str:
        return self.key_password.get_secret_value() if self.key_password else ""
