"""
Encrypted storage for vendor API credentials.

Credentials are encrypted at rest using Fernet (AES-128-CBC). The
encryption key is derived from a user-provided password with PBKDF2.
"""

from __future__ import annotations

import base64
import json
import os
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any

from cryptography.fernet import Fernet, InvalidToken
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC


class ProviderType(str, Enum):
    """Vendors that credentials can be stored for."""

    OVHCLOUD = "ovhcloud"


@dataclass
class ProviderCredential:
    """API credentials for one vendor account."""

    provider: ProviderType
    endpoint: str | None = None
    application_key: str | None = None
    application_secret: str | None = None
    consumer_key: str | None = None
    created_at: str | None = None  # ISO format timestamp

    def to_dict(self) -> dict[str, Any]:
        return {
            "provider": self.provider.value,
            "endpoint": self.endpoint,
            "application_key": self.application_key,
            "application_secret": self.application_secret,
            "consumer_key": self.consumer_key,
            "created_at": self.created_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ProviderCredential:
        return cls(
            provider=ProviderType(data["provider"]),
            endpoint=data.get("endpoint"),
            application_key=data.get("application_key"),
            application_secret=data.get("application_secret"),
            consumer_key=data.get("consumer_key"),
            created_at=data.get("created_at"),
        )

    def __repr__(self) -> str:
        return (
            f"ProviderCredential(provider={self.provider.value!r}, "
            f"endpoint={self.endpoint!r}, application_key={self.application_key!r})"
        )


class CredentialVault:
    """
    Encrypted credential storage.

    The vault file holds a random salt followed by a Fernet token of the
    JSON-encoded credentials.
    """

    SALT_SIZE = 16
    ITERATIONS = 480_000

    def __init__(self, vault_path: Path | None = None):
        """
        Initialize the credential vault.

        Args:
            vault_path: Path to the encrypted vault file. Defaults to
                       ~/.config/pool-providers/credentials.enc
        """
        if vault_path is None:
            config_dir = Path.home() / ".config" / "pool-providers"
            config_dir.mkdir(parents=True, exist_ok=True)
            vault_path = config_dir / "credentials.enc"

        self.vault_path = vault_path
        self._credentials: dict[ProviderType, ProviderCredential] = {}
        self._fernet: Fernet | None = None

    def _derive_key(self, password: str, salt: bytes) -> bytes:
        kdf = PBKDF2HMAC(
            algorithm=hashes.SHA256(),
            length=32,
            salt=salt,
            iterations=self.ITERATIONS,
        )
        return base64.urlsafe_b64encode(kdf.derive(password.encode()))

    def create(self, password: str) -> None:
        """Create a new, empty vault protected by ``password``."""
        salt = os.urandom(self.SALT_SIZE)
        self._fernet = Fernet(self._derive_key(password, salt))
        self._credentials = {}
        self._save(salt)

    def unlock(self, password: str) -> bool:
        """
        Unlock an existing vault.

        Returns:
            True if unlock succeeded, False if the vault is missing or the
            password is wrong.
        """
        if not self.vault_path.exists():
            return False

        data = self.vault_path.read_bytes()
        salt = data[:self.SALT_SIZE]
        fernet = Fernet(self._derive_key(password, salt))

        try:
            decrypted = fernet.decrypt(data[self.SALT_SIZE:])
        except InvalidToken:
            self.lock()
            return False

        creds_data = json.loads(decrypted.decode())
        self._credentials = {
            ProviderType(k): ProviderCredential.from_dict(v)
            for k, v in creds_data.items()
        }
        self._fernet = fernet
        return True

    def lock(self) -> None:
        """Lock the vault, clearing credentials from memory."""
        self._credentials = {}
        self._fernet = None

    def _save(self, salt: bytes | None = None) -> None:
        if self._fernet is None:
            raise RuntimeError("Vault is locked")

        creds_data = {k.value: v.to_dict() for k, v in self._credentials.items()}
        encrypted = self._fernet.encrypt(json.dumps(creds_data).encode())

        if salt is None:
            with open(self.vault_path, "rb") as f:
                salt = f.read(self.SALT_SIZE)

        with open(self.vault_path, "wb") as f:
            f.write(salt + encrypted)

        # Owner read/write only
        self.vault_path.chmod(0o600)

    def _require_unlocked(self) -> None:
        if self._fernet is None:
            raise RuntimeError("Vault is locked")

    @property
    def is_unlocked(self) -> bool:
        return self._fernet is not None

    @property
    def exists(self) -> bool:
        return self.vault_path.exists()

    def add(self, credential: ProviderCredential) -> None:
        """Add or replace the credential for ``credential.provider``."""
        self._require_unlocked()

        if not credential.created_at:
            credential.created_at = datetime.now(timezone.utc).isoformat()

        self._credentials[credential.provider] = credential
        self._save()

    def get(self, provider: ProviderType) -> ProviderCredential | None:
        self._require_unlocked()
        return self._credentials.get(provider)

    def remove(self, provider: ProviderType) -> bool:
        """Remove a credential. Returns False if none was stored."""
        self._require_unlocked()

        if provider not in self._credentials:
            return False
        del self._credentials[provider]
        self._save()
        return True

    def list_providers(self) -> list[ProviderType]:
        self._require_unlocked()
        return list(self._credentials.keys())

    def has(self, provider: ProviderType) -> bool:
        self._require_unlocked()
        return provider in self._credentials


# Singleton vault instance
_vault: CredentialVault | None = None


def get_vault(vault_path: Path | None = None) -> CredentialVault:
    """Get or create the global vault instance."""
    global _vault
    if _vault is None:
        _vault = CredentialVault(vault_path)
    return _vault
