"""Durable on-disk storage for key material."""

import logging
import os
import shutil
from pathlib import Path
from typing import Optional

from ..errors import KeyStorageIO

logger = logging.getLogger(__name__)

PSK_NAMESPACE = "psk"


def open_restricted(path: Path, mode: int = 0o600):
    """
    Open a file for writing that is never readable beyond ``mode``.

    Args:
        path: File to create or truncate
        mode: Permission bits

    Returns:
        Writable text file object
    """
    fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, mode)
    try:
        # O_CREAT only applies mode to new files
        os.fchmod(fd, mode)
    except OSError:
        os.close(fd)
        raise
    return os.fdopen(fd, 'w', encoding='utf-8')


class FileKeyStorage:
    """
    Stores keys as small text files below a root directory.

    Layout::

        <root>/<host>/wg0.key     private key (0600)
        <root>/<host>/wg0.pub     public key
        <root>/psk/<pair>.key     preshared key (0600)

    Each file starts with ``#`` comment lines naming the key type and its
    owner, followed by the base64 key.
    """

    def __init__(self, root: Path, interface: str = "wg0"):
        self.root = Path(root)
        self.interface = interface

    # Paths

    def private_key_path(self, host_id: str) -> Path:
        return self.root / host_id / f"{self.interface}.key"

    def public_key_path(self, host_id: str) -> Path:
        return self.root / host_id / f"{self.interface}.pub"

    def preshared_key_path(self, pair_id: str) -> Path:
        return self.root / PSK_NAMESPACE / f"{pair_id}.key"

    # Primitive operations

    def exists(self, path: Path) -> bool:
        return path.is_file()

    def read(self, path: Path) -> str:
        """
        Read a key file, skipping comment lines.

        Args:
            path: Key file path

        Returns:
            Base64-encoded key
        """
        try:
            with open(path, 'r') as f:
                lines = f.readlines()
        except OSError as e:
            raise KeyStorageIO(f"Cannot read {path}: {e}") from e

        key_lines = [line.strip() for line in lines if not line.startswith('#')]
        key = ''.join(key_lines)
        if not key:
            raise KeyStorageIO(f"Key file {path} is empty")
        return key

    def write(self, path: Path, key: str, header: str, owner: str, secret: bool = True) -> Path:
        """
        Write a key file, creating its directory when needed.

        Args:
            path: Key file path
            key: Base64-encoded key
            header: Key type for the comment header
            owner: Host or pair id the key belongs to
            secret: Restrict permissions to the owner

        Returns:
            Path that was written
        """
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.parent.chmod(0o700)
            with open_restricted(path, 0o600 if secret else 0o644) as f:
                f.write(f"# {header}\n")
                f.write(f"# Owner: {owner}\n")
                f.write(f"{key.strip()}\n")
        except OSError as e:
            raise KeyStorageIO(f"Cannot write {path}: {e}") from e

        logger.debug(f"Wrote {header.lower()} for {owner} to {path}")
        return path

    # Keypairs

    def read_private_key(self, host_id: str) -> Optional[str]:
        path = self.private_key_path(host_id)
        return self.read(path) if self.exists(path) else None

    def read_public_key(self, host_id: str) -> Optional[str]:
        path = self.public_key_path(host_id)
        return self.read(path) if self.exists(path) else None

    def write_private_key(self, host_id: str, key: str) -> Path:
        return self.write(self.private_key_path(host_id), key, "WireGuard Private Key", host_id)

    def write_public_key(self, host_id: str, key: str) -> Path:
        return self.write(self.public_key_path(host_id), key, "WireGuard Public Key", host_id, secret=False)

    # Preshared keys

    def read_preshared_key(self, pair_id: str) -> Optional[str]:
        path = self.preshared_key_path(pair_id)
        return self.read(path) if self.exists(path) else None

    def write_preshared_key(self, pair_id: str, key: str) -> Path:
        return self.write(self.preshared_key_path(pair_id), key, "WireGuard Preshared Key", pair_id)

    def wipe(self) -> bool:
        """
        Remove all stored key material.

        Returns:
            True if anything was removed
        """
        if not self.root.exists():
            return False
        try:
            shutil.rmtree(self.root)
        except OSError as e:
            raise KeyStorageIO(f"Cannot remove {self.root}: {e}") from e
        logger.info(f"Removed key storage {self.root}")
        return True
