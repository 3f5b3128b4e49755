"""Key generation for Curve25519 WireGuard keys."""

import base64
import logging
import shutil
import subprocess
from dataclasses import dataclass
from typing import List, Optional

import nacl.public
import nacl.utils

from ..errors import ToolUnavailable

logger = logging.getLogger(__name__)

KEY_SIZE = 32


@dataclass(frozen=True)
class KeyPair:
    """WireGuard key pair, both halves base64-encoded."""
    private_key: str
    public_key: str


def _b64(raw: bytes) -> str:
    return base64.b64encode(raw).decode('utf-8')


def clamp_private_key(raw: bytes) -> bytes:
    """
    Clamp a Curve25519 scalar the way ``wg genkey`` does.

    Args:
        raw: 32 random bytes

    Returns:
        Clamped private key bytes
    """
    key = bytearray(raw)
    key[0] &= 248
    key[31] &= 127
    key[31] |= 64
    return bytes(key)


class NaclKeyGenerator:
    """Generates WireGuard keys in-process with PyNaCl."""

    name = "nacl"

    def check_available(self) -> None:
        """PyNaCl is a hard dependency, so nothing to check."""

    def generate_keypair(self) -> KeyPair:
        """
        Generate a new Curve25519 key pair.

        Returns:
            KeyPair: private and public key, base64-encoded
        """
        raw = clamp_private_key(nacl.utils.random(KEY_SIZE))
        private_key = nacl.public.PrivateKey(raw)
        return KeyPair(
            private_key=_b64(bytes(private_key)),
            public_key=_b64(bytes(private_key.public_key)),
        )

    def public_key(self, private_key_b64: str) -> str:
        """
        Derive the public key from a base64-encoded private key.

        Args:
            private_key_b64: Base64-encoded private key

        Returns:
            Base64-encoded public key
        """
        raw = base64.b64decode(private_key_b64)
        return _b64(bytes(nacl.public.PrivateKey(raw).public_key))

    def generate_preshared_key(self) -> str:
        """Generate a random 256-bit preshared key."""
        return _b64(nacl.utils.random(KEY_SIZE))


class WgToolKeyGenerator:
    """Generates WireGuard keys by shelling out to wg(8)."""

    name = "wg"

    def __init__(self, wg_path: str = "wg"):
        self.wg_path = wg_path

    def check_available(self) -> None:
        """Raise ToolUnavailable unless the wg binary is on PATH."""
        if shutil.which(self.wg_path) is None:
            raise ToolUnavailable(f"WireGuard tool '{self.wg_path}' not found on PATH")

    def _run(self, args: List[str], input_text: Optional[str] = None) -> str:
        cmd = [self.wg_path, *args]
        logger.debug(f"Running {' '.join(cmd)}")
        try:
            proc = subprocess.run(
                cmd,
                input=input_text,
                capture_output=True,
                text=True,
                check=True,
            )
        except FileNotFoundError as e:
            raise ToolUnavailable(f"WireGuard tool '{self.wg_path}' not found") from e
        except subprocess.CalledProcessError as e:
            raise ToolUnavailable(
                f"'{' '.join(cmd)}' failed with exit status {e.returncode}: {e.stderr.strip()}"
            ) from e
        return proc.stdout.strip()

    def generate_keypair(self) -> KeyPair:
        private_key = self._run(["genkey"])
        return KeyPair(private_key=private_key, public_key=self.public_key(private_key))

    def public_key(self, private_key_b64: str) -> str:
        # pubkey reads the private key from stdin
        return self._run(["pubkey"], input_text=private_key_b64 + "\n")

    def generate_preshared_key(self) -> str:
        return self._run(["genpsk"])


KEY_GENERATORS = {
    NaclKeyGenerator.name: NaclKeyGenerator,
    WgToolKeyGenerator.name: WgToolKeyGenerator,
}


def get_key_generator(name: str = "nacl"):
    """
    Look up a key generator backend by name.

    Args:
        name: Backend name ("nacl" or "wg")

    Returns:
        Key generator instance
    """
    try:
        return KEY_GENERATORS[name]()
    except KeyError:
        raise ValueError(
            f"Unknown key generator '{name}' (choose from: {', '.join(sorted(KEY_GENERATORS))})"
        ) from None
