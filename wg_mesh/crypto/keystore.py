"""Lazily generated, persistent key material for the mesh."""

import logging
import threading

from .keys import KeyPair, NaclKeyGenerator
from .storage import FileKeyStorage

logger = logging.getLogger(__name__)

PAIR_SEPARATOR = "_"


def canonical_pair_id(host_a: str, host_b: str) -> str:
    """
    Order-independent identifier of a host pair.

    Args:
        host_a: One host id
        host_b: The other host id

    Returns:
        The two ids sorted and joined, e.g. ``alpha_beta``
    """
    if host_a == host_b:
        raise ValueError(f"A host cannot share a preshared key with itself: {host_a}")
    return PAIR_SEPARATOR.join(sorted([host_a, host_b]))


class KeyStore:
    """
    Owns host keypairs and pairwise preshared keys.

    Keys are generated on first request and persisted; later requests
    return the stored material without calling the generator again.
    Creating a KeyStore has no side effects.

    Responsibilities:
    - Generate each host keypair at most once
    - Never regenerate an existing private key
    - Resolve (a, b) and (b, a) to the same preshared key
    """

    def __init__(self, storage: FileKeyStorage, generator=None):
        """
        Initialize key store.

        Args:
            storage: Durable key storage
            generator: Key generation backend (PyNaCl if None)
        """
        self.storage = storage
        self.generator = generator or NaclKeyGenerator()
        # Guards every check-then-generate sequence
        self._lock = threading.Lock()

    def ensure_keypair(self, host_id: str) -> KeyPair:
        """
        Return the host's keypair, generating it if it does not exist yet.

        Args:
            host_id: Host identifier

        Returns:
            KeyPair: Stored or freshly generated keypair
        """
        with self._lock:
            private_key = self.storage.read_private_key(host_id)
            public_key = self.storage.read_public_key(host_id)

            if private_key and public_key:
                return KeyPair(private_key=private_key, public_key=public_key)

            if private_key:
                logger.warning(f"Public key of {host_id} missing, deriving it from the stored private key")
                public_key = self.generator.public_key(private_key)
                self.storage.write_public_key(host_id, public_key)
                return KeyPair(private_key=private_key, public_key=public_key)

            if public_key:
                logger.warning(f"Private key of {host_id} missing, replacing orphaned public key")

            logger.info(f"Generating keypair for {host_id}")
            keypair = self.generator.generate_keypair()
            self.storage.write_private_key(host_id, keypair.private_key)
            self.storage.write_public_key(host_id, keypair.public_key)
            return keypair

    def ensure_preshared_key(self, host_a: str, host_b: str) -> str:
        """
        Return the preshared key shared by two hosts, generating it once.

        Args:
            host_a: One host id
            host_b: The other host id

        Returns:
            Base64-encoded preshared key, identical for both argument orders
        """
        pair_id = canonical_pair_id(host_a, host_b)
        with self._lock:
            psk = self.storage.read_preshared_key(pair_id)
            if psk:
                return psk

            logger.info(f"Generating preshared key for {pair_id}")
            psk = self.generator.generate_preshared_key()
            self.storage.write_preshared_key(pair_id, psk)
            return psk

    def clean(self) -> bool:
        """
        Wipe all stored key material.

        Returns:
            True if anything was removed
        """
        with self._lock:
            return self.storage.wipe()
