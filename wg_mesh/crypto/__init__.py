"""Key material generation and storage."""

from .keys import KeyPair, NaclKeyGenerator, WgToolKeyGenerator, get_key_generator, clamp_private_key
from .storage import FileKeyStorage
from .keystore import KeyStore, canonical_pair_id

__all__ = [
    "KeyPair",
    "NaclKeyGenerator",
    "WgToolKeyGenerator",
    "get_key_generator",
    "clamp_private_key",
    "FileKeyStorage",
    "KeyStore",
    "canonical_pair_id",
]
