import hashlib
import secrets
from dataclasses import dataclass

from cryptography.hazmat.primitives.ciphers.aead import AESGCM

KEY_BITS = 256
IV_BYTES = 12


@dataclass(frozen=True)
class EncryptedDocument:
    """AES-256-GCM ciphertext (tag appended) with the IV and key that produced it."""

    ciphertext: bytes
    iv: bytes
    key: bytes

    @property
    def key_hash(self) -> str:
        """SHA-256 of the key, stored with the document row instead of the key."""
        return hashlib.sha256(self.key).hexdigest()


def encrypt_document(data: bytes, key: bytes | None = None) -> EncryptedDocument:
    """Encrypt with a fresh 96-bit IV; a new 256-bit key is generated if none is given."""
    if key is None:
        key = AESGCM.generate_key(bit_length=KEY_BITS)
    iv = secrets.token_bytes(IV_BYTES)
    ciphertext = AESGCM(key).encrypt(iv, data, None)
    return EncryptedDocument(ciphertext=ciphertext, iv=iv, key=key)


def decrypt_document(ciphertext: bytes, key: bytes, iv: bytes) -> bytes:
    """Decrypt and authenticate. Raises cryptography's InvalidTag on tampering."""
    return AESGCM(key).decrypt(iv, ciphertext, None)
