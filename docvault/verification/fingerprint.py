import hashlib

_CHUNK_SIZE = 1024 * 1024


def fingerprint(data: bytes) -> str:
    """SHA-256 of the entire content, hex encoded.

    Never computed over a truncated window: the digest is the identity used
    for duplicate and flag lookups.
    """
    digest = hashlib.sha256()
    view = memoryview(data)
    for offset in range(0, len(view), _CHUNK_SIZE):
        digest.update(view[offset : offset + _CHUNK_SIZE])
    return digest.hexdigest()
