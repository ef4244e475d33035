"""Content fingerprints: SHA-256, lowercase hex."""
import hashlib

DIGEST_HEX_LENGTH = 64


def fingerprint(content: bytes) -> str:
    return hashlib.sha256(content).hexdigest()
