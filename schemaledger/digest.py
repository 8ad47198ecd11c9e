"""Content fingerprints for migration bodies."""

from __future__ import annotations

import hashlib

from schemaledger.types import Digest

DEFAULT_ALGORITHM = "md5"


def compute_digest(body: str, algorithm: str = DEFAULT_ALGORITHM) -> Digest:
    """Hex digest of the body's UTF-8 bytes, hashed exactly as given."""
    return hashlib.new(algorithm, body.encode("utf-8")).hexdigest()
