"""
Opaque session tokens.

A token carries no claims.  It is valid only while it equals the value
stored on the user row; a later login replaces it and logout clears it.
"""

from __future__ import annotations

import uuid


def generate_token() -> str:
    """Return a fresh random (UUID4) token string."""
    return str(uuid.uuid4())
