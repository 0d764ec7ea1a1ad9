"""Helpers for generating consistent cache keys."""

import hashlib
import json
from typing import Any


class CacheKey:
    """Helper for generating consistent cache keys."""

    @staticmethod
    def from_parts(*parts: str) -> str:
        """Generate a digest from multiple string parts."""
        combined = ":".join(str(part) for part in parts if part)
        return hashlib.sha256(combined.encode()).hexdigest()[:32]

    @staticmethod
    def from_params(prefix: str, params: Any) -> str | None:
        """Generate a prefixed key from caller-supplied parameters.

        Dictionaries are serialized with sorted keys, so equal parameters
        always map to the same key. Returns None when params is None.
        """
        if params is None:
            return None

        if isinstance(params, str):
            serialized = params
        else:
            serialized = json.dumps(
                params, sort_keys=True, separators=(",", ":"), default=str
            )
        return f"{prefix}{CacheKey.from_parts(serialized)}"
