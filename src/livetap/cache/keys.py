"""Cache key builders for consistent key formatting."""

import hashlib


class CacheKeys:
    """Cache key builders for consistent key formatting."""

    PREFIX = "livetap"

    @classmethod
    def live_info(cls, source_url: str) -> str:
        """Key for the cached resolution of a channel source URL."""
        # Hash the URL for consistent key length
        hash_value = hashlib.sha1(source_url.encode()).hexdigest()
        return f"{cls.PREFIX}:live:{hash_value}"
