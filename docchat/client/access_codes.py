"""Per-user, per-collection cache of backend access codes.

Codes are written only when the backend sends a ``CACHE_ACCESS_CODE``
instruction and live as long as the owning session controller.
"""

import logging

logger = logging.getLogger(__name__)

# Number of trailing API key characters that identify a user
USER_ID_LENGTH = 6


def derive_user_id(api_key: str | None) -> str | None:
    """Derive the local user id from the API key.

    Args:
        api_key: Backend API key, possibly empty.

    Returns:
        The last USER_ID_LENGTH characters of the key, or None without a key.
    """
    if not api_key:
        return None
    return api_key[-USER_ID_LENGTH:]


class AccessCodeCache:
    """Two-level mapping: user id -> collection name -> access code."""

    def __init__(self) -> None:
        self._codes: dict[str, dict[str, str]] = {}

    def store(self, user_id: str, collection_name: str, access_code: str) -> None:
        self._codes.setdefault(user_id, {})[collection_name] = access_code
        logger.info(f"Cached access code for collection '{collection_name}'")

    def get(self, user_id: str | None, collection_name: str) -> str | None:
        if user_id is None:
            return None
        return self._codes.get(user_id, {}).get(collection_name)

    def for_user(self, user_id: str | None) -> dict[str, str] | None:
        """Return a copy of the user's codes, or None if there are none."""
        if user_id is None:
            return None
        codes = self._codes.get(user_id)
        return dict(codes) if codes else None

    def as_dict(self) -> dict[str, dict[str, str]]:
        return {user_id: dict(codes) for user_id, codes in self._codes.items()}

    def __len__(self) -> int:
        return sum(len(codes) for codes in self._codes.values())
