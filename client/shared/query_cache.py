"""
Keyed query cache shared by the session core and its host.

Holds the last fetched value per query key ("characters", "userProfile",
"battleNetLinkStatus", ...). Invalidation is awaitable: when invalidate()
returns, the entries are gone and every subscriber has finished reacting,
so callers can sequence work after it without guessing a delay.
"""

import logging
from typing import Any, Awaitable, Callable, Optional

logger = logging.getLogger(__name__)

# Query keys used across modules
CHARACTERS_KEY = "characters"
USER_PROFILE_KEY = "userProfile"
BATTLE_NET_LINK_STATUS_KEY = "battleNetLinkStatus"
AUTH_KEY = "auth"

InvalidationListener = Callable[[str], Awaitable[None]]


class QueryCache:
    """In-memory query cache with awaitable invalidation."""

    def __init__(self) -> None:
        self._entries: dict[str, Any] = {}
        self._listeners: dict[str, list[InvalidationListener]] = {}

    def get(self, key: str) -> Optional[Any]:
        """Get a cached value, or None if the key is not cached."""
        return self._entries.get(key)

    def set(self, key: str, value: Any) -> None:
        """Store a value under a key."""
        self._entries[key] = value

    def has(self, key: str) -> bool:
        return key in self._entries

    async def fetch(self, key: str, fetcher: Callable[[], Awaitable[Any]]) -> Any:
        """Return the cached value for key, fetching and storing it on a miss."""
        if key in self._entries:
            return self._entries[key]
        value = await fetcher()
        self._entries[key] = value
        return value

    def subscribe(self, key: str, listener: InvalidationListener) -> Callable[[], None]:
        """
        Register a coroutine called whenever key is invalidated.

        Returns:
            A function that removes the listener
        """
        self._listeners.setdefault(key, []).append(listener)

        def unsubscribe() -> None:
            listeners = self._listeners.get(key, [])
            if listener in listeners:
                listeners.remove(listener)

        return unsubscribe

    async def invalidate(self, *keys: str) -> None:
        """
        Drop the given keys and wait for their subscribers.

        A failing subscriber is logged and does not stop the others; the
        entries are dropped regardless.
        """
        for key in keys:
            self._entries.pop(key, None)

        for key in keys:
            for listener in list(self._listeners.get(key, [])):
                try:
                    await listener(key)
                except Exception:
                    logger.exception(f"Invalidation listener for '{key}' failed")

        logger.debug(f"Invalidated queries: {', '.join(keys)}")

    def clear(self) -> None:
        """Drop every entry (listeners are kept)."""
        self._entries.clear()
