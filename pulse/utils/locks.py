"""Per-key asyncio locks."""
import asyncio
import weakref


class KeyedLock:
    """
    Hands out one asyncio.Lock per key.

    Locks are held weakly, so a key's lock disappears once no coroutine is
    holding or waiting on it.

    Example:
        >>> locks = KeyedLock()
        >>> locks.get("a") is locks.get("a")
        True
    """

    def __init__(self):
        self._locks: "weakref.WeakValueDictionary[str, asyncio.Lock]" = (
            weakref.WeakValueDictionary()
        )

    def get(self, key: str) -> asyncio.Lock:
        """Return the lock for key, creating it if needed."""
        lock = self._locks.get(key)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[key] = lock
        return lock
