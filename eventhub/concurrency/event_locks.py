from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict
import asyncio


class EventLockRegistry:
    """
    Per-event mutual exclusion for capacity-affecting mutations.

    Locks are created when first requested and dropped once no task holds or
    waits for them, so the registry only ever contains events that are being
    mutated right now. This serialises writers inside one process; writers in
    other processes are kept apart by the event revision checks in the
    repository layer.
    """

    def __init__(self):
        self._locks: Dict[str, asyncio.Lock] = {}
        self._users: Dict[str, int] = {}

    @asynccontextmanager
    async def hold(self, event_id: str) -> AsyncIterator[None]:
        lock = self._locks.get(event_id)
        if lock is None:
            lock = self._locks[event_id] = asyncio.Lock()
        self._users[event_id] = self._users.get(event_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._users[event_id] -= 1
            if not self._users[event_id]:
                del self._users[event_id]
                del self._locks[event_id]

    def is_held(self, event_id: str) -> bool:
        lock = self._locks.get(event_id)
        return lock is not None and lock.locked()

    def __len__(self) -> int:
        return len(self._locks)


event_locks = EventLockRegistry()
