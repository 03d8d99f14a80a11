'''
Keeps one ScheduleEngine per user for the lifetime of the app, so unsaved
edits survive between requests until they are committed or discarded.
'''
import asyncio
from uuid import UUID

from ..common.logger import log
from .schedule_repository import ScheduleRepository
from .schedule_engine import ScheduleEngine


class ScheduleSessionRegistry:
    """
    Lazily loads and then caches the engine of each user.
    """
    def __init__(self):
        self._engines: dict[UUID, ScheduleEngine] = {}
        self._load_lock = asyncio.Lock()

    def __contains__(self, user_id: UUID) -> bool:
        return user_id in self._engines

    def __len__(self) -> int:
        return len(self._engines)

    async def get_engine(self, user_id: UUID, repository: ScheduleRepository) -> ScheduleEngine:
        engine = self._engines.get(user_id)
        if engine is not None:
            return engine

        async with self._load_lock:
            # another request may have loaded it while we waited
            engine = self._engines.get(user_id)
            if engine is None:
                log.info(f"Opening schedule session for user {user_id}.")
                engine = ScheduleEngine(user_id)
                await engine.load(repository)
                self._engines[user_id] = engine
        return engine

    def release(self, user_id: UUID) -> bool:
        """
        Evicts the session once it holds nothing the database lacks: no
        pending ops and no lock. Called after every successful commit or
        discard; the next request reloads it.
        """
        engine = self._engines.get(user_id)
        if engine is None or engine.has_unsaved_changes or engine.locked:
            return False
        del self._engines[user_id]
        log.info(f"Released clean schedule session of user {user_id}; {len(self._engines)} sessions open.")
        return True
