'''
Pending-change buffer.

Mutations update memory immediately and queue one or more PendingOps. A
PendingOp is a frozen value holding the exact rows to write, captured when
it was queued, so later edits can never leak into an op that is already
waiting. commit() replays the queue strictly in order; discard() drops it.
'''
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from ..models.schedule import RawBlock, GridConfig
from ..models.labels import Label
from ..common.exceptions import PersistenceError
from ..common.logger import log
from .schedule_repository import ScheduleRepository


class PendingOp(BaseModel):
    """Base class of every deferred write."""
    user_id: UUID

    model_config = ConfigDict(frozen=True)

    async def apply(self, repository: ScheduleRepository):
        raise NotImplementedError


class ReplaceScheduleOp(PendingOp):
    blocks: tuple[RawBlock, ...]

    async def apply(self, repository: ScheduleRepository):
        await repository.replace_schedule_entries(self.user_id, self.blocks)


class ReplaceNotesOp(PendingOp):
    notes: dict[str, str]

    async def apply(self, repository: ScheduleRepository):
        await repository.replace_instance_notes(self.user_id, self.notes)


class UpsertNoteOp(PendingOp):
    key: str
    content: str

    async def apply(self, repository: ScheduleRepository):
        await repository.upsert_instance_note(self.user_id, self.key, self.content)


class DeleteNoteOp(PendingOp):
    key: str

    async def apply(self, repository: ScheduleRepository):
        await repository.delete_instance_note(self.user_id, self.key)


class UpsertConfigOp(PendingOp):
    config: GridConfig

    async def apply(self, repository: ScheduleRepository):
        await repository.upsert_calendar_config(self.user_id, self.config)


class UpsertLabelOp(PendingOp):
    label: Label

    async def apply(self, repository: ScheduleRepository):
        await repository.upsert_label(self.user_id, self.label)


class DeleteLabelOp(PendingOp):
    label_id: str

    async def apply(self, repository: ScheduleRepository):
        await repository.delete_label(self.user_id, self.label_id)


class PendingChangeBuffer:
    """
    CLEAN while empty, DIRTY otherwise.

    Callers must not start a second commit() while one is still running;
    the UI disables saving during a commit.
    """
    def __init__(self):
        self._ops: list[PendingOp] = []

    @property
    def has_unsaved_changes(self) -> bool:
        return bool(self._ops)

    @property
    def ops(self) -> tuple[PendingOp, ...]:
        return tuple(self._ops)

    def enqueue(self, op: PendingOp):
        self._ops.append(op)

    async def commit(self, repository: ScheduleRepository) -> int:
        """
        Applies every op in enqueue order, each awaited before the next, then
        commits. On any failure the transaction is rolled back, the queue is
        kept as-is and PersistenceError is raised.
        Returns the number of ops flushed.
        """
        if not self._ops:
            return 0

        ops = list(self._ops)
        log.info(f"Committing {len(ops)} pending ops.")
        try:
            for index, op in enumerate(ops):
                log.info(f"Applying pending op {index + 1}/{len(ops)}: {type(op).__name__}")
                await op.apply(repository)
            await repository.commit()
        except Exception as e:
            log.error(f"Commit failed, keeping {len(self._ops)} pending ops: {e}", exc_info=True)
            await repository.rollback()
            raise PersistenceError(f"Failed to save changes: {e}") from e

        # ops queued while the commit was awaiting stay pending
        del self._ops[:len(ops)]
        return len(ops)

    def discard(self) -> int:
        """Drops every queued op without running it. Returns how many were dropped."""
        dropped = len(self._ops)
        self._ops.clear()
        if dropped:
            log.info(f"Discarded {dropped} pending ops.")
        return dropped
