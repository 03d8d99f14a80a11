'''
testing services/pending_changes.py
'''
import pytest
from unittest.mock import AsyncMock

from smart_calendar_backend.common.exceptions import PersistenceError
from smart_calendar_backend.models.schedule import RawBlock, GridConfig
from smart_calendar_backend.services.pending_changes import (
    PendingChangeBuffer,
    ReplaceScheduleOp,
    ReplaceNotesOp,
    UpsertNoteOp,
    DeleteNoteOp,
    UpsertConfigOp,
    DeleteLabelOp,
)

from tests.constants import TEST_USER_ID, WORK


def schedule_op(*blocks) -> ReplaceScheduleOp:
    return ReplaceScheduleOp(user_id=TEST_USER_ID, blocks=tuple(blocks))


@pytest.mark.anyio
class TestPendingChangeBufferCommit:

    async def test_starts_clean(self, fake_repository: AsyncMock):
        buffer = PendingChangeBuffer()
        assert buffer.has_unsaved_changes is False
        assert await buffer.commit(fake_repository) == 0
        fake_repository.commit.assert_not_awaited()

    async def test_commit_runs_ops_in_enqueue_order(self, fake_repository: AsyncMock, grid_config: GridConfig):
        buffer = PendingChangeBuffer()
        block = RawBlock(day_index=0, start_minute=300, duration_minutes=30, label_id=WORK)
        buffer.enqueue(schedule_op())
        buffer.enqueue(schedule_op(block))
        buffer.enqueue(UpsertNoteOp(user_id=TEST_USER_ID, key="0-300", content="hi"))
        buffer.enqueue(DeleteNoteOp(user_id=TEST_USER_ID, key="0-300"))
        buffer.enqueue(UpsertConfigOp(user_id=TEST_USER_ID, config=grid_config))
        buffer.enqueue(DeleteLabelOp(user_id=TEST_USER_ID, label_id=WORK))
        assert buffer.has_unsaved_changes is True

        flushed = await buffer.commit(fake_repository)

        assert flushed == 6
        assert [name for name, _ in fake_repository.calls] == [
            "replace_schedule_entries",
            "replace_schedule_entries",
            "upsert_instance_note",
            "delete_instance_note",
            "upsert_calendar_config",
            "delete_label",
            "commit",
        ]
        assert fake_repository.calls[1][1] == (TEST_USER_ID, (block,))
        assert buffer.has_unsaved_changes is False

    async def test_failure_aborts_rolls_back_and_stays_dirty(self, fake_repository: AsyncMock):
        buffer = PendingChangeBuffer()
        buffer.enqueue(schedule_op())
        buffer.enqueue(ReplaceNotesOp(user_id=TEST_USER_ID, notes={}))
        buffer.enqueue(UpsertNoteOp(user_id=TEST_USER_ID, key="0-300", content="hi"))
        fake_repository.replace_instance_notes.side_effect = RuntimeError("connection reset")

        with pytest.raises(PersistenceError) as e:
            await buffer.commit(fake_repository)

        assert isinstance(e.value.__cause__, RuntimeError)
        fake_repository.upsert_instance_note.assert_not_awaited()
        fake_repository.commit.assert_not_awaited()
        fake_repository.rollback.assert_awaited_once()
        assert buffer.has_unsaved_changes is True
        assert len(buffer.ops) == 3
        print(f"--- Correctly raised PersistenceError: {e.value} ---")

    async def test_retry_after_failure_flushes_everything(self, fake_repository: AsyncMock):
        buffer = PendingChangeBuffer()
        buffer.enqueue(schedule_op())
        buffer.enqueue(UpsertNoteOp(user_id=TEST_USER_ID, key="0-300", content="hi"))
        fake_repository.upsert_instance_note.side_effect = [RuntimeError("timeout"), None]

        with pytest.raises(PersistenceError):
            await buffer.commit(fake_repository)
        assert await buffer.commit(fake_repository) == 2
        assert buffer.has_unsaved_changes is False


class TestPendingChangeBufferDiscard:

    def test_discard_drops_without_running(self):
        buffer = PendingChangeBuffer()
        buffer.enqueue(schedule_op())
        buffer.enqueue(schedule_op())
        assert buffer.discard() == 2
        assert buffer.has_unsaved_changes is False
        assert buffer.ops == ()

    def test_ops_are_frozen(self):
        op = UpsertNoteOp(user_id=TEST_USER_ID, key="0-300", content="hi")
        with pytest.raises(Exception):
            op.content = "changed"
