'''
Schedule Repository

Async CRUD over the four tables behind the grid. Every call is scoped by
the owning user_id. Writes only flush; the pending-change buffer decides
when to commit or roll back.
'''
from typing import Annotated, Optional
from uuid import UUID

from fastapi import Depends
from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession

from ..database.engine import get_db_session
from ..database import models as db_models
from ..models.schedule import RawBlock, GridConfig
from ..models.labels import Label
from ..common.logger import log


class ScheduleRepository:
    """
    Persistence collaborator for the schedule engine.
    """
    def __init__(self, db: Annotated[AsyncSession, Depends(get_db_session)]):
        self.db = db

    # --- Reads ---

    async def fetch_config(self, user_id: UUID) -> Optional[GridConfig]:
        row = await self.db.get(db_models.CalendarConfig, user_id)
        if row is None:
            return None
        return GridConfig.model_validate(row)

    async def fetch_blocks(self, user_id: UUID) -> list[RawBlock]:
        stmt = select(db_models.ScheduleEntries).filter(
            db_models.ScheduleEntries.user_id == user_id
        ).order_by(
            db_models.ScheduleEntries.day_index,
            db_models.ScheduleEntries.start_minute
        )
        result = await self.db.execute(stmt)
        return [RawBlock.model_validate(row) for row in result.scalars().all()]

    async def fetch_notes(self, user_id: UUID) -> dict[str, str]:
        stmt = select(db_models.InstanceNotes).filter(
            db_models.InstanceNotes.user_id == user_id
        ).order_by(db_models.InstanceNotes.key)
        result = await self.db.execute(stmt)
        return {row.key: row.content for row in result.scalars().all()}

    async def fetch_labels(self, user_id: UUID) -> list[Label]:
        stmt = select(db_models.Labels).filter(
            db_models.Labels.user_id == user_id
        ).order_by(db_models.Labels.name, db_models.Labels.id)
        result = await self.db.execute(stmt)
        return [Label.model_validate(row) for row in result.scalars().all()]

    # --- Writes ---

    async def replace_schedule_entries(self, user_id: UUID, blocks: tuple[RawBlock, ...]):
        """Full replace: delete every row of the user, then insert the given blocks."""
        log.info(f"Replacing schedule entries for user {user_id} with {len(blocks)} rows.")
        await self.db.execute(
            delete(db_models.ScheduleEntries).where(db_models.ScheduleEntries.user_id == user_id)
        )
        self.db.add_all([
            db_models.ScheduleEntries(
                user_id=user_id,
                day_index=block.day_index,
                start_minute=block.start_minute,
                duration_minutes=block.duration_minutes,
                label_id=block.label_id
            )
            for block in blocks
        ])
        await self.db.flush()

    async def replace_instance_notes(self, user_id: UUID, notes: dict[str, str]):
        log.info(f"Replacing instance notes for user {user_id} with {len(notes)} rows.")
        await self.db.execute(
            delete(db_models.InstanceNotes).where(db_models.InstanceNotes.user_id == user_id)
        )
        self.db.add_all([
            db_models.InstanceNotes(user_id=user_id, key=key, content=content)
            for key, content in notes.items()
        ])
        await self.db.flush()

    async def upsert_instance_note(self, user_id: UUID, key: str, content: str):
        row = await self.db.get(db_models.InstanceNotes, (user_id, key))
        if row is None:
            self.db.add(db_models.InstanceNotes(user_id=user_id, key=key, content=content))
        else:
            row.content = content
        await self.db.flush()

    async def delete_instance_note(self, user_id: UUID, key: str):
        await self.db.execute(
            delete(db_models.InstanceNotes).where(
                db_models.InstanceNotes.user_id == user_id,
                db_models.InstanceNotes.key == key
            )
        )

    async def upsert_calendar_config(self, user_id: UUID, config: GridConfig):
        row = await self.db.get(db_models.CalendarConfig, user_id)
        values = config.model_dump()
        if row is None:
            self.db.add(db_models.CalendarConfig(user_id=user_id, **values))
        else:
            for key, value in values.items():
                setattr(row, key, value)
        await self.db.flush()

    async def upsert_label(self, user_id: UUID, label: Label):
        row = await self.db.get(db_models.Labels, label.id)
        values = label.model_dump(exclude={'id'})
        if row is None:
            self.db.add(db_models.Labels(id=label.id, user_id=user_id, **values))
        else:
            for key, value in values.items():
                setattr(row, key, value)
        await self.db.flush()

    async def delete_label(self, user_id: UUID, label_id: str):
        await self.db.execute(
            delete(db_models.Labels).where(
                db_models.Labels.user_id == user_id,
                db_models.Labels.id == label_id
            )
        )

    # --- Transaction ---

    async def commit(self):
        await self.db.commit()

    async def rollback(self):
        await self.db.rollback()
