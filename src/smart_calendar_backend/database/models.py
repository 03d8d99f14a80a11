from sqlalchemy import BigInteger, CheckConstraint, ForeignKeyConstraint, Index, Integer, JSON, PrimaryKeyConstraint, SmallInteger, Text, Uuid, text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
import uuid

# JSONB on Postgres, plain JSON elsewhere (tests run on SQLite)
JsonColumn = JSON().with_variant(JSONB(), 'postgresql')

class Base(DeclarativeBase):
    pass


class Labels(Base):
    __tablename__ = 'labels'
    __table_args__ = (
        PrimaryKeyConstraint('id', name='labels_pkey'),
        Index('idx_labels_user_id', 'user_id')
    )

    id: Mapped[str] = mapped_column(Text, primary_key=True)
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid)
    name: Mapped[str] = mapped_column(Text)
    color: Mapped[str] = mapped_column(Text)
    notes: Mapped[str] = mapped_column(Text, server_default=text("''"))
    open_tabs: Mapped[list] = mapped_column(JsonColumn, default=list)
    trashed_tabs: Mapped[list] = mapped_column(JsonColumn, default=list)
    custom_tabs: Mapped[dict] = mapped_column(JsonColumn, default=dict)


class ScheduleEntries(Base):
    __tablename__ = 'schedule_entries'
    __table_args__ = (
        CheckConstraint('day_index >= 0 AND day_index <= 6', name='valid_day_index'),
        CheckConstraint('start_minute >= 0', name='valid_start_minute'),
        CheckConstraint('duration_minutes > 0', name='positive_duration'),
        ForeignKeyConstraint(['label_id'], ['labels.id'], ondelete='CASCADE', name='schedule_entries_label_id_fkey'),
        PrimaryKeyConstraint('id', name='schedule_entries_pkey'),
        Index('idx_schedule_entries_user_id', 'user_id')
    )

    # BigInteger does not autoincrement on SQLite
    id: Mapped[int] = mapped_column(BigInteger().with_variant(Integer, 'sqlite'), primary_key=True, autoincrement=True)
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid)
    day_index: Mapped[int] = mapped_column(SmallInteger)
    start_minute: Mapped[int] = mapped_column(Integer)
    duration_minutes: Mapped[int] = mapped_column(Integer)
    label_id: Mapped[str] = mapped_column(Text)


class InstanceNotes(Base):
    __tablename__ = 'instance_notes'
    __table_args__ = (
        PrimaryKeyConstraint('user_id', 'key', name='instance_notes_pkey'),
    )

    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True)
    key: Mapped[str] = mapped_column(Text, primary_key=True)
    content: Mapped[str] = mapped_column(Text)


class CalendarConfig(Base):
    __tablename__ = 'calendar_config'
    __table_args__ = (
        CheckConstraint('step_minutes > 0', name='positive_step'),
        PrimaryKeyConstraint('user_id', name='calendar_config_pkey')
    )

    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True)
    start_hour: Mapped[int] = mapped_column(SmallInteger)
    start_minute: Mapped[int] = mapped_column(SmallInteger, server_default=text('0'))
    end_hour: Mapped[int] = mapped_column(SmallInteger)
    end_minute: Mapped[int] = mapped_column(SmallInteger, server_default=text('0'))
    step_minutes: Mapped[int] = mapped_column(SmallInteger)
