'''
Schedule API Models
'''
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, model_validator

from .labels import Label


class RawBlock(BaseModel):
    """
    A variable-length schedule entry addressed in absolute time.
    This is the source of truth; slot indices are always derived from it.
    Corresponds to db_models.ScheduleEntries.
    """
    day_index: int = Field(..., description="0=Monday, 6=Sunday")
    start_minute: int = Field(..., description="Minutes from midnight, not slot-relative.")
    duration_minutes: int
    label_id: str

    model_config = ConfigDict(from_attributes=True, frozen=True)

    @property
    def end_minute(self) -> int:
        return self.start_minute + self.duration_minutes

    def __str__(self) -> str:
        return f"day {self.day_index} [{self.start_minute}, {self.end_minute}) -> {self.label_id}"


class GridConfig(BaseModel):
    """
    The visible window [start, end) and the width of one slot.
    A partial trailing slot is simply not generated.
    """
    start_hour: int = Field(..., ge=0, le=23)
    start_minute: int = Field(0, ge=0, le=59)
    end_hour: int = Field(..., ge=0, le=24)
    end_minute: int = Field(0, ge=0, le=59)
    step_minutes: int = Field(..., gt=0)

    model_config = ConfigDict(from_attributes=True, frozen=True)

    @model_validator(mode='after')
    def check_window(self) -> 'GridConfig':
        if self.window_end <= self.window_start:
            raise ValueError("The grid must end after it starts.")
        if self.window_end > 24 * 60:
            raise ValueError("The grid cannot extend past midnight.")
        return self

    @property
    def window_start(self) -> int:
        return self.start_hour * 60 + self.start_minute

    @property
    def window_end(self) -> int:
        return self.end_hour * 60 + self.end_minute

    @property
    def slot_count(self) -> int:
        return (self.window_end - self.window_start) // self.step_minutes


class GridConfigUpdate(BaseModel):
    """
    Partial update of the grid. Unset fields keep their current value.
    """
    start_hour: Optional[int] = None
    start_minute: Optional[int] = None
    end_hour: Optional[int] = None
    end_minute: Optional[int] = None
    step_minutes: Optional[int] = None


class CellRef(BaseModel):
    """A single grid cell, addressed by day and slot index."""
    day: int
    slot: int


class MaterializedView(BaseModel):
    """
    Slot-indexed projection of the raw blocks and notes, keyed "day-slot".
    Always rebuilt from scratch, never patched.
    """
    schedule: dict[str, str] = Field(default_factory=dict)
    visible_notes: dict[str, str] = Field(default_factory=dict)

    model_config = ConfigDict(frozen=True)


# --- API Request Models ---

class PaintCellsRequest(BaseModel):
    """
    Paint every listed cell with label_id, or erase them when label_id is null.
    """
    cells: list[CellRef]
    label_id: Optional[str] = None


class ScheduleEventRequest(BaseModel):
    """
    Place a label at an absolute time, e.g. "gym on Tuesday at 07:15 for 45 minutes".
    """
    day_index: int = Field(..., ge=0, le=6)
    start_hour: int = Field(..., ge=0, le=23)
    start_minute: int = Field(0, ge=0, le=59)
    duration_minutes: int = Field(..., gt=0)
    label_id: str
    note: Optional[str] = None


class NoteWrite(BaseModel):
    """Sets (or clears, when blank) the note on a cell."""
    day_index: int
    slot_index: int
    content: str


class LockUpdate(BaseModel):
    locked: bool


# --- API Read Models ---

class ScheduleRead(BaseModel):
    """
    Everything the grid needs to render, plus the transaction state.
    """
    config: GridConfig
    blocks: list[RawBlock]
    schedule: dict[str, str]
    visible_notes: dict[str, str]
    labels: list[Label]
    has_unsaved_changes: bool
    locked: bool
