'''
Schedule Engine

Owns one user's raw blocks, notes, labels and grid config, and the cached
MaterializedView derived from them. Every mutation runs synchronously over
memory, rebuilds the view, and only then queues the PendingOps that will
persist it. Nothing else is allowed to write this state.
'''
from typing import Iterable, Optional
from uuid import UUID

from ..models.schedule import RawBlock, GridConfig, CellRef, MaterializedView, ScheduleRead
from ..models.labels import Label
from ..core import intervals, notes as note_keys, label_tabs
from ..common.config import settings
from ..common.exceptions import LabelNotFoundError, PersistenceError
from ..common.logger import log
from .schedule_repository import ScheduleRepository
from .pending_changes import (
    PendingChangeBuffer,
    ReplaceScheduleOp,
    ReplaceNotesOp,
    UpsertNoteOp,
    DeleteNoteOp,
    UpsertConfigOp,
    UpsertLabelOp,
    DeleteLabelOp,
)

DAYS_PER_WEEK = 7


def default_grid_config() -> GridConfig:
    return GridConfig(
        start_hour=settings.DEFAULT_START_HOUR,
        start_minute=settings.DEFAULT_START_MINUTE,
        end_hour=settings.DEFAULT_END_HOUR,
        end_minute=settings.DEFAULT_END_MINUTE,
        step_minutes=settings.DEFAULT_STEP_MINUTES
    )


class ScheduleEngine:
    """
    The editing surface of the grid for a single user.
    """
    def __init__(self, user_id: UUID, config: Optional[GridConfig] = None):
        self.user_id = user_id
        self._config = config or default_grid_config()
        self._blocks: list[RawBlock] = []
        self._notes: dict[str, str] = {}
        self._labels: dict[str, Label] = {}
        self._view = MaterializedView()
        self.buffer = PendingChangeBuffer()
        self.locked = False

    # --- Read access ---

    @property
    def config(self) -> GridConfig:
        return self._config

    @property
    def blocks(self) -> tuple[RawBlock, ...]:
        return tuple(self._blocks)

    @property
    def notes(self) -> dict[str, str]:
        return dict(self._notes)

    @property
    def labels(self) -> list[Label]:
        return list(self._labels.values())

    @property
    def view(self) -> MaterializedView:
        return self._view.model_copy(deep=True)

    @property
    def has_unsaved_changes(self) -> bool:
        return self.buffer.has_unsaved_changes

    def get_label(self, label_id: str) -> Label:
        label = self._labels.get(label_id)
        if label is None:
            raise LabelNotFoundError(f"Label {label_id} not found.")
        return label

    def read_model(self) -> ScheduleRead:
        return ScheduleRead(
            config=self._config,
            blocks=list(self._blocks),
            schedule=dict(self._view.schedule),
            visible_notes=dict(self._view.visible_notes),
            labels=self.labels,
            has_unsaved_changes=self.has_unsaved_changes,
            locked=self.locked
        )

    # --- Internal Helpers ---

    def _rematerialize(self):
        self._view = intervals.materialize(self._config, self._blocks, self._notes)

    def _rematerialize_notes(self):
        self._view = self._view.model_copy(update={
            'visible_notes': note_keys.visible_notes(self._config, self._blocks, self._notes)
        })

    def _is_valid_cell(self, day_index: int, slot_index: int) -> bool:
        return 0 <= day_index < DAYS_PER_WEEK and 0 <= slot_index < self._config.slot_count

    def _queue_schedule_snapshot(self):
        self.buffer.enqueue(ReplaceScheduleOp(user_id=self.user_id, blocks=tuple(self._blocks)))

    def _queue_notes_snapshot(self):
        self.buffer.enqueue(ReplaceNotesOp(user_id=self.user_id, notes=dict(self._notes)))

    def _store_label(self, label: Label) -> Label:
        self._labels[label.id] = label
        self.buffer.enqueue(UpsertLabelOp(user_id=self.user_id, label=label))
        return label

    # --- Loading ---

    async def load(self, repository: ScheduleRepository):
        """
        Replaces the whole in-memory state with what the database holds.
        Any pending ops are dropped, but only once every read has succeeded;
        a failed reload leaves state and queue exactly as they were.
        """
        log.info(f"Loading schedule for user {self.user_id}.")
        try:
            config = await repository.fetch_config(self.user_id)
            blocks = await repository.fetch_blocks(self.user_id)
            notes = await repository.fetch_notes(self.user_id)
            labels = await repository.fetch_labels(self.user_id)
        except Exception as e:
            log.error(f"Loading schedule for user {self.user_id} failed: {e}", exc_info=True)
            raise PersistenceError(f"Failed to load the saved schedule: {e}") from e

        self._config = config or default_grid_config()
        self._blocks = intervals.optimize(blocks)
        self._notes = dict(notes)
        self._labels = {label.id: label for label in labels}
        self.buffer.discard()
        self._rematerialize()
        log.info(f"Loaded {len(self._blocks)} blocks, {len(self._notes)} notes and {len(self._labels)} labels for user {self.user_id}.")

    # --- Schedule Mutations ---

    def paint_cells(self, cells: Iterable[CellRef], label_id: Optional[str]) -> bool:
        """
        Paints every cell with label_id, or erases them when label_id is None.
        Notes pinned inside an overwritten range are deleted.
        Cells outside the week or the visible window are skipped.
        Returns whether anything was applied.
        """
        if self.locked:
            log.info(f"Schedule of user {self.user_id} is locked; ignoring paint.")
            return False

        cells = list(cells)
        valid = [c for c in cells if self._is_valid_cell(c.day, c.slot)]
        if len(valid) != len(cells):
            log.warning(f"Skipping {len(cells) - len(valid)} out-of-range cells for user {self.user_id}.")
        if not valid:
            return False

        blocks = list(self._blocks)
        notes = dict(self._notes)
        deleted_notes = []
        for cell in valid:
            cell_start, cell_end = intervals.slot_bounds(self._config, cell.slot)
            blocks, discarded = intervals.slice_blocks(blocks, cell.day, cell_start, cell_end, label_id)
            for key in note_keys.notes_in_regions(notes, cell.day, discarded):
                del notes[key]
                deleted_notes.append(key)

        self._blocks = intervals.optimize(blocks)
        self._notes = notes
        self._rematerialize()

        action = "Erased" if label_id is None else f"Painted '{label_id}' on"
        log.info(f"{action} {len(valid)} cells for user {self.user_id}; {len(self._blocks)} blocks, {len(deleted_notes)} notes removed.")

        self._queue_schedule_snapshot()
        if deleted_notes:
            self._queue_notes_snapshot()
        return True

    def paint_range(
        self,
        day_index: int,
        start_minute: int,
        duration_minutes: int,
        label_id: str,
        note: Optional[str] = None
    ) -> bool:
        """
        Paints the slots needed to hold [start_minute, start_minute + duration)
        starting from the slot that contains start_minute, and optionally
        attaches a note to that first slot.
        """
        if duration_minutes <= 0 or start_minute < self._config.window_start:
            log.warning(f"Rejecting event at minute {start_minute} for {duration_minutes} minutes; outside the grid.")
            return False

        step = self._config.step_minutes
        first_slot = (start_minute - self._config.window_start) // step
        slots_needed = -(-duration_minutes // step)
        cells = [CellRef(day=day_index, slot=first_slot + i) for i in range(slots_needed)]

        if not self.paint_cells(cells, label_id):
            return False
        if note:
            self.set_note(day_index, first_slot, note)
        return True

    def clear_all(self) -> bool:
        if self.locked:
            log.info(f"Schedule of user {self.user_id} is locked; ignoring clear.")
            return False

        log.info(f"Clearing the whole schedule for user {self.user_id}.")
        self._blocks = []
        self._notes = {}
        self._rematerialize()
        self._queue_schedule_snapshot()
        self._queue_notes_snapshot()
        return True

    def remove_blocks_for_label(self, label_id: str) -> bool:
        """
        Drops every block painted with label_id. Notes are kept and simply
        stop being visible. Runs even while locked, since it follows a label
        deletion.
        """
        remaining = [b for b in self._blocks if b.label_id != label_id]
        if len(remaining) == len(self._blocks):
            return False

        log.info(f"Removing {len(self._blocks) - len(remaining)} blocks of label {label_id} for user {self.user_id}.")
        self._blocks = remaining
        self._rematerialize()
        self._queue_schedule_snapshot()
        return True

    def set_note(self, day_index: int, slot_index: int, content: str) -> bool:
        """
        Stores content at the absolute time of the slot's start. Blank content
        deletes the note. Blocks are untouched.
        """
        if self.locked:
            log.info(f"Schedule of user {self.user_id} is locked; ignoring note edit.")
            return False
        if not self._is_valid_cell(day_index, slot_index):
            log.warning(f"Skipping note on out-of-range cell {day_index}-{slot_index} for user {self.user_id}.")
            return False

        key = note_keys.to_absolute_key(self._config, day_index, slot_index)
        if content.strip() == '':
            if key not in self._notes:
                return False
            del self._notes[key]
            self.buffer.enqueue(DeleteNoteOp(user_id=self.user_id, key=key))
        else:
            self._notes[key] = content
            self.buffer.enqueue(UpsertNoteOp(user_id=self.user_id, key=key, content=content))

        self._rematerialize_notes()
        return True

    def set_locked(self, locked: bool):
        self.locked = locked
        log.info(f"Schedule of user {self.user_id} is now {'locked' if locked else 'editable'}.")

    # --- Reconfiguration ---

    def reconfigure(self, config: GridConfig) -> bool:
        """
        Switches the grid window and/or step. Blocks and notes are absolute,
        so only the view is rebuilt.
        """
        if config == self._config:
            return False

        log.info(f"Reconfiguring grid for user {self.user_id}: {self._config.model_dump()} -> {config.model_dump()}")
        self._config = config
        self._rematerialize()
        self.buffer.enqueue(UpsertConfigOp(user_id=self.user_id, config=config))
        return True

    def update_config(self, **changes) -> bool:
        """Partial reconfigure; unset fields keep their current value."""
        values = {**self._config.model_dump(), **{k: v for k, v in changes.items() if v is not None}}
        return self.reconfigure(GridConfig(**values))

    # --- Labels ---

    def create_label(self, name: str, color: str) -> Label:
        label = label_tabs.new_label(name, color)
        log.info(f"Creating label '{name}' ({label.id}) for user {self.user_id}.")
        return self._store_label(label)

    def update_label(
        self,
        label_id: str,
        name: Optional[str] = None,
        color: Optional[str] = None,
        notes: Optional[str] = None
    ) -> Label:
        label = self.get_label(label_id)
        update = {k: v for k, v in {'name': name, 'color': color, 'notes': notes}.items() if v is not None}
        if not update:
            return label
        return self._store_label(label.model_copy(update=update))

    def delete_label(self, label_id: str):
        """Deletes the label and every block painted with it."""
        self.get_label(label_id)
        log.info(f"Deleting label {label_id} for user {self.user_id}.")
        self.remove_blocks_for_label(label_id)
        del self._labels[label_id]
        self.buffer.enqueue(DeleteLabelOp(user_id=self.user_id, label_id=label_id))

    def _apply_tab_change(self, label_id: str, change, *args) -> Label:
        label = self.get_label(label_id)
        updated = change(label, *args)
        if updated is label:
            return label
        return self._store_label(updated)

    def add_tab(self, label_id: str) -> Label:
        return self._apply_tab_change(label_id, label_tabs.add_tab, settings.MAX_LABEL_TABS)

    def close_tab(self, label_id: str, tab_id: str) -> Label:
        return self._apply_tab_change(label_id, label_tabs.close_tab, tab_id)

    def restore_tab(self, label_id: str, tab_id: str) -> Label:
        return self._apply_tab_change(label_id, label_tabs.restore_tab, tab_id)

    def delete_tab_forever(self, label_id: str, tab_id: str) -> Label:
        return self._apply_tab_change(label_id, label_tabs.delete_tab_forever, tab_id)

    def update_custom_tab(self, label_id: str, tab_id: str, content: str) -> Label:
        return self._apply_tab_change(label_id, label_tabs.update_custom_tab, tab_id, content)

    def reorder_tabs(self, label_id: str, new_order: list[str]) -> Label:
        return self._apply_tab_change(label_id, label_tabs.reorder_tabs, new_order)

    # --- Transaction ---

    async def commit(self, repository: ScheduleRepository) -> int:
        """Flushes every pending op in order. See PendingChangeBuffer.commit."""
        return await self.buffer.commit(repository)

    async def discard(self, repository: ScheduleRepository):
        """
        Forgets unsaved edits by reloading from the database. If the reload
        fails the edits are kept and PersistenceError is raised.
        """
        log.info(f"Discarding unsaved changes for user {self.user_id}.")
        await self.load(repository)
