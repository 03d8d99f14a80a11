'''
The interval model: pure transforms over RawBlock lists.

Blocks live in absolute minutes. These functions slice them when a cell
range is overwritten, merge the fragments back together, and project them
onto the slot grid of a GridConfig. Nothing here raises on bad input;
degenerate blocks are dropped and empty input gives empty output.
'''
from typing import Iterable, Optional

from ..models.schedule import RawBlock, GridConfig, MaterializedView
from .notes import visible_notes


def cell_key(day_index: int, slot_index: int) -> str:
    return f"{day_index}-{slot_index}"


def slot_bounds(config: GridConfig, slot_index: int) -> tuple[int, int]:
    """Absolute [start, end) minutes covered by a slot."""
    start = config.window_start + slot_index * config.step_minutes
    return start, start + config.step_minutes


def slice_blocks(
    blocks: Iterable[RawBlock],
    day_index: int,
    cell_start: int,
    cell_end: int,
    label_id: Optional[str] = None
) -> tuple[list[RawBlock], list[tuple[int, int]]]:
    """
    Overwrites [cell_start, cell_end) on one day.

    Every block of that day overlapping the range keeps at most its part
    before cell_start and its part after cell_end. When label_id is given a
    new block covering the whole range is appended, otherwise the range is
    left empty (erase).

    Returns the rebuilt list and the (start, end) regions that were cut out
    of existing blocks, so callers can drop notes pinned inside them.
    """
    blocks = [b for b in blocks if b.duration_minutes > 0]
    if cell_end <= cell_start:
        return blocks, []

    rebuilt: list[RawBlock] = []
    discarded: list[tuple[int, int]] = []

    for block in blocks:
        if block.day_index != day_index:
            rebuilt.append(block)
            continue

        b_start, b_end = block.start_minute, block.end_minute
        if b_end <= cell_start or b_start >= cell_end:
            rebuilt.append(block)
            continue

        if b_start < cell_start:
            rebuilt.append(block.model_copy(update={'duration_minutes': cell_start - b_start}))
        if b_end > cell_end:
            rebuilt.append(block.model_copy(update={
                'start_minute': cell_end,
                'duration_minutes': b_end - cell_end
            }))
        discarded.append((max(b_start, cell_start), min(b_end, cell_end)))

    if label_id is not None:
        rebuilt.append(RawBlock(
            day_index=day_index,
            start_minute=cell_start,
            duration_minutes=cell_end - cell_start,
            label_id=label_id
        ))

    return rebuilt, discarded


def optimize(blocks: Iterable[RawBlock]) -> list[RawBlock]:
    """
    Sorts by (day, start) and merges neighbours that share a day and a label
    and touch exactly (prev end == next start). Gaps are never bridged.
    """
    ordered = sorted(
        (b for b in blocks if b.duration_minutes > 0),
        key=lambda b: (b.day_index, b.start_minute)
    )

    merged: list[RawBlock] = []
    for block in ordered:
        if merged:
            prev = merged[-1]
            if (prev.day_index == block.day_index
                    and prev.label_id == block.label_id
                    and prev.end_minute == block.start_minute):
                merged[-1] = prev.model_copy(update={
                    'duration_minutes': prev.duration_minutes + block.duration_minutes
                })
                continue
        merged.append(block)

    return merged


def materialize_schedule(config: GridConfig, blocks: Iterable[RawBlock]) -> dict[str, str]:
    """
    Projects blocks onto slots. A block [start, end) claims slots
    floor((start - window_start) / step) through floor((end - 1 - window_start) / step);
    the -1 keeps a block ending on a slot boundary out of the next slot.
    Slots outside the visible window are not emitted. On overlap the later
    block in list order wins.
    """
    schedule: dict[str, str] = {}
    window_start = config.window_start
    step = config.step_minutes
    last_slot = config.slot_count - 1

    for block in blocks:
        if block.duration_minutes <= 0:
            continue
        min_slot = max((block.start_minute - window_start) // step, 0)
        max_slot = min((block.end_minute - 1 - window_start) // step, last_slot)
        for slot in range(min_slot, max_slot + 1):
            schedule[cell_key(block.day_index, slot)] = block.label_id

    return schedule


def materialize(config: GridConfig, blocks: list[RawBlock], notes: dict[str, str]) -> MaterializedView:
    """
    The full render state. A pure function of its three inputs.
    """
    return MaterializedView(
        schedule=materialize_schedule(config, blocks),
        visible_notes=visible_notes(config, blocks, notes)
    )


def find_overlaps(blocks: Iterable[RawBlock]) -> list[tuple[RawBlock, RawBlock]]:
    """
    Pairs of same-day blocks that overlap. Empty whenever slicing is correct.
    """
    overlaps = []
    ordered = optimize(blocks)
    for prev, block in zip(ordered, ordered[1:]):
        if prev.day_index == block.day_index and block.start_minute < prev.end_minute:
            overlaps.append((prev, block))
    return overlaps
