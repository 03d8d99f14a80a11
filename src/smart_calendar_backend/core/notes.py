'''
Note association.

Notes are stored under "day-absoluteMinute" keys so they survive any change
of grid resolution. The grid edits and renders them by "day-slot"; this
module translates between the two and decides which notes are attached to
a block right now.
'''
from typing import Iterable, Optional

from ..models.schedule import RawBlock, GridConfig


def note_key(day_index: int, absolute_minute: int) -> str:
    return f"{day_index}-{absolute_minute}"


def parse_note_key(key: str) -> Optional[tuple[int, int]]:
    """Returns (day, minute), or None for a malformed key."""
    day, sep, minute = key.partition('-')
    if not sep:
        return None
    try:
        return int(day), int(minute)
    except ValueError:
        return None


def to_absolute_key(config: GridConfig, day_index: int, slot_index: int) -> str:
    return note_key(day_index, config.window_start + slot_index * config.step_minutes)


def is_covered(blocks: Iterable[RawBlock], day_index: int, minute: int) -> bool:
    return any(
        b.day_index == day_index and b.start_minute <= minute < b.end_minute
        for b in blocks
        if b.duration_minutes > 0
    )


def visible_notes(config: GridConfig, blocks: Iterable[RawBlock], notes: dict[str, str]) -> dict[str, str]:
    """
    Notes sitting inside some block, re-keyed by the slot containing their
    time point. Uncovered notes stay in the store but are not shown; painting
    over their time point again brings them back. When several notes fall in
    one slot the earliest time point is shown.
    """
    blocks = list(blocks)
    parsed = []
    for key, content in notes.items():
        point = parse_note_key(key)
        if point is not None:
            parsed.append((point, content))
    parsed.sort(key=lambda item: item[0])

    visible: dict[str, str] = {}
    for (day_index, minute), content in parsed:
        if not is_covered(blocks, day_index, minute):
            continue
        slot = (minute - config.window_start) // config.step_minutes
        if 0 <= slot < config.slot_count:
            visible.setdefault(f"{day_index}-{slot}", content)

    return visible


def notes_in_regions(notes: dict[str, str], day_index: int, regions: Iterable[tuple[int, int]]) -> list[str]:
    """
    Keys of the notes on day_index whose time point falls inside one of the
    [start, end) regions.
    """
    regions = list(regions)
    hits = []
    for key in notes:
        point = parse_note_key(key)
        if point is None or point[0] != day_index:
            continue
        if any(start <= point[1] < end for start, end in regions):
            hits.append(key)
    return hits
