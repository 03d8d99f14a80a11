'''
testing core/notes.py
'''
from smart_calendar_backend.core import notes
from smart_calendar_backend.models.schedule import RawBlock, GridConfig

from tests.constants import WORK


def block(day, start, duration, label=WORK) -> RawBlock:
    return RawBlock(day_index=day, start_minute=start, duration_minutes=duration, label_id=label)


class TestNoteKeys:

    def test_to_absolute_key(self, grid_config: GridConfig):
        assert notes.to_absolute_key(grid_config, 0, 2) == "0-360"
        assert notes.to_absolute_key(grid_config, 6, 0) == "6-300"

    def test_to_absolute_key_follows_the_step(self, grid_config: GridConfig):
        fine = grid_config.model_copy(update={'step_minutes': 15})
        assert notes.to_absolute_key(fine, 0, 4) == "0-360"

    def test_parse_note_key(self):
        assert notes.parse_note_key("3-615") == (3, 615)
        assert notes.parse_note_key("garbage") is None
        assert notes.parse_note_key("x-10") is None
        assert notes.parse_note_key("1-") is None


class TestVisibleNotes:

    def test_covered_note_is_keyed_by_its_slot(self, grid_config: GridConfig):
        visible = notes.visible_notes(grid_config, [block(0, 300, 120)], {"0-360": "standup"})
        assert visible == {"0-2": "standup"}

    def test_uncovered_note_is_hidden_but_kept(self, grid_config: GridConfig):
        stored = {"0-360": "standup"}
        visible = notes.visible_notes(grid_config, [block(0, 300, 60)], stored)
        assert visible == {}
        assert stored == {"0-360": "standup"}

    def test_block_end_is_exclusive(self, grid_config: GridConfig):
        assert notes.visible_notes(grid_config, [block(0, 300, 60)], {"0-360": "x"}) == {}
        assert notes.visible_notes(grid_config, [block(0, 360, 30)], {"0-360": "x"}) == {"0-2": "x"}

    def test_repaint_restores_orphaned_note(self, grid_config: GridConfig):
        stored = {"1-420": "gym"}
        assert notes.visible_notes(grid_config, [], stored) == {}
        assert notes.visible_notes(grid_config, [block(1, 420, 30)], stored) == {"1-4": "gym"}

    def test_coarser_step_keeps_earliest_note_in_slot(self, grid_config: GridConfig):
        coarse = grid_config.model_copy(update={'step_minutes': 60})
        stored = {"0-345": "second", "0-330": "first"}
        assert notes.visible_notes(coarse, [block(0, 300, 120)], stored) == {"0-0": "first"}

    def test_note_on_another_day_is_not_covered(self, grid_config: GridConfig):
        assert notes.visible_notes(grid_config, [block(1, 300, 120)], {"0-360": "x"}) == {}

    def test_malformed_keys_are_ignored(self, grid_config: GridConfig):
        assert notes.visible_notes(grid_config, [block(0, 300, 120)], {"oops": "x"}) == {}


class TestNotesInRegions:

    def test_only_notes_inside_regions_on_that_day(self):
        stored = {"0-330": "a", "0-360": "b", "1-330": "c", "0-299": "d"}
        assert notes.notes_in_regions(stored, 0, [(330, 360)]) == ["0-330"]
        assert sorted(notes.notes_in_regions(stored, 0, [(300, 330), (360, 390)])) == ["0-360"]
        assert notes.notes_in_regions(stored, 0, []) == []
