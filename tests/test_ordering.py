"""
Ordering engine tests
"""
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

from vmlog.board.ordering import next_position, order_partition


class TestNextPosition:

    def test_empty_partition(self):
        assert next_position([]) == 0

    def test_appends_after_max(self):
        assert next_position([{"position": 0}, {"position": 3}]) == 4

    def test_raw_positions(self):
        assert next_position([2, 7, 5]) == 8

    def test_objects(self):
        tasks = [SimpleNamespace(position=1), SimpleNamespace(position=0)]
        assert next_position(tasks) == 2

    def test_gaps_are_kept(self):
        assert next_position([10]) == 11

    def test_accepts_generators(self):
        assert next_position(p for p in [0, 1, 2]) == 3


class TestOrderPartition:

    def test_sorted_by_position(self):
        tasks = [{"id": "c", "position": 2}, {"id": "a", "position": 0}, {"id": "b", "position": 1}]
        assert [t["id"] for t in order_partition(tasks)] == ["a", "b", "c"]

    def test_ties_break_on_created_at_then_id(self):
        base = datetime(2026, 1, 1, tzinfo=timezone.utc)
        tasks = [
            SimpleNamespace(id="z", position=1, created_at=base),
            SimpleNamespace(id="y", position=1, created_at=base + timedelta(seconds=5)),
            SimpleNamespace(id="b", position=1, created_at=base),
            SimpleNamespace(id="a", position=0, created_at=base + timedelta(days=1)),
        ]
        assert [t.id for t in order_partition(tasks)] == ["a", "b", "z", "y"]

    def test_tie_order_is_stable_across_input_order(self):
        tasks = [{"id": str(i), "position": 0} for i in range(5)]
        assert order_partition(tasks) == order_partition(list(reversed(tasks)))
