# vmlog/board/ordering.py
"""Ordering engine for board columns.

Positions are only meaningful relative to each other inside one status
partition. New and moved tasks always land at the end of their column, so
values grow monotonically and gaps are expected.
"""
from typing import Any, Iterable, List, Union

PositionSource = Union[int, Any]


def _position_of(item: PositionSource) -> int:
    if isinstance(item, int):
        return item
    if isinstance(item, dict):
        return item["position"]
    return item.position


def next_position(partition_tasks: Iterable[PositionSource]) -> int:
    """Position for a task appended to a partition: ``max + 1`` or ``0`` if empty"""
    positions = [_position_of(task) for task in partition_tasks]
    if not positions:
        return 0
    return max(positions) + 1


def _sort_key(task: Any):
    if isinstance(task, dict):
        created_at = task.get("created_at")
        identifier = task.get("id")
    else:
        created_at = getattr(task, "created_at", None)
        identifier = getattr(task, "id", None)
    return (
        _position_of(task),
        created_at.timestamp() if created_at else 0.0,
        str(identifier) if identifier is not None else "",
    )


def order_partition(tasks: Iterable[Any]) -> List[Any]:
    """Sort a partition by position, breaking ties by creation time then id"""
    return sorted(tasks, key=_sort_key)
