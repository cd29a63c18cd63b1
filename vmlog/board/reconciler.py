# vmlog/board/reconciler.py
"""Drag-move reconciler.

Turns a drag gesture into a persisted column change while keeping a local
mirror of the board responsive. Every move runs through an explicit state
machine::

    IDLE -> PENDING(optimistic snapshot) -> COMMITTED | ROLLED_BACK

Both terminal states end with a full refetch of the active board, so the
mirror never drifts from the store for longer than one round trip.
"""
import asyncio
import enum
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional
from uuid import UUID

from loguru import logger

from vmlog.board.gateway import BOARD_COLUMNS, BoardTask, TaskGateway
from vmlog.board.ordering import next_position, order_partition
from vmlog.exceptions.board import BoardError, TransientStoreError


class MutationState(str, enum.Enum):
    IDLE = "idle"
    PENDING = "pending"
    COMMITTED = "committed"
    ROLLED_BACK = "rolled_back"


class BoardMirror:
    """Client-local copy of the active board"""

    def __init__(self, tasks: Optional[List[BoardTask]] = None):
        self._tasks: Dict[UUID, BoardTask] = {}
        self.replace(tasks or [])

    def replace(self, tasks: List[BoardTask]) -> None:
        self._tasks = {task.id: task for task in tasks}

    def get(self, task_id: UUID) -> Optional[BoardTask]:
        return self._tasks.get(task_id)

    def partition(self, status: str) -> List[BoardTask]:
        return order_partition(task for task in self._tasks.values() if task.status == status)

    def columns(self) -> Dict[str, List[BoardTask]]:
        return {status: self.partition(status) for status in BOARD_COLUMNS}

    def snapshot(self) -> List[BoardTask]:
        return [task.model_copy() for task in self._tasks.values()]

    def __len__(self) -> int:
        return len(self._tasks)


@dataclass
class MoveOutcome:
    state: MutationState
    task_id: Optional[UUID] = None
    destination: Optional[str] = None
    position: Optional[int] = None
    error: Optional[BoardError] = None

    @property
    def is_noop(self) -> bool:
        return self.state == MutationState.IDLE


def _log_notification(message: str) -> None:
    logger.error(message)


class DragMoveReconciler:
    """Optimistic drag-and-drop moves with refetch-based reconciliation.

    ``timeout`` bounds the persisted update in seconds; ``None`` or ``0``
    waits indefinitely. ``notify`` receives user-facing failure messages.
    """

    def __init__(
        self,
        gateway: TaskGateway,
        mirror: Optional[BoardMirror] = None,
        timeout: Optional[float] = None,
        notify: Optional[Callable[[str], None]] = None,
    ):
        self.gateway = gateway
        self.mirror = mirror if mirror is not None else BoardMirror()
        self.timeout = timeout or None
        self.notify = notify or _log_notification
        self.state = MutationState.IDLE
        self.pending_snapshot: Optional[List[BoardTask]] = None
        self._dragged: Optional[BoardTask] = None

    async def refresh(self) -> bool:
        """Replace the mirror with the store's active board; False if the read failed"""
        try:
            tasks = await self.gateway.list_active_tasks()
        except BoardError as e:
            logger.warning(f"Board refetch failed: {e.detail}")
            self.notify(f"Could not reload the board: {e.detail}")
            return False
        self.mirror.replace(tasks)
        return True

    def drag_start(self, task_id: UUID) -> Optional[BoardTask]:
        self._dragged = self.mirror.get(task_id)
        if self._dragged is None:
            logger.debug(f"Drag started on unknown task {task_id}")
        return self._dragged

    async def _persist(self, task_id: UUID, destination: str, position: int) -> BoardTask:
        call = self.gateway.update_task_status(task_id, destination, position)
        try:
            return await asyncio.wait_for(call, timeout=self.timeout)
        except asyncio.TimeoutError as e:
            raise TransientStoreError(f"Saving the move timed out after {self.timeout}s") from e

    async def drag_end(self, destination: Optional[str]) -> MoveOutcome:
        dragged, self._dragged = self._dragged, None

        if dragged is None or destination not in BOARD_COLUMNS:
            return MoveOutcome(state=MutationState.IDLE)

        task_id = dragged.id
        if destination == dragged.status:
            return MoveOutcome(state=MutationState.IDLE, task_id=task_id, destination=destination)

        # position comes from the cached column, taken before the optimistic change
        position = next_position(self.mirror.partition(destination))

        mirrored = self.mirror.get(task_id)
        if mirrored is not None:
            mirrored.status = destination
            mirrored.position = position
        self.state = MutationState.PENDING
        self.pending_snapshot = self.mirror.snapshot()
        logger.debug(f"Moving task {task_id} to {destination} at {position}")

        try:
            saved = await self._persist(task_id, destination, position)
        except BoardError as e:
            logger.warning(f"Move of task {task_id} to {destination} failed: {e.detail}")
            self.notify(f"Could not move the task: {e.detail}")
            self.state = MutationState.ROLLED_BACK
            self.pending_snapshot = None
            await self.refresh()
            return MoveOutcome(
                state=MutationState.ROLLED_BACK, task_id=task_id, destination=destination,
                position=position, error=e
            )

        self.state = MutationState.COMMITTED
        self.pending_snapshot = None
        if not await self.refresh() and mirrored is not None:
            mirrored.position = saved.position
        return MoveOutcome(
            state=MutationState.COMMITTED, task_id=task_id, destination=destination, position=saved.position
        )
