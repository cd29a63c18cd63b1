# vmlog/board/client.py
"""Wiring for a board client talking to this API"""
from typing import Callable, Optional

import httpx

from vmlog.board.gateway import HttpTaskGateway
from vmlog.board.reconciler import BoardMirror, DragMoveReconciler
from vmlog.core.config import settings


async def connect_board(
    client: httpx.AsyncClient,
    access_token: str,
    notify: Optional[Callable[[str], None]] = None,
) -> DragMoveReconciler:
    """Build a reconciler over HTTP and load the active board into its mirror"""
    reconciler = DragMoveReconciler(
        HttpTaskGateway(client, access_token),
        mirror=BoardMirror(),
        timeout=settings.BOARD_MUTATION_TIMEOUT,
        notify=notify,
    )
    await reconciler.refresh()
    return reconciler
