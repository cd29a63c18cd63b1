# vmlog/board/gateway.py
"""Client-side access to the board API.

``TaskGateway`` is the narrow contract the drag-move reconciler needs.
``HttpTaskGateway`` fulfils it over HTTP against ``/api/v1/tasks`` and maps
error responses back onto the board error taxonomy.
"""
from datetime import datetime
from typing import List, Optional, Protocol
from uuid import UUID

import httpx
from loguru import logger
from pydantic import BaseModel, ConfigDict, ValidationError

from vmlog.exceptions.board import BoardError, TransientStoreError, error_for_status

BOARD_COLUMNS = ("todo", "in_progress", "done")


class BoardTask(BaseModel):
    """A task as mirrored on a client"""
    model_config = ConfigDict(extra="ignore")

    id: UUID
    title: str
    description: Optional[str] = None
    status: str
    priority: str = "medium"
    position: int
    archived_at: Optional[datetime] = None
    assignee_id: Optional[UUID] = None
    created_at: Optional[datetime] = None


class TaskGateway(Protocol):
    async def list_active_tasks(self) -> List[BoardTask]:
        ...

    async def update_task_status(self, task_id: UUID, status: str, position: int) -> BoardTask:
        ...


class HttpTaskGateway:
    """Talks to the board API with a bearer token"""

    def __init__(self, client: httpx.AsyncClient, access_token: str, base_path: str = "/api/v1/tasks"):
        self.client = client
        self.base_path = base_path.rstrip("/")
        self.headers = {"Authorization": f"Bearer {access_token}"}

    async def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        try:
            response = await self.client.request(method, f"{self.base_path}{path}", headers=self.headers, **kwargs)
        except httpx.HTTPError as e:
            logger.warning(f"Board request {method} {path} failed: {e}")
            raise TransientStoreError(str(e)) from e

        if response.is_error:
            raise self._error_from(response)
        return response

    @staticmethod
    def _error_from(response: httpx.Response) -> BoardError:
        try:
            body = response.json()
        except ValueError:
            body = {"detail": response.text or None}
        detail = body.get("detail") if isinstance(body, dict) else None
        if not isinstance(detail, str):
            detail = None
        error_type = body.get("error_type") if isinstance(body, dict) else None
        return error_for_status(response.status_code, detail, error_type)

    @staticmethod
    def _parse(response: httpx.Response, many: bool = False):
        try:
            body = response.json()
            if many:
                return [BoardTask.model_validate(item) for item in body]
            return BoardTask.model_validate(body)
        except (ValueError, TypeError, ValidationError) as e:
            logger.warning(f"Malformed board response from {response.request.url}: {e}")
            raise TransientStoreError("Malformed response from the board API") from e

    async def list_active_tasks(self) -> List[BoardTask]:
        response = await self._request("GET", "/")
        return self._parse(response, many=True)

    async def update_task_status(self, task_id: UUID, status: str, position: int) -> BoardTask:
        response = await self._request(
            "PATCH", f"/{task_id}/status", json={"status": status, "position": position}
        )
        return self._parse(response)
