"""RPC client and the local task state the UI renders from."""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Optional

import httpx

from .errors import RPCError
from .rpc.transformer import deserialize, serialize
from .schemas.task import DeleteResult, HealthStatus, TaskRead

logger = logging.getLogger(__name__)


class _Unset:
    def __repr__(self) -> str:
        return "UNSET"


UNSET: Any = _Unset()


class TaskClient:
    """Typed client for the task RPC endpoint.

    Pass ``base_url`` to talk to a running server, or an existing
    ``httpx.Client`` (FastAPI's ``TestClient`` works) as ``http_client``.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        http_client: Optional[httpx.Client] = None,
        prefix: str = "/trpc",
        timeout: float = 10.0,
    ):
        if http_client is None:
            if base_url is None:
                raise ValueError("base_url or http_client is required")
            http_client = httpx.Client(base_url=base_url, timeout=timeout)
            self._owns_client = True
        else:
            self._owns_client = False
        self._http = http_client
        self._prefix = "/" + prefix.strip("/")

    def close(self) -> None:
        if self._owns_client:
            self._http.close()

    def __enter__(self) -> "TaskClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _unwrap(self, response: httpx.Response) -> Any:
        try:
            envelope = response.json()
        except ValueError:
            raise RPCError(
                "PARSE_ERROR", f"Response is not JSON (HTTP {response.status_code})", response.status_code
            )
        if response.is_error or "error" in envelope:
            raise RPCError.from_envelope(envelope, response.status_code)
        return deserialize(envelope["result"]["data"])

    def _query(self, name: str, input: Any = None) -> Any:
        params = {}
        if input is not None:
            params["input"] = json.dumps(serialize(input))
        return self._unwrap(self._http.get(f"{self._prefix}/{name}", params=params))

    def _mutation(self, name: str, input: Any) -> Any:
        return self._unwrap(self._http.post(f"{self._prefix}/{name}", json=serialize(input)))

    def healthcheck(self) -> HealthStatus:
        return HealthStatus.model_validate(self._query("healthcheck"))

    def get_tasks(self) -> list[TaskRead]:
        return [TaskRead.model_validate(item) for item in self._query("getTasks")]

    def create_task(self, title: str, description: Optional[str] = None) -> TaskRead:
        data = self._mutation("createTask", {"title": title, "description": description})
        return TaskRead.model_validate(data)

    def update_task(
        self,
        task_id: int,
        *,
        title: Any = UNSET,
        description: Any = UNSET,
        completed: Any = UNSET,
    ) -> TaskRead:
        """Send only the fields given; ``description=None`` clears it."""
        payload: dict[str, Any] = {"id": task_id}
        for key, value in (("title", title), ("description", description), ("completed", completed)):
            if value is not UNSET:
                payload[key] = value
        return TaskRead.model_validate(self._mutation("updateTask", payload))

    def toggle_task(self, task_id: int, completed: bool) -> TaskRead:
        data = self._mutation("toggleTask", {"id": task_id, "completed": completed})
        return TaskRead.model_validate(data)

    def delete_task(self, task_id: int) -> DeleteResult:
        return DeleteResult.model_validate(self._mutation("deleteTask", {"id": task_id}))


@dataclass(frozen=True)
class TaskStats:
    total: int
    pending: int
    completed: int


class TaskBoard:
    """Local copy of the task list, reconciled with server responses.

    Failed calls are logged and leave the board as it was.
    """

    def __init__(self, client: TaskClient):
        self.client = client
        self.tasks: list[TaskRead] = []

    @property
    def pending(self) -> list[TaskRead]:
        return [task for task in self.tasks if not task.completed]

    @property
    def completed(self) -> list[TaskRead]:
        return [task for task in self.tasks if task.completed]

    @property
    def stats(self) -> TaskStats:
        return TaskStats(
            total=len(self.tasks),
            pending=len(self.pending),
            completed=len(self.completed),
        )

    def _replace(self, updated: TaskRead) -> None:
        self.tasks = [updated if task.id == updated.id else task for task in self.tasks]

    def load(self) -> bool:
        try:
            self.tasks = self.client.get_tasks()
        except (RPCError, httpx.HTTPError) as exc:
            logger.error("Failed to load tasks: %s", exc)
            return False
        return True

    def create(self, title: str, description: Optional[str] = None) -> Optional[TaskRead]:
        if not title.strip():
            return None
        try:
            task = self.client.create_task(title, description or None)
        except (RPCError, httpx.HTTPError) as exc:
            logger.error("Failed to create task: %s", exc)
            return None
        self.tasks = [task] + self.tasks
        return task

    def toggle(self, task: TaskRead) -> Optional[TaskRead]:
        try:
            updated = self.client.toggle_task(task.id, not task.completed)
        except (RPCError, httpx.HTTPError) as exc:
            logger.error("Failed to toggle task: %s", exc)
            return None
        self._replace(updated)
        return updated

    def edit(self, task_id: int, title: str, description: Optional[str] = None) -> Optional[TaskRead]:
        if not title.strip():
            return None
        try:
            updated = self.client.update_task(task_id, title=title, description=description or None)
        except (RPCError, httpx.HTTPError) as exc:
            logger.error("Failed to update task: %s", exc)
            return None
        self._replace(updated)
        return updated

    def remove(self, task_id: int) -> bool:
        try:
            self.client.delete_task(task_id)
        except (RPCError, httpx.HTTPError) as exc:
            logger.error("Failed to delete task: %s", exc)
            return False
        self.tasks = [task for task in self.tasks if task.id != task_id]
        return True
