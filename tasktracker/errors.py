from typing import Any, List, Optional


class TaskNotFoundError(LookupError):
    """Raised when an update or toggle references an id with no matching row."""

    def __init__(self, task_id: int):
        self.task_id = task_id
        super().__init__(f"Task with id {task_id} not found")


class RPCError(Exception):
    """Error envelope returned by the RPC endpoint, as seen by a client."""

    def __init__(
        self,
        code: str,
        message: str,
        http_status: int,
        issues: Optional[List[dict]] = None,
    ):
        self.code = code
        self.message = message
        self.http_status = http_status
        self.issues = issues or []
        super().__init__(f"{code}: {message}")

    @classmethod
    def from_envelope(cls, envelope: Any, http_status: int) -> "RPCError":
        error = envelope.get("error") if isinstance(envelope, dict) else None
        if not isinstance(error, dict):
            return cls("INTERNAL_SERVER_ERROR", f"Unexpected response (HTTP {http_status})", http_status)
        data = error.get("data") or {}
        return cls(
            code=error.get("code") or data.get("code") or "INTERNAL_SERVER_ERROR",
            message=error.get("message", ""),
            http_status=data.get("httpStatus", http_status),
            issues=data.get("issues"),
        )
