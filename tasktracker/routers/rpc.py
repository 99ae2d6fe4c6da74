import json
import logging
from typing import Any, List, Optional

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from sqlmodel import Session

from ..database import get_db
from ..errors import TaskNotFoundError
from ..handlers import create_task, delete_task, get_tasks, toggle_task, update_task
from ..models import utcnow
from ..rpc.procedures import Procedure, ProcedureRouter
from ..rpc.transformer import DecodeError, deserialize, serialize
from ..schemas.task import (
    DeleteResult,
    HealthStatus,
    TaskCreate,
    TaskDelete,
    TaskRead,
    TaskToggle,
    TaskUpdate,
)

logger = logging.getLogger(__name__)

procedures = ProcedureRouter()


@procedures.query("healthcheck", output=HealthStatus)
def healthcheck(db: Session) -> HealthStatus:
    return HealthStatus(status="ok", timestamp=utcnow())


procedures.mutation("createTask", input=TaskCreate, output=TaskRead)(create_task)
procedures.query("getTasks", output=List[TaskRead])(get_tasks)
procedures.mutation("updateTask", input=TaskUpdate, output=TaskRead)(update_task)
procedures.mutation("toggleTask", input=TaskToggle, output=TaskRead)(toggle_task)
procedures.mutation("deleteTask", input=TaskDelete, output=DeleteResult)(delete_task)


router = APIRouter()


def _error(
    path: str,
    code: str,
    message: str,
    http_status: int,
    issues: Optional[List[dict]] = None,
) -> JSONResponse:
    data: dict = {"code": code, "httpStatus": http_status, "path": path}
    if issues is not None:
        data["issues"] = issues
    return JSONResponse(
        status_code=http_status,
        content={"error": {"message": message, "code": code, "data": data}},
    )


def _issues(exc: ValidationError) -> List[dict]:
    return [
        {
            "path": [str(part) for part in err["loc"]],
            "message": err["msg"],
            "code": err["type"],
        }
        for err in exc.errors()
    ]


def _dispatch(path: str, expected: str, raw_input: Any, db: Session) -> JSONResponse:
    procedure: Optional[Procedure] = procedures.get(path)
    if procedure is None:
        return _error(path, "NOT_FOUND", f'No procedure found on path "{path}"', status.HTTP_404_NOT_FOUND)
    if procedure.type != expected:
        return _error(
            path,
            "METHOD_NOT_SUPPORTED",
            f'Unsupported method for {procedure.type} "{path}"',
            status.HTTP_405_METHOD_NOT_ALLOWED,
        )

    try:
        raw_input = deserialize(raw_input)
    except DecodeError as exc:
        logger.info("Rejected envelope for %s: %s", path, exc)
        return _error(path, "BAD_REQUEST", str(exc), status.HTTP_400_BAD_REQUEST)

    try:
        parsed = procedure.parse_input(raw_input)
    except ValidationError as exc:
        logger.info("Rejected input for %s: %d issue(s)", path, exc.error_count())
        return _error(path, "BAD_REQUEST", "Input validation failed", status.HTTP_400_BAD_REQUEST, _issues(exc))

    try:
        result = procedure.call(db, parsed)
    except TaskNotFoundError as exc:
        return _error(path, "NOT_FOUND", str(exc), status.HTTP_404_NOT_FOUND)
    except Exception as exc:
        logger.error("Procedure %s failed: %s", path, exc)
        return _error(path, "INTERNAL_SERVER_ERROR", str(exc), status.HTTP_500_INTERNAL_SERVER_ERROR)

    return JSONResponse(content={"result": {"data": serialize(result)}})


async def _read_body(request: Request) -> bytes:
    return await request.body()


@router.get("/{path}")
def rpc_query(
    path: str,
    input: Optional[str] = None,
    db: Session = Depends(get_db),
):
    """Run a query procedure; input travels in the ``input`` query parameter."""
    raw_input = None
    if input is not None:
        try:
            raw_input = json.loads(input)
        except ValueError:
            return _error(path, "PARSE_ERROR", "Input is not valid JSON", status.HTTP_400_BAD_REQUEST)
    return _dispatch(path, "query", raw_input, db)


@router.post("/{path}")
def rpc_mutation(
    path: str,
    body: bytes = Depends(_read_body),
    db: Session = Depends(get_db),
):
    """Run a mutation procedure; input travels as the JSON request body."""
    raw_input = None
    if body.strip():
        try:
            raw_input = json.loads(body)
        except ValueError:
            return _error(path, "PARSE_ERROR", "Body is not valid JSON", status.HTTP_400_BAD_REQUEST)
    return _dispatch(path, "mutation", raw_input, db)
