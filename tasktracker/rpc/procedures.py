from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Literal, Optional

from pydantic import BaseModel, TypeAdapter
from sqlmodel import Session

ProcedureType = Literal["query", "mutation"]


@dataclass(frozen=True)
class Procedure:
    """A named remote operation: validated input, handler, typed output."""

    name: str
    type: ProcedureType
    handler: Callable[..., Any]
    output: Any
    input: Optional[type[BaseModel]] = None

    def parse_input(self, raw: Any) -> Optional[BaseModel]:
        """Validate raw input; raises ``pydantic.ValidationError`` on bad shape."""
        if self.input is None:
            return None
        return self.input.model_validate({} if raw is None else raw)

    def call(self, db: Session, parsed: Optional[BaseModel]) -> Any:
        result = self.handler(db) if self.input is None else self.handler(db, parsed)
        return TypeAdapter(self.output).validate_python(result, from_attributes=True)


class ProcedureRouter:
    """Registry of procedures exposed over the RPC endpoint."""

    def __init__(self) -> None:
        self._procedures: dict[str, Procedure] = {}

    def _register(
        self,
        type_: ProcedureType,
        name: str,
        output: Any,
        input: Optional[type[BaseModel]],
    ) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
        def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
            if name in self._procedures:
                raise ValueError(f"Procedure {name!r} already registered")
            self._procedures[name] = Procedure(
                name=name, type=type_, handler=func, output=output, input=input
            )
            return func

        return decorator

    def query(self, name: str, *, output: Any, input: Optional[type[BaseModel]] = None):
        return self._register("query", name, output, input)

    def mutation(self, name: str, *, output: Any, input: Optional[type[BaseModel]] = None):
        return self._register("mutation", name, output, input)

    def get(self, name: str) -> Optional[Procedure]:
        return self._procedures.get(name)
