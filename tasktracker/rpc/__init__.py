from .procedures import Procedure, ProcedureRouter
from .transformer import DecodeError, deserialize, serialize

__all__ = ["DecodeError", "Procedure", "ProcedureRouter", "deserialize", "serialize"]
