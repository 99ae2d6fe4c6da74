"""Wire codec that keeps dates typed across JSON.

A payload is wrapped as ``{"json": <plain JSON>, "meta": {"values": {...}}}``
where ``meta.values`` maps a dotted path inside ``json`` to its original type,
e.g. ``{"0.created_at": ["Date"]}``. This is the layout superjson uses, so a
JavaScript client with superjson can read responses directly.
"""
from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Any

from pydantic import BaseModel

DATE = "Date"


class DecodeError(ValueError):
    """The envelope's meta does not describe its json payload."""


def _format_datetime(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc)
    return value.isoformat(timespec="microseconds").replace("+00:00", "Z")


def _parse_datetime(value: str) -> datetime:
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _walk(value: Any, path: tuple[str, ...], meta: dict[str, list[str]]) -> Any:
    if isinstance(value, BaseModel):
        value = value.model_dump()
    if isinstance(value, datetime):
        meta[".".join(path)] = [DATE]
        return _format_datetime(value)
    if isinstance(value, date):
        meta[".".join(path)] = [DATE]
        return _format_datetime(datetime(value.year, value.month, value.day))
    if isinstance(value, dict):
        return {str(k): _walk(v, path + (str(k),), meta) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_walk(v, path + (str(i),), meta) for i, v in enumerate(value)]
    return value


def serialize(value: Any) -> dict[str, Any]:
    """Encode ``value`` into the ``{"json", "meta"}`` envelope."""
    meta: dict[str, list[str]] = {}
    encoded = _walk(value, (), meta)
    payload: dict[str, Any] = {"json": encoded}
    if meta:
        payload["meta"] = {"values": meta}
    return payload


def _set_path(root: Any, path: list[str], kind: list[str]) -> Any:
    if not kind or kind[0] != DATE:
        return root
    if not path or path == [""]:
        return _parse_datetime(root)
    parent = root
    for key in path[:-1]:
        parent = parent[int(key)] if isinstance(parent, list) else parent[key]
    last = path[-1]
    if isinstance(parent, list):
        parent[int(last)] = _parse_datetime(parent[int(last)])
    else:
        parent[last] = _parse_datetime(parent[last])
    return root


def deserialize(payload: Any) -> Any:
    """Decode an envelope produced by :func:`serialize`.

    Anything that is not an envelope is returned unchanged. Raises
    :class:`DecodeError` when ``meta`` does not match the ``json`` it describes.
    """
    if not isinstance(payload, dict) or "json" not in payload:
        return payload
    value = payload["json"]
    meta = payload.get("meta") or {}
    if not isinstance(meta, dict):
        raise DecodeError("meta must be an object")
    values = meta.get("values") or {}
    if not isinstance(values, dict):
        raise DecodeError("meta.values must be an object")
    for dotted, kind in values.items():
        if not isinstance(kind, list):
            raise DecodeError(f"meta.values[{dotted!r}] must be a list")
        try:
            value = _set_path(value, dotted.split(".") if dotted else [], kind)
        except (KeyError, IndexError, TypeError, ValueError, AttributeError) as exc:
            raise DecodeError(f"Cannot decode {kind[0]!r} at {dotted!r}: {exc}") from exc
    return value
