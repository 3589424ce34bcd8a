"""Utility helpers shared across CLI commands."""

from __future__ import annotations

import json
from collections.abc import Mapping, Sequence
from enum import Enum

import typer

from auxidien.core.models import Metal, parse_metal


def emit_json(payload: object) -> None:
    """Print ``payload`` as indented JSON to stdout."""

    typer.echo(json.dumps(payload, indent=2, ensure_ascii=False, default=_default))


def emit_error(message: str, code: str, *, details: Mapping[str, object] | None = None) -> None:
    """Print a structured error payload to stderr."""

    payload: dict[str, object] = {"code": code, "message": message}
    if details:
        payload["details"] = _sanitize_details(details)
    typer.echo(json.dumps(payload, ensure_ascii=False, default=str), err=True)


def parse_metal_values(values: Sequence[str] | None, option: str) -> dict[Metal, float]:
    """Parse repeated ``METAL=VALUE`` options into a mapping."""

    parsed: dict[Metal, float] = {}
    for item in values or ():
        name, sep, raw = item.partition("=")
        if not sep:
            raise typer.BadParameter(f"expected METAL=VALUE, got {item!r}", param_hint=option)
        try:
            parsed[parse_metal(name)] = float(raw)
        except ValueError as exc:
            raise typer.BadParameter(str(exc), param_hint=option) from exc
    return parsed


def metal_keys(values: Mapping[Metal, float], digits: int = 6) -> dict[str, float]:
    return {metal.value: round(value, digits) for metal, value in values.items()}


def _default(value: object) -> object:
    if isinstance(value, Enum):
        return value.value
    return str(value)


def _sanitize_details(details: Mapping[str, object]) -> Mapping[str, object]:
    sanitized: dict[str, object] = {}
    for key, value in details.items():
        if isinstance(value, (str, int, float, bool)) or value is None:
            sanitized[key] = value
        elif isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray)):
            sanitized[key] = [str(item) for item in value]
        else:
            sanitized[key] = str(value)
    return sanitized


__all__ = ["emit_error", "emit_json", "metal_keys", "parse_metal_values"]
