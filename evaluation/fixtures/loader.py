"""Load annotated email fixtures used by the evaluation harness."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, cast

from otpsentinel.detect.base import DetectionContext

_ROOT = Path(__file__).resolve().parent
_SUFFIX = ".email.json"
_CONTEXT_KEYS = {"subject", "body", "snippet", "sender"}


def list_fixtures(root: Path | str = _ROOT) -> list[str]:
    """Return fixture basenames found under ``root``."""
    root = Path(root)
    return sorted(p.name[: -len(_SUFFIX)] for p in root.glob(f"*{_SUFFIX}"))


def load_fixture(name: str) -> tuple[DetectionContext, str | None]:
    """Return (context, expected code) for fixture ``name``."""
    path = _ROOT / f"{name}{_SUFFIX}"
    data = json.loads(path.read_text(encoding="utf-8"))
    if data.get("doc") != path.name:
        raise ValueError(f"fixture doc mismatch: {data.get('doc')} != {path.name}")
    errors = validate_fixture(data)
    if errors:
        raise ValueError(f"invalid fixture {name}: {'; '.join(errors)}")
    ctx = cast(dict[str, str], data["context"])
    return DetectionContext(**ctx), cast(str | None, data.get("expected"))


def validate_fixture(data: dict[str, Any]) -> list[str]:
    """Return a list of validation error messages for a fixture document."""
    errors: list[str] = []
    ctx = data.get("context")
    if not isinstance(ctx, dict):
        return ["context must be a mapping"]
    unknown = set(ctx) - _CONTEXT_KEYS
    if unknown:
        errors.append(f"unknown context keys {sorted(unknown)}")
    for key, value in ctx.items():
        if not isinstance(value, str):
            errors.append(f"context.{key} must be a string")
    expected = data.get("expected")
    if expected is not None:
        if not isinstance(expected, str) or not expected:
            errors.append("expected must be a non-empty string or null")
        elif not any(expected in str(v).upper() for v in ctx.values()):
            errors.append(f"expected code {expected!r} not present in context")
    return errors
