"""Typed OTP rules schema and loader."""

from __future__ import annotations

import os
from collections.abc import Mapping
from datetime import timedelta
from importlib import resources as importlib_resources
from pathlib import Path
from typing import Any

import yaml
from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    confloat,
    constr,
    field_serializer,
    field_validator,
    model_validator,
)

from ..utils.durations import format_duration, parse_duration
from ..utils.errors import InvalidRules

DEFAULT_MAX_PROCESSING_TIME = timedelta(milliseconds=500)

# Kept in step with ``trusted_otp_senders`` in defaults.yml.
DEFAULT_TRUSTED_SENDERS: tuple[str, ...] = (
    "accounts.google.com",
    "noreply@google.com",
    "amazon.com",
    "noreply@github.com",
    "github.com",
    "microsoft.com",
    "account.microsoft.com",
    "paypal.com",
    "venmo.com",
    "apple.com",
    "appleid.apple.com",
    "noreply@",
    "no-reply@",
    "@auth0.com",
    "@okta.com",
    "@twilio.com",
)

# ---------------------------------------------------------------------------
# Pydantic models
# ---------------------------------------------------------------------------


def _coerce_duration(value: Any) -> Any:
    if isinstance(value, str):
        return parse_duration(value)
    return value


class CustomPatternSettings(BaseModel):
    """A user supplied OTP pattern; group 1 must capture the code."""

    name: constr(strip_whitespace=True, min_length=1)
    pattern: constr(min_length=1) = Field(validation_alias=AliasChoices("pattern", "regex"))
    confidence: confloat(ge=0.0, le=1.0)

    model_config = ConfigDict(extra="forbid", populate_by_name=True, frozen=True)


class OTPRules(BaseModel):
    """Settings controlling OTP detection and clipboard handling."""

    enabled: bool = True
    expiry_duration: timedelta = timedelta(minutes=5)
    confidence_threshold: confloat(ge=0.0, le=1.0) = 0.7
    auto_copy_to_clipboard: bool = False
    clipboard_auto_clear: timedelta = timedelta(minutes=2)
    secure_clipboard: bool = False
    custom_patterns: list[CustomPatternSettings] = Field(default_factory=list)
    trusted_otp_senders: list[str] = Field(default_factory=lambda: list(DEFAULT_TRUSTED_SENDERS))
    blocked_patterns: list[str] = Field(default_factory=list)
    max_processing_time: timedelta = DEFAULT_MAX_PROCESSING_TIME

    model_config = ConfigDict(extra="forbid")

    @model_validator(mode="before")
    @classmethod
    def _secure_clipboard_follows_auto_copy(cls, data: Any) -> Any:
        if isinstance(data, Mapping) and "secure_clipboard" not in data:
            data = dict(data)
            data["secure_clipboard"] = bool(data.get("auto_copy_to_clipboard", False))
        return data

    @field_validator("expiry_duration", "clipboard_auto_clear", mode="before")
    @classmethod
    def _parse_duration(cls, value: Any) -> Any:
        return _coerce_duration(value)

    @field_validator("max_processing_time", mode="before")
    @classmethod
    def _default_processing_time(cls, value: Any) -> Any:
        if value is None or value == 0 or value == "":
            return DEFAULT_MAX_PROCESSING_TIME
        value = _coerce_duration(value)
        if isinstance(value, timedelta) and value == timedelta(0):
            return DEFAULT_MAX_PROCESSING_TIME
        return value

    @field_validator("expiry_duration", "clipboard_auto_clear")
    @classmethod
    def _non_negative(cls, value: timedelta) -> timedelta:
        if value < timedelta(0):
            raise ValueError("duration cannot be negative")
        return value

    @field_validator("max_processing_time")
    @classmethod
    def _positive(cls, value: timedelta) -> timedelta:
        if value <= timedelta(0):
            raise ValueError("max_processing_time must be positive")
        return value

    @field_validator("trusted_otp_senders")
    @classmethod
    def _drop_blank_senders(cls, value: list[str]) -> list[str]:
        return [s.strip() for s in value if s.strip()]

    @field_serializer(
        "expiry_duration", "clipboard_auto_clear", "max_processing_time", when_used="json"
    )
    def _dump_duration(self, value: timedelta) -> str:
        return format_duration(value)


# ---------------------------------------------------------------------------
# Loader utilities
# ---------------------------------------------------------------------------


def deep_merge_dicts(a: dict[str, Any], b: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge mapping ``b`` onto ``a`` returning a new dict."""

    result: dict[str, Any] = dict(a)
    for key, b_val in b.items():
        if key in result and isinstance(result[key], dict) and isinstance(b_val, dict):
            result[key] = deep_merge_dicts(result[key], b_val)
        else:
            result[key] = b_val
    return result


def _unwrap(document: Any) -> dict[str, Any]:
    if document is None:
        return {}
    if not isinstance(document, dict):
        raise InvalidRules("OTP rules document must be a mapping")
    if set(document) == {"otp_rules"}:
        inner = document["otp_rules"]
        return _unwrap(inner)
    return document


def _read_defaults() -> dict[str, Any]:
    with (
        importlib_resources.files("otpsentinel.config")
        .joinpath("defaults.yml")
        .open("r", encoding="utf-8") as f
    ):
        return _unwrap(yaml.safe_load(f))


def _first_error(exc: ValidationError) -> str:
    err = exc.errors()[0]
    loc = ".".join(str(part) for part in err.get("loc", ())) or "rules"
    return f"{loc}: {err.get('msg', 'invalid value')}"


def validate_rules(rules: OTPRules | Mapping[str, Any]) -> OTPRules:
    """Return a validated copy of ``rules`` or raise :class:`InvalidRules`.

    Instances produced with ``model_copy(update=...)`` or ``model_construct``
    skip pydantic validation, so detectors re-check the full model here.  The
    only value ever coerced is ``max_processing_time``.
    """

    data = rules.model_dump() if isinstance(rules, OTPRules) else dict(rules)
    try:
        return OTPRules.model_validate(data)
    except ValidationError as exc:
        raise InvalidRules(f"invalid OTP rules: {_first_error(exc)}") from exc


def default_rules() -> OTPRules:
    """Return the packaged default rules."""

    return validate_rules(_read_defaults())


def load_rules(path: str | os.PathLike[str] | None = None) -> OTPRules:
    """Load OTP rules from package defaults and optional user overrides.

    Precedence of sources: package ``defaults.yml`` < user-provided YAML.  A
    user document may nest its settings under a top-level ``otp_rules`` key.
    """

    defaults = _read_defaults()
    if path is None:
        return validate_rules(defaults)

    with Path(path).open("r", encoding="utf-8") as f:
        try:
            overrides = _unwrap(yaml.safe_load(f))
        except yaml.YAMLError as exc:
            raise InvalidRules(f"failed to parse OTP rules YAML: {exc}") from exc
    return validate_rules(deep_merge_dicts(defaults, overrides))


def save_rules(path: str | os.PathLike[str], rules: OTPRules) -> Path:
    """Write ``rules`` to ``path`` as YAML readable only by the owner."""

    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    data = rules.model_dump(mode="json")
    text = yaml.safe_dump(data, sort_keys=False, allow_unicode=True)
    fd = os.open(target, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
    with os.fdopen(fd, "w", encoding="utf-8") as f:
        f.write(text)
    os.chmod(target, 0o600)
    return target


def rules_to_yaml(rules: OTPRules) -> str:
    """Return ``rules`` rendered as a YAML document."""

    return yaml.safe_dump(rules.model_dump(mode="json"), sort_keys=False, allow_unicode=True)


__all__ = [
    "DEFAULT_MAX_PROCESSING_TIME",
    "DEFAULT_TRUSTED_SENDERS",
    "CustomPatternSettings",
    "OTPRules",
    "deep_merge_dicts",
    "default_rules",
    "load_rules",
    "rules_to_yaml",
    "save_rules",
    "validate_rules",
]
