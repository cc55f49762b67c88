"""OTP rules configuration.

Precedence of configuration sources:
    1. Package defaults (``defaults.yml``)
    2. Optional user-provided YAML passed to :func:`load_rules`
"""

from .schema import (
    CustomPatternSettings,
    OTPRules,
    default_rules,
    load_rules,
    rules_to_yaml,
    save_rules,
    validate_rules,
)

__all__ = [
    "CustomPatternSettings",
    "OTPRules",
    "default_rules",
    "load_rules",
    "rules_to_yaml",
    "save_rules",
    "validate_rules",
]
