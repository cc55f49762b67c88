from datetime import timedelta

import pytest

from otpsentinel.config import OTPRules, default_rules, load_rules
from otpsentinel.config.schema import DEFAULT_TRUSTED_SENDERS
from otpsentinel.detect.otp import detect_otp


def test_default_values() -> None:
    rules = load_rules()
    assert rules.enabled is True
    assert rules.expiry_duration == timedelta(minutes=5)
    assert rules.confidence_threshold == 0.7
    assert rules.auto_copy_to_clipboard is False
    assert rules.clipboard_auto_clear == timedelta(minutes=2)
    assert rules.secure_clipboard is False
    assert rules.custom_patterns == []
    assert rules.blocked_patterns == []
    assert rules.max_processing_time == timedelta(milliseconds=500)


def test_default_trusted_senders() -> None:
    senders = default_rules().trusted_otp_senders
    assert len(senders) == 16
    assert senders[0] == "accounts.google.com"
    assert "noreply@" in senders
    assert "@twilio.com" in senders


def test_default_rules_are_fresh_copies() -> None:
    first = default_rules()
    first.trusted_otp_senders.append("mutated.example")
    assert "mutated.example" not in default_rules().trusted_otp_senders


def test_model_defaults_match_packaged_defaults() -> None:
    packaged = default_rules()
    bare = OTPRules()
    for field in OTPRules.model_fields:
        assert getattr(bare, field) == getattr(packaged, field), field
    assert bare.model_dump() == packaged.model_dump()


def test_trusted_sender_constant_matches_yaml() -> None:
    assert tuple(default_rules().trusted_otp_senders) == DEFAULT_TRUSTED_SENDERS


def test_bare_rules_keep_trusted_sender_boost() -> None:
    result = detect_otp("", "Sign in with 482913", "", "noreply@github.com", rules=OTPRules())
    assert result is not None
    assert result.confidence == pytest.approx(0.70)
