from __future__ import annotations

from datetime import timedelta
from pathlib import Path

import pytest

from otpsentinel.config import OTPRules, load_rules, validate_rules
from otpsentinel.utils.errors import ConfigurationError, InvalidRules


def _write(tmp_path: Path, text: str) -> Path:
    cfg_file = tmp_path / "rules.yml"
    cfg_file.write_text(text, encoding="utf-8")
    return cfg_file


def test_invalid_confidence_threshold(tmp_path: Path) -> None:
    with pytest.raises(InvalidRules):
        load_rules(_write(tmp_path, "confidence_threshold: 2.0\n"))


def test_unknown_key(tmp_path: Path) -> None:
    with pytest.raises(InvalidRules) as excinfo:
        load_rules(_write(tmp_path, "unknown:\n  foo: 1\n"))
    assert "unknown" in str(excinfo.value)


def test_invalid_duration(tmp_path: Path) -> None:
    with pytest.raises(InvalidRules):
        load_rules(_write(tmp_path, 'expiry_duration: "five minutes"\n'))


def test_negative_duration(tmp_path: Path) -> None:
    with pytest.raises(InvalidRules):
        load_rules(_write(tmp_path, 'clipboard_auto_clear: "-1s"\n'))


def test_malformed_yaml(tmp_path: Path) -> None:
    with pytest.raises(InvalidRules):
        load_rules(_write(tmp_path, "confidence_threshold: [0.5\n"))


def test_non_mapping_document(tmp_path: Path) -> None:
    with pytest.raises(InvalidRules):
        load_rules(_write(tmp_path, "- just\n- a list\n"))


def test_missing_file(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_rules(tmp_path / "missing.yml")


def test_invalid_rules_is_configuration_error() -> None:
    assert issubclass(InvalidRules, ConfigurationError)
    assert issubclass(InvalidRules, ValueError)


def test_custom_pattern_confidence_range(tmp_path: Path) -> None:
    text = "custom_patterns:\n  - name: acme\n    pattern: 'ACME-(\\d{5})'\n    confidence: 1.5\n"
    with pytest.raises(InvalidRules):
        load_rules(_write(tmp_path, text))


def test_custom_pattern_legacy_regex_key(tmp_path: Path) -> None:
    text = "custom_patterns:\n  - name: acme\n    regex: 'ACME-(\\d{5})'\n    confidence: 0.9\n"
    rules = load_rules(_write(tmp_path, text))
    assert rules.custom_patterns[0].pattern == r"ACME-(\d{5})"


def test_overrides_merge_with_defaults(tmp_path: Path) -> None:
    rules = load_rules(_write(tmp_path, 'confidence_threshold: 0.8\nexpiry_duration: "10m"\n'))
    assert rules.confidence_threshold == 0.8
    assert rules.expiry_duration == timedelta(minutes=10)
    assert rules.clipboard_auto_clear == timedelta(minutes=2)
    assert "github.com" in rules.trusted_otp_senders


def test_otp_rules_wrapper(tmp_path: Path) -> None:
    rules = load_rules(_write(tmp_path, "otp_rules:\n  confidence_threshold: 0.9\n"))
    assert rules.confidence_threshold == 0.9


def test_explicit_zero_threshold_is_kept(tmp_path: Path) -> None:
    rules = load_rules(_write(tmp_path, "confidence_threshold: 0\n"))
    assert rules.confidence_threshold == 0.0


def test_empty_file_yields_defaults(tmp_path: Path) -> None:
    rules = load_rules(_write(tmp_path, ""))
    assert rules == load_rules()


@pytest.mark.parametrize("value", ["0", "0s", "''", "null"])
def test_zero_processing_time_means_default(tmp_path: Path, value: str) -> None:
    rules = load_rules(_write(tmp_path, f"max_processing_time: {value}\n"))
    assert rules.max_processing_time == timedelta(milliseconds=500)


def test_secure_clipboard_follows_auto_copy(tmp_path: Path) -> None:
    rules = load_rules(_write(tmp_path, "auto_copy_to_clipboard: true\n"))
    assert rules.secure_clipboard is True
    rules = load_rules(
        _write(tmp_path, "auto_copy_to_clipboard: true\nsecure_clipboard: false\n")
    )
    assert rules.secure_clipboard is False


def test_blank_trusted_senders_dropped() -> None:
    rules = OTPRules(trusted_otp_senders=["  github.com ", "", "   "])
    assert rules.trusted_otp_senders == ["github.com"]


def test_validate_rules_catches_unvalidated_copies() -> None:
    rules = OTPRules().model_copy(update={"confidence_threshold": 3.0})
    with pytest.raises(InvalidRules) as excinfo:
        validate_rules(rules)
    assert "confidence_threshold" in str(excinfo.value)


def test_validate_rules_accepts_mapping() -> None:
    rules = validate_rules({"expiry_duration": "90s"})
    assert rules.expiry_duration == timedelta(seconds=90)
