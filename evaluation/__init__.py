"""Evaluation helpers for measuring OTP detection quality and speed."""
