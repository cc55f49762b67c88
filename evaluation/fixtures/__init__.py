"""Annotated email fixtures for detector evaluation."""
