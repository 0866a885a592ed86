"""Validation of inbound payloads."""
