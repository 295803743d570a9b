"""Shared parsing, logging and sanitization helpers."""
