"""Observability helpers."""

from .logging import RedactingFilter, get_logger

__all__ = ["RedactingFilter", "get_logger"]
