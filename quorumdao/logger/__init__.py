"""Logging setup and per-organization audit loggers."""

from __future__ import annotations

from .auditLogger import AuditLogger
from .formatting import StructuredFormatter, configure_logging

__all__ = ["AuditLogger", "StructuredFormatter", "configure_logging"]
