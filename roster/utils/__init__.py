"""Shared utility functions and models for the Roster application.

This package provides convenience re-exports so that consumers can import
directly from ``roster.utils`` (e.g. ``from roster.utils import sanitize_text``)
while full absolute imports (e.g. ``from roster.utils.sanitize import
sanitize_text``) remain supported.
"""

from roster.utils.audit import AuditEvent, log_audit_event
from roster.utils.sanitize import (
    escape_html,
    sanitize_optional_text,
    sanitize_text,
    strip_tags,
)

__all__ = [
    "AuditEvent",
    "escape_html",
    "log_audit_event",
    "sanitize_optional_text",
    "sanitize_text",
    "strip_tags",
]
