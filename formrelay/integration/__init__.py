"""Remote CRM client and audit sinks."""

from __future__ import annotations

from .audit import JsonAuditSink, NullAuditSink
from .crm_client import CRMGraphQLClient

__all__ = ["CRMGraphQLClient", "JsonAuditSink", "NullAuditSink"]
