"""Audit bounded context.

Append-only trail of security-relevant actions. Other contexts record
through ``shared_kernel.audit.ports.IAuditLogger``; this context owns the
storage, redaction, and tenant-scoped queries.
"""
