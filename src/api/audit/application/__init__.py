"""Application layer for Audit bounded context."""
