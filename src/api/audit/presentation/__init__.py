"""Audit log routes."""

from audit.presentation.routes import router

__all__ = ["router"]
