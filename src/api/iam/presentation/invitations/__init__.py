"""Invitation routes."""

from iam.presentation.invitations.routes import router

__all__ = ["router"]
