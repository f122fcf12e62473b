"""Sign in, sign out and password routes."""

from iam.presentation.auth.routes import router

__all__ = ["router"]
