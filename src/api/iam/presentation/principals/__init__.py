"""Principal management routes."""

from iam.presentation.principals.routes import router

__all__ = ["router"]
