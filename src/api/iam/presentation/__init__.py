"""IAM presentation layer - aggregate-based organization.

Organizes presentation concerns by aggregate (principals, invitations,
tenants) plus the authentication routes. Each package contains its own
routes and models.
"""

from __future__ import annotations

from fastapi import APIRouter

from iam.presentation import invitations, principals, tenants
from iam.presentation.auth import router as auth_router

# Auth is enforced per-endpoint: invitation redemption is public
router = APIRouter(
    prefix="/iam",
    tags=["iam"],
)

router.include_router(principals.router)
router.include_router(invitations.router)
router.include_router(tenants.router)

__all__ = ["auth_router", "router"]
