"""Application services for IAM bounded context.

Application services orchestrate domain aggregates, repositories, and
other infrastructure to fulfill use cases. They are the "front door" to
the IAM context.
"""

from iam.application.services.authentication_service import AuthenticationService
from iam.application.services.credential_service import CredentialService
from iam.application.services.invitation_service import (
    InvitationService,
    RedemptionAttributes,
)
from iam.application.services.principal_service import PrincipalService
from iam.application.services.session_service import SessionPolicy, SessionService
from iam.application.services.tenant_service import TenantService

__all__ = [
    "AuthenticationService",
    "CredentialService",
    "InvitationService",
    "PrincipalService",
    "RedemptionAttributes",
    "SessionPolicy",
    "SessionService",
    "TenantService",
]
