"""SQLAlchemy ORM models for IAM bounded context.

These models map to database tables and are used by repository implementations.
"""

from iam.infrastructure.models.invitation import InvitationModel
from iam.infrastructure.models.principal import PrincipalModel
from iam.infrastructure.models.session_token import SessionTokenModel
from iam.infrastructure.models.tenant import TenantModel

__all__ = [
    "InvitationModel",
    "PrincipalModel",
    "SessionTokenModel",
    "TenantModel",
]
