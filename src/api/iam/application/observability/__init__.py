"""Domain-Oriented Observability for the IAM application layer.

One probe per service: sessions, credentials, authentication,
invitations, principals and tenants.
"""

from iam.application.observability.authentication_probe import (
    AuthenticationProbe,
    DefaultAuthenticationProbe,
)
from iam.application.observability.credential_service_probe import (
    CredentialServiceProbe,
    DefaultCredentialServiceProbe,
)
from iam.application.observability.invitation_service_probe import (
    DefaultInvitationServiceProbe,
    InvitationServiceProbe,
)
from iam.application.observability.principal_service_probe import (
    DefaultPrincipalServiceProbe,
    PrincipalServiceProbe,
)
from iam.application.observability.session_service_probe import (
    DefaultSessionServiceProbe,
    SessionServiceProbe,
)
from iam.application.observability.tenant_service_probe import (
    DefaultTenantServiceProbe,
    TenantServiceProbe,
)

__all__ = [
    "AuthenticationProbe",
    "DefaultAuthenticationProbe",
    "CredentialServiceProbe",
    "DefaultCredentialServiceProbe",
    "InvitationServiceProbe",
    "DefaultInvitationServiceProbe",
    "PrincipalServiceProbe",
    "DefaultPrincipalServiceProbe",
    "SessionServiceProbe",
    "DefaultSessionServiceProbe",
    "TenantServiceProbe",
    "DefaultTenantServiceProbe",
]
