"""Domain-Oriented Observability for IAM infrastructure.

Probes for repository operations following Domain-Oriented Observability patterns.
"""

from iam.infrastructure.observability.repository_probe import (
    DefaultInvitationRepositoryProbe,
    DefaultPrincipalRepositoryProbe,
    DefaultSessionTokenRepositoryProbe,
    DefaultTenantRepositoryProbe,
    InvitationRepositoryProbe,
    PrincipalRepositoryProbe,
    SessionTokenRepositoryProbe,
    TenantRepositoryProbe,
)

__all__ = [
    "DefaultInvitationRepositoryProbe",
    "DefaultPrincipalRepositoryProbe",
    "DefaultSessionTokenRepositoryProbe",
    "DefaultTenantRepositoryProbe",
    "InvitationRepositoryProbe",
    "PrincipalRepositoryProbe",
    "SessionTokenRepositoryProbe",
    "TenantRepositoryProbe",
]
