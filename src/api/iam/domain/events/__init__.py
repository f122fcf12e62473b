"""Domain events for IAM bounded context.

Domain events capture facts about things that have happened in the domain.
They are immutable value objects that carry all the information needed
to describe the occurrence of an event.

The application layer collects them from aggregates after a successful
commit and records each one in the audit log.
"""

from iam.domain.events.invitation import (
    InvitationAccepted,
    InvitationCreated,
    InvitationExpired,
)
from iam.domain.events.principal import (
    PasswordChanged,
    PasswordReset,
    PrincipalActivated,
    PrincipalCreated,
    PrincipalDeactivated,
    PrincipalDeleted,
    PrincipalEmailChanged,
    PrincipalRoleChanged,
)
from iam.domain.events.tenant import (
    TenantActivated,
    TenantCreated,
    TenantDeactivated,
    TenantSettingsUpdated,
)

# Type alias for all domain events in the IAM context
DomainEvent = (
    TenantCreated
    | TenantSettingsUpdated
    | TenantDeactivated
    | TenantActivated
    | PrincipalCreated
    | PrincipalRoleChanged
    | PrincipalDeactivated
    | PrincipalActivated
    | PrincipalDeleted
    | PrincipalEmailChanged
    | PasswordChanged
    | PasswordReset
    | InvitationCreated
    | InvitationAccepted
    | InvitationExpired
)

__all__ = [
    # Tenant events
    "TenantCreated",
    "TenantSettingsUpdated",
    "TenantDeactivated",
    "TenantActivated",
    # Principal events
    "PrincipalCreated",
    "PrincipalRoleChanged",
    "PrincipalDeactivated",
    "PrincipalActivated",
    "PrincipalDeleted",
    "PrincipalEmailChanged",
    "PasswordChanged",
    "PasswordReset",
    # Invitation events
    "InvitationCreated",
    "InvitationAccepted",
    "InvitationExpired",
    # Type alias
    "DomainEvent",
]
