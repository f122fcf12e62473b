"""PostgreSQL implementation of IInvitationRepository.

Redemption locks the invitation row with ``SELECT ... FOR UPDATE`` so two
concurrent redeems of one token serialize; the loser then sees the
accepted status.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from iam.domain.aggregates import Invitation
from iam.domain.value_objects import (
    InvitationId,
    InvitationStatus,
    PrincipalId,
    TenantId,
)
from iam.infrastructure.models import InvitationModel
from iam.infrastructure.observability import (
    DefaultInvitationRepositoryProbe,
    InvitationRepositoryProbe,
)
from iam.ports.repositories import IInvitationRepository
from shared_kernel.authorization.types import Role


class InvitationRepository(IInvitationRepository):
    """Repository managing PostgreSQL storage for Invitation aggregates."""

    def __init__(
        self,
        session: AsyncSession,
        probe: InvitationRepositoryProbe | None = None,
    ) -> None:
        """Initialize repository with database session.

        Args:
            session: AsyncSession from FastAPI dependency injection
            probe: Optional domain probe for observability
        """
        self._session = session
        self._probe = probe or DefaultInvitationRepositoryProbe()

    async def save(self, invitation: Invitation) -> None:
        stmt = select(InvitationModel).where(InvitationModel.id == invitation.id.value)
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()

        if model is None:
            model = InvitationModel(
                id=invitation.id.value,
                email=invitation.email,
                role=invitation.role.value,
                tenant_id=invitation.tenant_id.value,
                token_hash=invitation.token_hash,
                expires_at=invitation.expires_at,
                invited_by_id=(
                    invitation.invited_by_id.value
                    if invitation.invited_by_id
                    else None
                ),
            )
            if invitation.created_at is not None:
                model.created_at = invitation.created_at
            self._session.add(model)

        # Only the state machine fields change after creation
        model.status = invitation.status.value
        model.accepted_at = invitation.accepted_at

        await self._session.flush()
        self._probe.invitation_saved(invitation.id.value, invitation.status.value)

    async def get_by_token_hash(
        self, token_hash: str, for_update: bool = False
    ) -> Invitation | None:
        stmt = select(InvitationModel).where(InvitationModel.token_hash == token_hash)
        if for_update:
            stmt = stmt.with_for_update()
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()

        if model is None:
            return None

        return Invitation(
            id=InvitationId(value=model.id),
            email=model.email,
            role=Role(model.role),
            tenant_id=TenantId(value=model.tenant_id),
            token_hash=model.token_hash,
            expires_at=model.expires_at,
            status=InvitationStatus(model.status),
            invited_by_id=(
                PrincipalId(value=model.invited_by_id) if model.invited_by_id else None
            ),
            accepted_at=model.accepted_at,
            created_at=model.created_at,
        )

    async def expire_pending_before(self, now: datetime) -> int:
        """Expire overdue pending invitations in one conditional update.

        Rows redeemed or expired concurrently no longer match the status
        condition, so running this twice is harmless.
        """
        stmt = (
            update(InvitationModel)
            .where(
                InvitationModel.status == InvitationStatus.PENDING.value,
                InvitationModel.expires_at < now,
            )
            .values(status=InvitationStatus.EXPIRED.value)
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)
        count = result.rowcount or 0

        self._probe.invitations_expired(count)
        return count
