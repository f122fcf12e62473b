"""PostgreSQL implementation of ISessionTokenRepository."""

from __future__ import annotations

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from iam.domain.aggregates import SessionToken
from iam.domain.value_objects import PrincipalId, SessionTokenId, TokenContext
from iam.infrastructure.models import SessionTokenModel
from iam.infrastructure.observability import (
    DefaultSessionTokenRepositoryProbe,
    SessionTokenRepositoryProbe,
)
from iam.ports.repositories import ISessionTokenRepository


class SessionTokenRepository(ISessionTokenRepository):
    """Repository for stored token digests.

    Rows are only ever inserted or deleted; a reissued token is a new row.
    """

    def __init__(
        self,
        session: AsyncSession,
        probe: SessionTokenRepositoryProbe | None = None,
    ) -> None:
        self._session = session
        self._probe = probe or DefaultSessionTokenRepositoryProbe()

    async def add(self, token: SessionToken) -> None:
        self._session.add(
            SessionTokenModel(
                id=token.id.value,
                principal_id=token.principal_id.value,
                token_hash=token.token_hash,
                context=token.context.value,
                sent_to=token.sent_to,
                created_at=token.created_at,
                authenticated_at=token.authenticated_at,
            )
        )
        await self._session.flush()
        self._probe.token_stored(token.principal_id.value, token.context.value)

    async def get_by_hash(
        self, token_hash: str, context: TokenContext
    ) -> SessionToken | None:
        stmt = select(SessionTokenModel).where(
            SessionTokenModel.token_hash == token_hash,
            SessionTokenModel.context == context.value,
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()

        if model is None:
            return None

        return self._to_domain(model)

    async def list_for_principal(
        self, principal_id: PrincipalId, context: TokenContext
    ) -> list[SessionToken]:
        stmt = (
            select(SessionTokenModel)
            .where(
                SessionTokenModel.principal_id == principal_id.value,
                SessionTokenModel.context == context.value,
            )
            .order_by(SessionTokenModel.authenticated_at.desc())
        )
        result = await self._session.execute(stmt)
        return [self._to_domain(model) for model in result.scalars().all()]

    async def delete_by_hash(self, token_hash: str) -> bool:
        stmt = delete(SessionTokenModel).where(
            SessionTokenModel.token_hash == token_hash
        )
        result = await self._session.execute(stmt)
        return result.rowcount > 0

    async def delete_by_id(
        self,
        principal_id: PrincipalId,
        token_id: SessionTokenId,
        context: TokenContext,
    ) -> str | None:
        """Delete a token only if it belongs to the principal."""
        stmt = (
            delete(SessionTokenModel)
            .where(
                SessionTokenModel.id == token_id.value,
                SessionTokenModel.principal_id == principal_id.value,
                SessionTokenModel.context == context.value,
            )
            .returning(SessionTokenModel.token_hash)
        )
        result = await self._session.execute(stmt)
        token_hash = result.scalar_one_or_none()
        if token_hash is not None:
            self._probe.tokens_deleted(principal_id.value, context.value, 1)
        return token_hash

    async def delete_for_principal(
        self,
        principal_id: PrincipalId,
        context: TokenContext,
        except_hash: str | None = None,
    ) -> list[str]:
        """Delete a principal's tokens of one context, returning their hashes."""
        stmt = delete(SessionTokenModel).where(
            SessionTokenModel.principal_id == principal_id.value,
            SessionTokenModel.context == context.value,
        )
        if except_hash is not None:
            stmt = stmt.where(SessionTokenModel.token_hash != except_hash)

        result = await self._session.execute(
            stmt.returning(SessionTokenModel.token_hash)
        )
        hashes = list(result.scalars().all())

        self._probe.tokens_deleted(principal_id.value, context.value, len(hashes))
        return hashes

    def _to_domain(self, model: SessionTokenModel) -> SessionToken:
        return SessionToken(
            id=SessionTokenId(value=model.id),
            principal_id=PrincipalId(value=model.principal_id),
            token_hash=model.token_hash,
            context=TokenContext(model.context),
            created_at=model.created_at,
            authenticated_at=model.authenticated_at,
            sent_to=model.sent_to,
        )
