"""Encrypted credential lookup."""

import logging

from sqlalchemy import select

from statusbot.dao.base import BaseDAO
from statusbot.models.domain import EncryptedCredential
from statusbot.models.orm import JournalAccountModel

logger = logging.getLogger(__name__)


class CredentialDAO(BaseDAO[EncryptedCredential]):
    """Read access to the `journal_data` table.

    Values are returned still encrypted; decryption is the service's job.
    """

    async def find_by_alias(self, alias: str) -> list[EncryptedCredential]:
        """Find credential rows for a requester alias.

        Personal email is tried first; if it matches nothing the alias is
        treated as a client name.

        Args:
            alias: Email address or client name sent by the requester.

        Returns:
            Matching rows in insertion order (possibly empty).
        """
        rows = await self._select(JournalAccountModel.personal_email == alias)
        if rows:
            logger.info("Credentials found by personal email")
            return rows

        rows = await self._select(JournalAccountModel.client_name == alias)
        if rows:
            logger.info("Credentials found by client name")
        return rows

    async def create(
        self,
        *,
        client_name: str | None,
        personal_email: str | None,
        journal_link: str | None,
        username: str | None,
        password: str | None,
    ) -> EncryptedCredential:
        """Insert an (already encrypted) credential row."""
        async with self._db.session() as session:
            model = JournalAccountModel(
                client_name=client_name,
                personal_email=personal_email,
                journal_link=journal_link,
                username=username,
                password=password,
            )
            session.add(model)
            await session.flush()
            return self._to_domain(model)

    async def _select(self, condition) -> list[EncryptedCredential]:
        async with self._db.session() as session:
            result = await session.execute(
                select(JournalAccountModel)
                .where(condition)
                .order_by(JournalAccountModel.id)
            )
            return [self._to_domain(m) for m in result.scalars().all()]

    @staticmethod
    def _to_domain(model: JournalAccountModel) -> EncryptedCredential:
        return EncryptedCredential(
            url=model.journal_link,
            username=model.username,
            password=model.password,
        )
