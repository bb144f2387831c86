"""Shared plumbing for the service classes."""

import asyncio
import logging
from typing import Any, Iterable, Optional

from fastapi import UploadFile
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from core.storage.s3 import FileType, S3Storage
from database.engine import AsyncSessionLocal
from database.models.users import Chat, ChatStatus


def success(message: str, data: Any = None, **extra: Any) -> dict[str, Any]:
    """Standard success envelope."""
    body: dict[str, Any] = {"success": True, "message": message}
    if data is not None:
        body["data"] = data
    body.update(extra)
    return body


class BaseService:
    """
    Collaborators every service needs.

    Args:
        session_factory: Callable returning an ``AsyncSession`` context manager
        storage: Object storage used for uploads
        logger: Logger for this service; defaults to the module logger
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession] = AsyncSessionLocal,
        storage: Optional[S3Storage] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.session_factory = session_factory
        self._storage = storage
        self.logger = logger or logging.getLogger(type(self).__module__)

    @property
    def storage(self) -> S3Storage:
        if self._storage is None:
            self._storage = S3Storage()
        return self._storage

    async def upload_files(
        self,
        owner_id: str,
        files: dict[str, tuple[UploadFile, FileType]],
        swallow_errors: bool = False,
    ) -> dict[str, str]:
        """
        Upload several files concurrently.

        Returns ``{field: public_url}``. With ``swallow_errors`` a failed
        upload is logged and left out of the result; otherwise the first
        failure propagates.
        """
        if not files:
            return {}

        fields = list(files)
        results = await asyncio.gather(
            *(
                self.storage.upload_file(upload, owner_id, file_type)
                for upload, file_type in files.values()
            ),
            return_exceptions=swallow_errors,
        )

        urls: dict[str, str] = {}
        for field, result in zip(fields, results):
            if isinstance(result, BaseException):
                self.logger.error(f"Upload of {field} for {owner_id} failed: {result}")
                continue
            urls[field] = result["publicUrl"]
        return urls

    async def chat_ids(
        self,
        session: AsyncSession,
        company_user_ids: Iterable[str],
        player_user_ids: Iterable[str],
    ) -> dict[tuple[str, str], str]:
        """Open chats keyed by ``(company_user_id, player_user_id)``."""
        company_user_ids = list(set(company_user_ids))
        player_user_ids = list(set(player_user_ids))
        if not company_user_ids or not player_user_ids:
            return {}

        result = await session.execute(
            select(Chat).where(
                Chat.company_user_id.in_(company_user_ids),
                Chat.player_user_id.in_(player_user_ids),
                Chat.status.in_([ChatStatus.PENDING, ChatStatus.ACCEPTED]),
            )
        )
        return {
            (chat.company_user_id, chat.player_user_id): chat.id
            for chat in result.scalars().all()
        }


def push_recent(recent: Optional[list[str]], item_id: str, limit: int = 4) -> list[str]:
    """Move ``item_id`` to the front of a most-recent-first list of ``limit`` ids."""
    items = [i for i in (recent or []) if i != item_id]
    return [item_id, *items][:limit]
