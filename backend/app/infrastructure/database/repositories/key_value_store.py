"""Concrete KeyValueStore implementation backed by SQLAlchemy."""

import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.application.interfaces import KeyValueStore
from app.domain.exceptions import StorageError
from app.infrastructure.database.models import KeyValueEntryModel

logger = logging.getLogger(__name__)

_BACKEND = "database"


class SQLAlchemyKeyValueStore(KeyValueStore):
    """Implements the KeyValueStore port using SQLAlchemy async sessions.

    Each call runs in its own session and transaction, so a completed
    ``set`` is committed before it returns.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def get(self, key: str) -> str | None:
        try:
            async with self._session_factory() as session:
                model = await session.get(KeyValueEntryModel, key)
                return model.value if model else None
        except SQLAlchemyError as exc:
            raise StorageError(_BACKEND, key, str(exc)) from exc

    async def set(self, key: str, value: str) -> None:
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    model = await session.get(KeyValueEntryModel, key)
                    if model is None:
                        session.add(KeyValueEntryModel(key=key, value=value))
                    else:
                        model.value = value
        except SQLAlchemyError as exc:
            raise StorageError(_BACKEND, key, str(exc)) from exc

        logger.debug("Stored key '%s' (%d chars)", key, len(value))
