"""
SQLAlchemy implementation of the persistence gateway.

WRITE PATH
==========

  1. hook(write)          normalizer / validator; may await exists_by_id
  2. apply record         only the hook's output touches the ORM row
  3. flush + commit       unique index on events.slug is checked here
  4. IntegrityError       rolled back, re-raised as a domain error

A rejected hook raises before step 2, so neither the row nor the session
sees any of the candidate values. A failure in step 3 rolls the session
back, which expires the row; the next read reloads the stored state.
"""

from typing import Any, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import ConflictError, DomainError, ReferencedEventNotFoundError
from app.core.logging import get_logger
from app.core.result import Failure
from app.models.booking import Booking
from app.models.event import Event
from app.services.interfaces.persistence import ModelT, PendingWrite, PersistenceGateway, PreCommitHook

logger = get_logger(__name__)


class SqlAlchemyGateway(PersistenceGateway):
    def __init__(self, db: AsyncSession):
        self.db = db

    async def exists_by_id(self, event_id: Any) -> bool:
        result = await self.db.execute(select(Event.id).where(Event.id == event_id).limit(1))
        return result.scalar_one_or_none() is not None

    async def save(
        self,
        model: type,
        write: PendingWrite,
        hook: PreCommitHook,
        instance: Optional[ModelT] = None,
    ) -> ModelT:
        result = await hook(write)
        if isinstance(result, Failure):
            logger.warning(
                "write_rejected",
                table=model.__tablename__,
                field=result.error.field,
                reason=result.error.message,
            )
            raise result.error

        target = instance if instance is not None else model()
        for name, value in result.value.to_columns().items():
            setattr(target, name, value)
        self.db.add(target)

        try:
            await self.db.flush()
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            error = self._translate_integrity_error(model, result.value, e)
            logger.warning("write_conflict", table=model.__tablename__, reason=error.message)
            raise error from e

        await self.db.refresh(target)
        return target

    @staticmethod
    def _translate_integrity_error(model: type, record: Any, exc: IntegrityError) -> DomainError:
        if model is Event:
            return ConflictError(f"An event with slug '{record.slug}' already exists", field="slug")
        if model is Booking:
            # The event vanished between the existence check and the commit
            return ReferencedEventNotFoundError(record.event_id)
        return ConflictError(str(exc.orig))
