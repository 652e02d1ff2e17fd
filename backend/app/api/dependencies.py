"""
FastAPI dependencies shared by the route modules.
"""

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.gateway import SqlAlchemyGateway
from app.db.session import get_db
from app.services.cache_service import EventListCache


def get_gateway(db: AsyncSession = Depends(get_db)) -> SqlAlchemyGateway:
    return SqlAlchemyGateway(db)


def get_cache(request: Request) -> EventListCache:
    return request.app.state.cache
