"""Dependency injection for API service."""
from typing import AsyncGenerator
from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from db.session import get_db
from api_service.services.inspection_item_service import InspectionItemService


async def get_database() -> AsyncGenerator[AsyncSession, None]:
    """Get database session."""
    async for session in get_db():
        yield session


def get_item_service(db: AsyncSession = Depends(get_database)) -> InspectionItemService:
    """Inspection item service bound to the request's session."""
    return InspectionItemService(db)
