from typing import Annotated
from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from trekdesk.infrastructure import get_session
from trekdesk.core.unit_of_work import UnitOfWork

# Type alias for dependency injection
SessionDep = Annotated[AsyncSession, Depends(get_session)]


def get_uow(sess: SessionDep) -> UnitOfWork:
    return UnitOfWork(sess)


UowDep = Annotated[UnitOfWork, Depends(get_uow)]
