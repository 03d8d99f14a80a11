'''
Shared FastAPI dependencies for the schedule routers.
'''
from typing import Annotated
from uuid import UUID

from fastapi import Depends, Header, Request

from ..services.schedule_repository import ScheduleRepository
from ..services.schedule_engine import ScheduleEngine
from ..services.session_registry import ScheduleSessionRegistry


def get_current_user_id(x_user_id: Annotated[UUID, Header()]) -> UUID:
    """
    The calling user. Authentication happens upstream; we only trust the
    header it forwards.
    """
    return x_user_id


def get_session_registry(request: Request) -> ScheduleSessionRegistry:
    return request.app.state.schedule_sessions


async def get_schedule_engine(
    user_id: Annotated[UUID, Depends(get_current_user_id)],
    registry: Annotated[ScheduleSessionRegistry, Depends(get_session_registry)],
    repository: Annotated[ScheduleRepository, Depends(ScheduleRepository)]
) -> ScheduleEngine:
    return await registry.get_engine(user_id, repository)
