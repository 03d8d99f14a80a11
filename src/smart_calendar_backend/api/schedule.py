'''
API endpoints for editing the schedule grid.
'''
from typing import Annotated, Any
from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import ValidationError

from ..models import schedule as schedule_models
from ..services.schedule_engine import ScheduleEngine
from ..services.schedule_repository import ScheduleRepository
from ..services.session_registry import ScheduleSessionRegistry
from ..common.exceptions import PersistenceError
from .dependencies import get_schedule_engine, get_session_registry


class ScheduleAPI:
    """
    A class to encapsulate the schedule editing endpoints.
    Every endpoint answers with the full, freshly materialized schedule.
    """
    def __init__(self):
        self.router = APIRouter(
            prefix="/schedule",
            tags=["Schedule"]
        )
        self._register_routes()

    def _register_routes(self):
        """Registers all the API routes for this class."""
        self.router.add_api_route(
                "/",
                self.get_schedule,
                methods=["GET"],
                response_model=schedule_models.ScheduleRead)

        self.router.add_api_route(
                "/paint",
                self.paint_cells,
                methods=["POST"],
                response_model=schedule_models.ScheduleRead)

        self.router.add_api_route(
                "/events",
                self.schedule_event,
                methods=["POST"],
                response_model=schedule_models.ScheduleRead)

        self.router.add_api_route(
                "/clear",
                self.clear_schedule,
                methods=["POST"],
                response_model=schedule_models.ScheduleRead)

        self.router.add_api_route(
                "/notes",
                self.set_note,
                methods=["PUT"],
                response_model=schedule_models.ScheduleRead)

        self.router.add_api_route(
                "/config",
                self.update_config,
                methods=["PUT"],
                response_model=schedule_models.ScheduleRead)

        self.router.add_api_route(
                "/lock",
                self.set_lock,
                methods=["PUT"],
                response_model=schedule_models.ScheduleRead)

        self.router.add_api_route(
                "/commit",
                self.commit,
                methods=["POST"],
                response_model=schedule_models.ScheduleRead)

        self.router.add_api_route(
                "/discard",
                self.discard,
                methods=["POST"],
                response_model=schedule_models.ScheduleRead)

    async def get_schedule(
        self,
        engine: Annotated[ScheduleEngine, Depends(get_schedule_engine)]
    ) -> Any:
        """
        Retrieves the current (possibly unsaved) schedule.
        """
        return engine.read_model()

    async def paint_cells(
        self,
        request: schedule_models.PaintCellsRequest,
        engine: Annotated[ScheduleEngine, Depends(get_schedule_engine)]
    ) -> Any:
        """
        Paints the given cells, or erases them when label_id is null.
        """
        if request.label_id is not None:
            self._require_label(engine, request.label_id)
        engine.paint_cells(request.cells, request.label_id)
        return engine.read_model()

    async def schedule_event(
        self,
        request: schedule_models.ScheduleEventRequest,
        engine: Annotated[ScheduleEngine, Depends(get_schedule_engine)]
    ) -> Any:
        """
        Places a label at an absolute time, with an optional note on its first slot.
        """
        self._require_label(engine, request.label_id)
        engine.paint_range(
            day_index=request.day_index,
            start_minute=request.start_hour * 60 + request.start_minute,
            duration_minutes=request.duration_minutes,
            label_id=request.label_id,
            note=request.note
        )
        return engine.read_model()

    async def clear_schedule(
        self,
        engine: Annotated[ScheduleEngine, Depends(get_schedule_engine)]
    ) -> Any:
        engine.clear_all()
        return engine.read_model()

    async def set_note(
        self,
        request: schedule_models.NoteWrite,
        engine: Annotated[ScheduleEngine, Depends(get_schedule_engine)]
    ) -> Any:
        """
        Sets the note on a cell. Blank content removes it.
        """
        engine.set_note(request.day_index, request.slot_index, request.content)
        return engine.read_model()

    async def update_config(
        self,
        request: schedule_models.GridConfigUpdate,
        engine: Annotated[ScheduleEngine, Depends(get_schedule_engine)]
    ) -> Any:
        """
        Changes the visible window and/or the step. Existing blocks and notes keep their times.
        """
        try:
            engine.update_config(**request.model_dump(exclude_unset=True))
        except ValidationError as e:
            raise HTTPException(
                status_code=422,
                detail=e.errors(include_url=False, include_context=False)
            )
        return engine.read_model()

    async def set_lock(
        self,
        request: schedule_models.LockUpdate,
        engine: Annotated[ScheduleEngine, Depends(get_schedule_engine)]
    ) -> Any:
        engine.set_locked(request.locked)
        return engine.read_model()

    async def commit(
        self,
        engine: Annotated[ScheduleEngine, Depends(get_schedule_engine)],
        repository: Annotated[ScheduleRepository, Depends(ScheduleRepository)],
        registry: Annotated[ScheduleSessionRegistry, Depends(get_session_registry)]
    ) -> Any:
        """
        Saves every pending change in order. On failure the edits stay
        pending so the user can retry or discard.
        """
        try:
            await engine.commit(repository)
        except PersistenceError as e:
            raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))
        registry.release(engine.user_id)
        return engine.read_model()

    async def discard(
        self,
        engine: Annotated[ScheduleEngine, Depends(get_schedule_engine)],
        repository: Annotated[ScheduleRepository, Depends(ScheduleRepository)],
        registry: Annotated[ScheduleSessionRegistry, Depends(get_session_registry)]
    ) -> Any:
        """
        Drops every pending change and reloads the saved schedule.
        If the reload fails the edits are kept.
        """
        try:
            await engine.discard(repository)
        except PersistenceError as e:
            raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))
        registry.release(engine.user_id)
        return engine.read_model()

    # --- Helpers ---

    @staticmethod
    def _require_label(engine: ScheduleEngine, label_id: str):
        if label_id not in {label.id for label in engine.labels}:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Label not found.")


# Instantiate the class and export its router
schedule_api = ScheduleAPI()
router = schedule_api.router
