'''
API endpoints for managing Labels and their note tabs.
'''
from contextlib import contextmanager
from typing import Annotated, Any, List
from fastapi import APIRouter, Depends, HTTPException, status

from ..models import labels as label_models
from ..services.schedule_engine import ScheduleEngine
from ..common.exceptions import LabelNotFoundError
from .dependencies import get_schedule_engine


class LabelsAPI:
    """
    A class to encapsulate CRUD endpoints for Labels.
    Changes are pending until POST /schedule/commit.
    """
    def __init__(self):
        self.router = APIRouter(
            prefix="/labels",
            tags=["Labels"]
        )
        self._register_routes()

    def _register_routes(self):
        """Registers all the API routes for this class."""
        self.router.add_api_route(
                "/",
                self.list_labels,
                methods=["GET"],
                response_model=List[label_models.Label])

        self.router.add_api_route(
                "/",
                self.create_label,
                methods=["POST"],
                status_code=status.HTTP_201_CREATED,
                response_model=label_models.Label)

        self.router.add_api_route(
                "/{label_id}",
                self.update_label,
                methods=["PATCH"],
                response_model=label_models.Label)

        self.router.add_api_route(
                "/{label_id}",
                self.delete_label,
                methods=["DELETE"],
                status_code=status.HTTP_204_NO_CONTENT)

        self.router.add_api_route(
                "/{label_id}/tabs",
                self.add_tab,
                methods=["POST"],
                response_model=label_models.Label)

        self.router.add_api_route(
                "/{label_id}/tabs/order",
                self.reorder_tabs,
                methods=["PUT"],
                response_model=label_models.Label)

        self.router.add_api_route(
                "/{label_id}/tabs/{tab_id}",
                self.update_custom_tab,
                methods=["PUT"],
                response_model=label_models.Label)

        self.router.add_api_route(
                "/{label_id}/tabs/{tab_id}/close",
                self.close_tab,
                methods=["POST"],
                response_model=label_models.Label)

        self.router.add_api_route(
                "/{label_id}/tabs/{tab_id}/restore",
                self.restore_tab,
                methods=["POST"],
                response_model=label_models.Label)

        self.router.add_api_route(
                "/{label_id}/tabs/{tab_id}",
                self.delete_tab_forever,
                methods=["DELETE"],
                response_model=label_models.Label)

    async def list_labels(
        self,
        engine: Annotated[ScheduleEngine, Depends(get_schedule_engine)]
    ) -> List[Any]:
        return engine.labels

    async def create_label(
        self,
        label_data: label_models.LabelCreate,
        engine: Annotated[ScheduleEngine, Depends(get_schedule_engine)]
    ) -> Any:
        return engine.create_label(label_data.name, label_data.color)

    async def update_label(
        self,
        label_id: str,
        label_data: label_models.LabelUpdate,
        engine: Annotated[ScheduleEngine, Depends(get_schedule_engine)]
    ) -> Any:
        update = label_data.model_dump(exclude_unset=True)
        if not update:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No fields provided to update.")
        with self._label_lookup():
            return engine.update_label(label_id, **update)

    async def delete_label(
        self,
        label_id: str,
        engine: Annotated[ScheduleEngine, Depends(get_schedule_engine)]
    ) -> None:
        """
        Deletes the label and every block painted with it.
        """
        with self._label_lookup():
            engine.delete_label(label_id)

    async def add_tab(
        self,
        label_id: str,
        engine: Annotated[ScheduleEngine, Depends(get_schedule_engine)]
    ) -> Any:
        with self._label_lookup():
            return engine.add_tab(label_id)

    async def reorder_tabs(
        self,
        label_id: str,
        order: label_models.TabOrderUpdate,
        engine: Annotated[ScheduleEngine, Depends(get_schedule_engine)]
    ) -> Any:
        with self._label_lookup():
            return engine.reorder_tabs(label_id, order.open_tabs)

    async def update_custom_tab(
        self,
        label_id: str,
        tab_id: str,
        tab_data: label_models.TabContentUpdate,
        engine: Annotated[ScheduleEngine, Depends(get_schedule_engine)]
    ) -> Any:
        with self._label_lookup():
            return engine.update_custom_tab(label_id, tab_id, tab_data.content)

    async def close_tab(
        self,
        label_id: str,
        tab_id: str,
        engine: Annotated[ScheduleEngine, Depends(get_schedule_engine)]
    ) -> Any:
        with self._label_lookup():
            return engine.close_tab(label_id, tab_id)

    async def restore_tab(
        self,
        label_id: str,
        tab_id: str,
        engine: Annotated[ScheduleEngine, Depends(get_schedule_engine)]
    ) -> Any:
        with self._label_lookup():
            return engine.restore_tab(label_id, tab_id)

    async def delete_tab_forever(
        self,
        label_id: str,
        tab_id: str,
        engine: Annotated[ScheduleEngine, Depends(get_schedule_engine)]
    ) -> Any:
        with self._label_lookup():
            return engine.delete_tab_forever(label_id, tab_id)

    # --- Helpers ---

    @staticmethod
    @contextmanager
    def _label_lookup():
        """Turns LabelNotFoundError into a 404."""
        try:
            yield
        except LabelNotFoundError:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Label not found.")


# Instantiate the class and export its router
labels_api = LabelsAPI()
router = labels_api.router
