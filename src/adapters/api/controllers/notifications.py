from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request

from src.adapters.api.dependencies import (
    get_bus_view_service,
    get_notification_service,
    get_session_context,
    get_view_config,
)
from src.adapters.api.schemas.notifications import (
    NotificationRequestSchema,
    NotificationResponseSchema,
)
from src.adapters.config import ViewConfig
from src.app.services.bus_view_service import BusViewService
from src.app.services.notification_service import NotificationService
from src.app.services.session_service import SessionContext
from src.domain.exceptions import SessionRequired, VehicleNotFound

router = APIRouter(tags=["notifications"])


@router.post("/notifications", response_model=NotificationResponseSchema)
async def register_notification(
    req: NotificationRequestSchema,
    request: Request,
    config: ViewConfig = Depends(get_view_config),
    views: BusViewService = Depends(get_bus_view_service),
    notifications: NotificationService = Depends(get_notification_service),
    sessions: SessionContext = Depends(get_session_context),
) -> NotificationResponseSchema:
    try:
        session = sessions.require(request.cookies.get(config.session_cookie))
    except SessionRequired as exc:
        raise HTTPException(status_code=401, detail=str(exc)) from exc

    try:
        vehicle = views.find_vehicle(req.vehicle_id)
    except VehicleNotFound as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc

    result = await notifications.register(
        session=session, vehicle=vehicle, stop_id=req.stop_id
    )
    return NotificationResponseSchema(
        registered=result.registered, message=result.message
    )
