from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from src.adapters.api.controllers.notifications import router as notifications_router
from src.adapters.api.controllers.session import router as session_router
from src.adapters.api.controllers.vehicles import router as vehicles_router
from src.adapters.config import env_bool
from src.domain.exceptions import BusNotifyError

app = FastAPI(title="BusNotify")
app.include_router(session_router)
app.include_router(vehicles_router)
app.include_router(notifications_router)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Ensure API errors are JSON so the map view can display them."""

    logging.getLogger("uvicorn.error").exception(
        "Unhandled exception", extra={"path": str(request.url.path)}
    )

    if env_bool("BUSNOTIFY_REVEAL_ERRORS") or isinstance(
        exc, (BusNotifyError, FileNotFoundError, RuntimeError)
    ):
        detail = str(exc) or exc.__class__.__name__
    else:
        detail = "Internal Server Error"

    return JSONResponse(status_code=500, content={"detail": detail})


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}
