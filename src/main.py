from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from src.adapters.api.controllers.clinics import router as clinics_router
from src.adapters.api.controllers.location import router as location_router
from src.adapters.api.controllers.selection import router as selection_router
from src.adapters.settings import env_bool
from src.domain.exceptions import ClinicRoutingError


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    yield
    session = getattr(app.state, "map_session", None)
    if session is not None:
        session.close()


app = FastAPI(title="Clinic Routing", lifespan=lifespan)
app.include_router(clinics_router)
app.include_router(location_router)
app.include_router(selection_router)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Ensure API errors are JSON so the map client can display them."""

    logging.getLogger("uvicorn.error").exception(
        "Unhandled exception", extra={"path": str(request.url.path)}
    )

    reveal = env_bool("CLINIC_ROUTING_REVEAL_ERRORS")

    if reveal or isinstance(exc, (ClinicRoutingError, RuntimeError, ValueError)):
        detail = str(exc) or exc.__class__.__name__
    else:
        detail = "Internal Server Error"

    return JSONResponse(status_code=500, content={"detail": detail})


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}
