"""FastAPI application - serves the tempo detection API."""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from bpmprobe.api.detect import router as detect_router
from bpmprobe.errors import TempoServiceError

logger = logging.getLogger(__name__)

app = FastAPI(title="bpmprobe", version="0.1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["authorization", "x-client-info", "apikey", "content-type"],
)

app.include_router(detect_router, prefix="/api")


@app.exception_handler(TempoServiceError)
async def service_error_handler(request: Request, exc: TempoServiceError):
    logger.warning("Error detecting BPM: %s", exc.message)
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    message = errors[0]["msg"] if errors else "Invalid request"
    return JSONResponse(status_code=400, content={"error": message})


@app.get("/api/health")
async def health():
    return {"status": "ok"}


def run():
    import uvicorn
    from bpmprobe.config import settings
    uvicorn.run(
        "bpmprobe.main:app",
        host=settings.host,
        port=settings.port,
    )
