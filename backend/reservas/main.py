import logging
import sys
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import settings
from .routers import reservations
from .services.restaurants import get_registry

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Invalid restaurant config must stop the process before it serves
    registry = get_registry()
    logger.info(f"Reservation API ready: {len(registry)} restaurants, default={registry.default_slug}")
    yield


app = FastAPI(title="Reservations API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(reservations.router)


@app.exception_handler(RequestValidationError)
async def invalid_request(request: Request, exc: RequestValidationError):
    # Unparseable JSON bodies; fields are validated in the handlers
    return JSONResponse(status_code=400, content={"ok": False, "error": "Missing or invalid reservation fields"})


@app.exception_handler(Exception)
async def unhandled_error(request: Request, exc: Exception):
    logger.exception(f"Request failed: {request.method} {request.url.path}")
    return JSONResponse(status_code=500, content={"ok": False, "error": "Internal server error"})
