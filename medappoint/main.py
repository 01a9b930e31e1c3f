import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from .config import settings
from .database import engine
from .models import Base
from .schemas.appointments import ErrorResponse
from .routers import appointments, catalog, slots
from .services.scheduling import Reason, SchedulingError

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# Reason → HTTP status; the only place where reasons become transport codes
STATUS_BY_REASON: dict[Reason, int] = {
    Reason.INVALID_TIME_OF_DAY: 400,
    Reason.INVALID_WINDOW: 400,
    Reason.INVALID_DURATION: 400,
    Reason.INVALID_SERVICE_DURATION: 400,
    Reason.MISSING_TIMEZONE: 400,
    Reason.AMBIGUOUS_TIMESTAMP: 400,
    Reason.PAST_BOOKING: 400,
    Reason.OUTSIDE_AVAILABILITY: 400,
    Reason.INVALID_REQUEST: 400,
    Reason.UNAUTHENTICATED: 401,
    Reason.FORBIDDEN: 403,
    Reason.NOT_FOUND: 404,
    Reason.BOOKING_CONFLICT: 409,
    Reason.NOT_CANCELLABLE: 409,
}

# Corrupt availability data, worth an operator's attention
DATA_INTEGRITY_REASONS = frozenset({Reason.INVALID_TIME_OF_DAY, Reason.INVALID_WINDOW})


@asynccontextmanager
async def lifespan(app: FastAPI):
    Base.metadata.create_all(bind=engine)
    logger.info("medappoint started")
    yield


app = FastAPI(title="Medappoint API", lifespan=lifespan)


@app.exception_handler(SchedulingError)
async def scheduling_error_handler(request: Request, exc: SchedulingError):
    status_code = STATUS_BY_REASON.get(exc.reason, 400)
    if exc.reason in DATA_INTEGRITY_REASONS:
        logger.error(f"Invalid availability data on {request.url.path}: {exc.detail}")
    else:
        logger.warning(
            f"{request.method} {request.url.path} rejected: "
            f"{exc.reason.value} ({exc.detail})"
        )
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=exc.reason.value, detail=exc.detail).model_dump(),
    )


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    """Malformed path, query or body values: 400 in the usual error shape."""
    detail = "; ".join(
        f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}"
        for err in exc.errors()
    )
    logger.warning(f"{request.method} {request.url.path} rejected: {detail}")
    return JSONResponse(
        status_code=STATUS_BY_REASON[Reason.INVALID_REQUEST],
        content=ErrorResponse(error=Reason.INVALID_REQUEST.value, detail=detail).model_dump(),
    )


app.include_router(catalog.router)
app.include_router(slots.router)
app.include_router(appointments.router)


@app.get("/health")
def health():
    return {"status": "ok"}
