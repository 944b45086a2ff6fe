import logging

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from resort.core.config import settings
from resort.core.errors import ReservationError
from resort.core.logging import setup_logging
from resort.core.rate_limiter import limiter
from resort.middleware.request_logger import RequestLoggerMiddleware

from resort.api import admin, auth, bookings, rooms


# -------------------------------------------------
# Logging
# -------------------------------------------------

setup_logging()
logger = logging.getLogger(__name__)

logger.info("Starting application")


# -------------------------------------------------
# FastAPI
# -------------------------------------------------

app = FastAPI(
    title=f"{settings.project_name} API",
    description="Room catalog, reservations and owner portal",
    version="1.0.0",
)

# -------------------------------------------------
# Rate Limiting (slowapi)
# -------------------------------------------------
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.add_middleware(SlowAPIMiddleware)
app.add_middleware(RequestLoggerMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.frontend_url],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# -------------------------------------------------
# Error handling
# -------------------------------------------------


@app.exception_handler(ReservationError)
async def reservation_error_handler(request: Request, exc: ReservationError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = [
        {
            "field": ".".join(str(part) for part in err["loc"] if part != "body"),
            "message": err["msg"],
        }
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=400,
        content=jsonable_encoder(
            {
                "success": False,
                "error": "validation",
                "message": "Validation failed",
                "errors": errors,
            }
        ),
    )


app.include_router(rooms.router)
app.include_router(bookings.router)
app.include_router(auth.router)
app.include_router(admin.router)


@app.get("/api/health")
async def health():
    return {"status": "OK", "message": f"{settings.project_name} API is running"}


# -------------------------------------------------
# Lifecycle
# -------------------------------------------------


@app.on_event("startup")
async def on_startup():
    logger.info("FastAPI startup")

    from resort.database import init_db

    await init_db()

    from resort.services.scheduler_service import scheduler_service

    scheduler_service.start()


@app.on_event("shutdown")
async def on_shutdown():
    logger.info("FastAPI shutdown")

    from resort.services.scheduler_service import scheduler_service

    scheduler_service.shutdown()

    from resort.database import engine

    await engine.dispose()
