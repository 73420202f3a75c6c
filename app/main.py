import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from app.api.router import api_router
from app.core.config import (
    ANALYTICS_SCHEDULER_ENABLED,
    ANALYTICS_SCHEDULER_INTERVAL_MINUTES,
    LOG_LEVEL,
)
from app.core.forecasting.errors import (
    EmptyInputError,
    ForecastError,
    HorizonOutOfRangeError,
    InvalidObservationError,
    UntrainedModelError,
)
from app.services.report_refresh import build_report_scheduler


logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    scheduler = build_report_scheduler(
        ANALYTICS_SCHEDULER_ENABLED, ANALYTICS_SCHEDULER_INTERVAL_MINUTES
    )
    if scheduler is not None:
        scheduler.start()
    app.state.report_scheduler = scheduler
    try:
        yield
    finally:
        if scheduler is not None and scheduler.running:
            scheduler.shutdown(wait=False)
            logger.info("Annual sales report refresh stopped")
        app.state.report_scheduler = None


app = FastAPI(title="RxSupply Analytics", lifespan=lifespan)
app.include_router(api_router, prefix="/api")


_FORECAST_ERROR_STATUS = {
    EmptyInputError: status.HTTP_400_BAD_REQUEST,
    InvalidObservationError: status.HTTP_400_BAD_REQUEST,
    HorizonOutOfRangeError: status.HTTP_400_BAD_REQUEST,
    UntrainedModelError: status.HTTP_409_CONFLICT,
}


@app.exception_handler(ForecastError)
async def _forecast_error_handler(request: Request, exc: ForecastError) -> JSONResponse:
    status_code = _FORECAST_ERROR_STATUS.get(type(exc), status.HTTP_500_INTERNAL_SERVER_ERROR)
    logger.warning("%s on %s %s: %s", type(exc).__name__, request.method, request.url.path, exc)
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "message": str(exc)},
    )


@app.get("/")
def root():
    return {"status": "ok", "message": "RxSupply analytics backend running"}
