from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from sales_insights.api.routes import router as api_router
from sales_insights.core.config import get_settings
from sales_insights.core.exceptions import (
    FeedError,
    QueryValidationError,
    SalesInsightsError,
    StoreUnavailableError,
)
from sales_insights.core.logging import get_logger, setup_logging

settings = get_settings()
setup_logging(settings.log_level)
logger = get_logger("sales_insights.main")

app = FastAPI(title="Sales Insights API", version="0.1.0")

LOCALHOST_ORIGINS = [
    "http://localhost:3000",
    "http://localhost:5173",
    "http://127.0.0.1:3000",
    "http://127.0.0.1:5173",
]

CORS_ORIGINS = {
    "development": LOCALHOST_ORIGINS,
    "production": [],
}

origins = CORS_ORIGINS.get(settings.environment, CORS_ORIGINS["development"])

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Each error kind keeps its own status so callers can tell bad input from a
# failing backend.
STATUS_BY_ERROR: list[tuple[type[SalesInsightsError], int]] = [
    (QueryValidationError, 400),
    (StoreUnavailableError, 503),
    (FeedError, 502),
]


@app.exception_handler(SalesInsightsError)
async def handle_sales_insights_error(request: Request, exc: SalesInsightsError) -> JSONResponse:
    status_code = next((code for kind, code in STATUS_BY_ERROR if isinstance(exc, kind)), 500)
    if status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.kind}: {exc.message}")
    else:
        logger.info(f"{request.method} {request.url.path} rejected: {exc.kind}: {exc.message}")
    return JSONResponse(
        status_code=status_code,
        content={"error": exc.kind, "message": exc.message, "details": exc.details},
    )


app.include_router(api_router, prefix="/api")
