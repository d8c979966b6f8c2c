import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from trade_journal.api import dashboard as dashboard_router
from trade_journal.api import health as health_router
from trade_journal.api import trader_score as trader_score_router
from trade_journal.api import trades as trades_router
from trade_journal.config import get_settings
from trade_journal.db.database import Base, get_engine
from trade_journal.errors import CalculationError
from trade_journal.services.analytics.trader_score import validate_score_config

settings = get_settings()

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Trade Journal API")

# CORS - keep permissive for local dev, lock down in production
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health_router.router)
app.include_router(trades_router.router)
app.include_router(dashboard_router.router)
app.include_router(trader_score_router.router)


@app.exception_handler(CalculationError)
async def calculation_error_handler(request: Request, exc: CalculationError):
    """
    Calculator failures carry a code and the offending field / trade id.
    Config-integrity errors surface as 500, input problems as 400.
    """
    logger.warning("%s %s failed: %s %s", request.method, request.url.path, exc.code, exc.details)
    return JSONResponse(status_code=exc.status_code, content={"error": exc.to_dict()})


@app.on_event("startup")
async def on_startup():
    # Weights must sum to 100 and level bands must tile 0..100.
    validate_score_config()
    logger.info("Score configuration validated.")

    if settings.create_tables_on_startup:
        # Development convenience. Use Alembic migrations otherwise.
        async with get_engine().begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database tables ensured (create_all).")


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("trade_journal.main:app", host="0.0.0.0", port=8000)
