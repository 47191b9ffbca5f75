from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
import logging

from birthlottery.core.config import settings
from birthlottery.core.errors import BirthLotteryError
from birthlottery.core.scheduler import start_scheduler, stop_scheduler, get_scheduler_status
from birthlottery.core.rate_limit import setup_rate_limiting
from birthlottery.ingestion.init_db import init_db
from birthlottery.api import countries, draws

# ─── Logging ───
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(name)-20s | %(levelname)-7s | %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("birthlottery.main")


# ─── Lifecycle ───

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup / shutdown lifecycle."""
    logger.info("Birth Lottery API starting up…")
    init_db()
    if settings.scheduler_enabled:
        start_scheduler()
    yield
    logger.info("Birth Lottery API shutting down…")
    stop_scheduler()


app = FastAPI(
    title="Birth Lottery API",
    description="Draw the country you are born in, weighted by real-world births",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(BirthLotteryError)
async def lottery_error_handler(request: Request, exc: BirthLotteryError):
    logger.warning(f"{request.url.path} failed: {type(exc).__name__}: {exc}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "error": str(exc)},
    )


# Register routers
app.include_router(countries.router)
app.include_router(draws.router)

# Rate limiting
setup_rate_limiting(app)


@app.get("/")
def root():
    return {
        "name": "Birth Lottery API",
        "version": "1.0.0",
        "description": "Draw the country you are born in, weighted by real-world births",
        "endpoints": {
            "countries": "/api/countries",
            "draw": "/api/draw",
            "ten_draw": "/api/draw/ten",
            "docs": "/docs",
        },
    }


@app.get("/health")
def health():
    return {"status": "healthy", "scheduler": get_scheduler_status()}
