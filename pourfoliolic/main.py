import logging
from contextlib import asynccontextmanager

import redis.asyncio as redis
import sentry_sdk
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text

from pourfoliolic.config import settings
from pourfoliolic.database import engine

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

# Initialize Sentry
if settings.SENTRY_DSN:
    sentry_sdk.init(
        dsn=settings.SENTRY_DSN,
        environment=settings.ENVIRONMENT,
        traces_sample_rate=0.2 if settings.ENVIRONMENT == "production" else 1.0,
        profiles_sample_rate=0.1,
        send_default_pii=False,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: verify DB connection and connect Redis
    async with engine.begin() as conn:
        await conn.execute(text("SELECT 1"))

    app.state.redis = redis.from_url(settings.REDIS_URL, decode_responses=True)
    try:
        await app.state.redis.ping()
    except redis.RedisError:
        # Rate limiting and the JWKS cache are skipped without Redis
        logger.warning("Redis unreachable at %s, continuing without it", settings.REDIS_URL)
        await app.state.redis.aclose()
        app.state.redis = None

    yield

    # Shutdown
    if app.state.redis is not None:
        await app.state.redis.aclose()
    await engine.dispose()


app = FastAPI(
    title="Pourfoliolic API",
    version="0.1.0",
    lifespan=lifespan,
)

# Middleware
from pourfoliolic.middleware.rate_limit import RateLimitMiddleware  # noqa: E402

app.add_middleware(RateLimitMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

from pourfoliolic.middleware.error_handler import register_error_handlers  # noqa: E402

register_error_handlers(app)

# Routers
from pourfoliolic.routers.auth import router as auth_router  # noqa: E402
from pourfoliolic.routers.chat import router as chat_router  # noqa: E402
from pourfoliolic.routers.circles import router as circles_router  # noqa: E402
from pourfoliolic.routers.community import router as community_router  # noqa: E402
from pourfoliolic.routers.drinks import router as drinks_router  # noqa: E402
from pourfoliolic.routers.notifications import router as notifications_router  # noqa: E402
from pourfoliolic.routers.stats import router as stats_router  # noqa: E402

app.include_router(auth_router)
app.include_router(drinks_router)
app.include_router(stats_router)
app.include_router(community_router)
app.include_router(chat_router)
app.include_router(notifications_router)
app.include_router(circles_router)


@app.get("/health")
async def health():
    return {"status": "ok"}
