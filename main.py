from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
import logging

from app.core.database import Base, async_engine, AsyncSessionLocal, close_redis
from app.core.config import settings
from app.core.logging import configure_logging
from app.modules.users.router import auth_router, router as users_router
from app.modules.users.services import UserService
from app.modules.clients.router import router as clients_router
from app.modules.activities.router import router as activities_router
from app.modules.dashboard.router import router as dashboard_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup and shutdown events"""
    # Startup
    configure_logging(settings.LOG_LEVEL)

    async with async_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    if settings.SEED_DEFAULT_USERS:
        async with AsyncSessionLocal() as session:
            await UserService.seed_default_users(session)

    logger.info("%s %s started (%s)", settings.APP_NAME, settings.APP_VERSION, settings.ENVIRONMENT)

    yield

    # Shutdown
    await close_redis()
    await async_engine.dispose()


app = FastAPI(
    title="LoanBuddy API",
    description="Loan tracking dashboard for borrowers, payments and staff accounts",
    version=settings.APP_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)

# CORS Configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=settings.CORS_ALLOW_CREDENTIALS,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(auth_router)
app.include_router(users_router)
app.include_router(clients_router)
app.include_router(activities_router)
app.include_router(dashboard_router)


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {
        "status": "ok",
        "version": settings.APP_VERSION,
        "environment": settings.ENVIRONMENT
    }


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "message": "Welcome to LoanBuddy API",
        "version": settings.APP_VERSION,
        "docs": "/docs"
    }
