import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

# Import all models to ensure they're registered with SQLAlchemy Base
from . import (
    config,
    models,  # noqa: F401
    models_reminder,  # noqa: F401
)
from .database import Base, engine
from .domain.reminders import router as reminders_router
from .domain.reminders.jobs import CHECK_PENDING_JOB, register_reminder_jobs
from .scheduler import SchedulerService

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Reduce verbosity of third-party libraries
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)
logging.getLogger("apscheduler").setLevel(logging.WARNING)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Application starting up...")
    try:
        Base.metadata.create_all(bind=engine, checkfirst=True)
        logger.info("Database tables created successfully")
    except Exception as e:
        # Ignore "already exists" errors from race conditions between workers
        error_msg = str(e)
        if "already exists" in error_msg or "duplicate key" in error_msg:
            logger.info("Database tables already exist (created by another worker)")
        else:
            logger.error(f"Failed to create database tables: {e}")

    scheduler = None
    if config.SCHEDULER_ENABLED:
        scheduler = SchedulerService()
        register_reminder_jobs(scheduler)
        scheduler.start()
        # Check right away instead of waiting for the first hourly tick
        scheduler.run_soon(CHECK_PENDING_JOB)
    else:
        logger.info("Scheduler disabled (SCHEDULER_ENABLED=false)")
    app.state.scheduler = scheduler

    yield

    logger.info("Application shutting down...")
    if scheduler:
        scheduler.stop_all_jobs()


app = FastAPI(title="APL Backoffice API", version="1.0.0", lifespan=lifespan)

# CORS Configuration
ALLOWED_ORIGINS = os.getenv(
    "ALLOWED_ORIGINS",
    "http://localhost:5173,http://localhost:3000",
).split(",")

logger.info(f"CORS allowed origins: {ALLOWED_ORIGINS}")

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
    allow_headers=["*"],
)

# Routes
app.include_router(reminders_router)


@app.get("/")
def root():
    return {"message": "APL Backoffice API is running"}


@app.get("/health")
def health():
    scheduler = getattr(app.state, "scheduler", None)
    return {
        "status": "healthy",
        "scheduler": {
            "running": bool(scheduler and scheduler.running),
            "jobs": scheduler.job_names if scheduler else [],
        },
    }
