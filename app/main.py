# minddump backend api
# fastapi app with async mongodb, gemini text analysis and fcm reminders

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.config import settings
from app.services.db import db
from app.routers import entries, stats, insights, notifications

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """startup: connect to mongodb. shutdown: close connection."""
    logger.info("Starting MindDump backend...")
    await db.connect()
    logger.info("MindDump backend ready")
    yield
    logger.info("Shutting down MindDump backend...")
    await db.close()


app = FastAPI(
    title="MindDump API",
    description="Backend API for MindDump: journal analysis, weekly insights and inactivity reminders",
    version="0.1.0",
    lifespan=lifespan,
)

# cors, allow frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.FRONTEND_URL, "http://localhost:3000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# register routers
app.include_router(entries.router)
app.include_router(stats.router)
app.include_router(insights.router)
app.include_router(notifications.router)


@app.get("/health")
async def health_check():
    """basic health check endpoint"""
    return {"status": "ok", "service": "minddump-api"}
