from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from contextlib import asynccontextmanager
from dotenv import load_dotenv
import logging

from app.core.config import settings
from app.core.logging_config import configure_logging
from app.api.v1.api import api_router
from app.core.database import engine, Base, SessionLocal
from app import models  # noqa: F401  (registers tables on Base.metadata)
from app.services.category_service import CategoryService

load_dotenv()
configure_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)


def seed_on_startup():
    """Create missing tables and predefined categories; safe on every boot"""
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        added = CategoryService.seed_predefined_categories(db)
        logger.info(f"🪴 Predefined categories ready (+{added})")
    except Exception as e:
        # A failed seed must not keep the API down
        logger.error(f"⚠️ Seeding error: {e}")
    finally:
        db.close()


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.SEED_ON_STARTUP:
        seed_on_startup()
    logger.info(f"Budget alerts use the {settings.ALERT_STORE_BACKEND} store")
    yield


api_description = """
## Expense Tracker API

Transactions, categories and monthly category budgets with threshold alerts.

- **Budgets** report spending, remaining amount, percentage used and a health tier (green / yellow / red)
- **Alerts** fire at 90% and 100% of a budget after every expense change and stay pending until dismissed
"""

app = FastAPI(
    title="Expense Tracker API",
    description=api_description,
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(GZipMiddleware, minimum_size=500)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router, prefix="/api/v1")


@app.get("/")
async def root():
    return {"message": "Expense Tracker API is running"}


@app.get("/health")
async def health_check():
    return {"status": "healthy", "alert_store": settings.ALERT_STORE_BACKEND}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
