#!/usr/bin/env python3
"""
Initialize database with tables, predefined categories and an optional demo user
"""
import argparse
import logging

from app.core.database import Base, engine, SessionLocal
from app.core.logging_config import configure_logging
from app.core.security import create_access_token
from app.models import User
from app.services.category_service import CategoryService

configure_logging("INFO")
logger = logging.getLogger("init_db")


def init_database(demo_email: str = None):
    """Create all tables, seed predefined categories and optionally a demo user"""
    logger.info("Creating database tables...")
    Base.metadata.create_all(bind=engine)

    db = SessionLocal()
    try:
        added = CategoryService.seed_predefined_categories(db)
        logger.info(f"Predefined categories inserted: {added}")

        if not demo_email:
            return

        user = db.query(User).filter(User.email == demo_email).first()
        if user is None:
            # Authentication flows live elsewhere; the demo user only needs a token
            user = User(email=demo_email, password_hash="!", name="Demo", is_active=True)
            db.add(user)
            db.commit()
            db.refresh(user)
            logger.info(f"Created demo user {demo_email}")

        token = create_access_token({"sub": user.email})
        logger.info(f"Bearer token for {demo_email}: {token}")
    finally:
        db.close()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--demo-email", help="Create (or reuse) a demo user and print a token for it")
    args = parser.parse_args()
    init_database(args.demo_email)
