import os

os.environ.setdefault("ALERT_STORE_BACKEND", "memory")
os.environ.setdefault("SEED_ON_STARTUP", "false")

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app import models  # noqa: F401
from app.core.database import Base, build_engine, get_db
from app.core.security import create_access_token
from app.models.category import Category, CategoryTypeEnum
from app.models.user import User
from app.services.alert_store import InMemoryAlertStore, get_alert_store
from app.services.category_service import CategoryService
from main import app


@pytest.fixture
def engine():
    engine = build_engine("sqlite://", poolclass=StaticPool)
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db_session(engine):
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSession()
    CategoryService.seed_predefined_categories(session)
    yield session
    session.close()


@pytest.fixture
def alert_store():
    return InMemoryAlertStore()


@pytest.fixture
def user(db_session):
    user = User(email="alice@example.com", password_hash="hash", name="Alice", is_active=True)
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture
def other_user(db_session):
    user = User(email="bob@example.com", password_hash="hash", name="Bob", is_active=True)
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture
def auth_headers(user):
    token = create_access_token({"sub": user.email})
    return {"Authorization": f"Bearer {token}"}


def predefined(db, name, category_type=CategoryTypeEnum.EXPENSE):
    return db.query(Category).filter(
        Category.name == name,
        Category.type == category_type,
        Category.is_predefined == True
    ).one()


@pytest.fixture
def food(db_session):
    return predefined(db_session, "Food")


@pytest.fixture
def rent(db_session):
    return predefined(db_session, "Rent")


@pytest.fixture
def salary(db_session):
    return predefined(db_session, "Salary", CategoryTypeEnum.INCOME)


@pytest_asyncio.fixture
async def client(db_session, alert_store):
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_alert_store] = lambda: alert_store
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
