import asyncio
import os

os.environ.setdefault("DB_URL", "sqlite+aiosqlite:///./farm_lending_test.db")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import NullPool

from components.core.database import DatabaseManager
from components.core.init_db import get_db
from components.core.security import create_access_token
from components.loan.models import LoanStatus
from components.loan.repository import LoanRepository
from components.loan.schemas import LoanCreate
from components.loan.service import LoanService
from components.user.models import UserType
from components.user.repository import UserRepository
from components.user.schemas import UserCreate
from restapi.router import create_app

LOAN_DEFAULTS = dict(
    amount=50000,
    purpose="Seeds and fertilizer",
    duration=6,
    interest_rate=12,
    crop_type="Wheat",
    acreage=10,
    season="Rabi",
    expected_yield=20,
    expected_market_price=2200,
    production_cost=300000,
)


def sqlite_url(tmp_path, name: str = "ledger.db") -> str:
    return f"sqlite+aiosqlite:///{tmp_path / name}"


@pytest.fixture
async def db_manager(tmp_path):
    manager = DatabaseManager(create_async_engine(sqlite_url(tmp_path)))
    await manager.create_all()
    yield manager
    await manager.dispose()


@pytest.fixture
async def session(db_manager):
    async with db_manager.get_db() as session:
        yield session


@pytest.fixture
def user_factory(session):
    counter = {"n": 0}

    async def create(user_type: UserType = UserType.INVESTOR, name: str = None):
        counter["n"] += 1
        n = counter["n"]
        return await UserRepository(session).create(UserCreate(
            name=name or f"{user_type.value.title()} {n}",
            email=f"{user_type.value}{n}@agrofund.in",
            password="secret123",
            user_type=user_type,
        ))
    return create


@pytest.fixture
async def farmer(user_factory):
    return await user_factory(UserType.FARMER, name="Ravi Kumar")


@pytest.fixture
async def investor_user(user_factory):
    return await user_factory(UserType.INVESTOR, name="Asha Mehta")


@pytest.fixture
def loan_factory(session, farmer):
    async def create(approve: bool = True, owner=None, **overrides):
        data = dict(LOAN_DEFAULTS)
        data.update(overrides)
        loan = await LoanRepository(session).create((owner or farmer).id, LoanCreate(**data))
        if approve:
            loan = await LoanService(session).review_loan(loan.id, LoanStatus.APPROVED)
        return loan
    return create


class ApiClient(TestClient):
    """Test client that knows how to act as a registered user."""

    def register(self, user_type: str, name: str, email: str) -> dict:
        response = self.post("/auth/register", json={
            "name": name,
            "email": email,
            "password": "secret123",
            "user_type": user_type,
        })
        assert response.status_code == 201, response.text
        return response.json()["data"]

    @staticmethod
    def auth(user: dict) -> dict:
        return {"Authorization": f"Bearer {user['access_token']}"}


@pytest.fixture
def api(tmp_path):
    # NullPool: every request runs on its own event loop, so connections
    # must not be reused between requests.
    manager = DatabaseManager(create_async_engine(sqlite_url(tmp_path, "api.db"), poolclass=NullPool))

    async def setup() -> int:
        await manager.create_all()
        async with manager.get_db() as session:
            admin = await UserRepository(session).create(UserCreate(
                name="Platform Admin",
                email="admin@agrofund.in",
                password="secret123",
                user_type=UserType.ADMIN,
            ))
        return admin.id

    admin_id = asyncio.run(setup())

    async def override_get_db():
        async with manager.get_db() as session:
            yield session

    app = create_app()
    app.dependency_overrides[get_db] = override_get_db
    client = ApiClient(app)
    client.admin_headers = {"Authorization": f"Bearer {create_access_token({'sub': str(admin_id)})}"}
    yield client
