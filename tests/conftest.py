import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from todo_app.database import Base, get_db
from todo_app.dependencies import get_mailer
from todo_app.errors import MailDeliveryError
from todo_app.main import create_app
from todo_app.models import todo, user  # noqa: F401
from todo_app.services.mailer import Mailer

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


class RecordingMailer(Mailer):
    def __init__(self):
        self.sent = []
        self.fail = False

    async def send_otp(self, to_email, name, code):
        if self.fail:
            raise MailDeliveryError()
        self.sent.append({"to": to_email, "name": name, "code": code})

    def last_code(self, email):
        codes = [m["code"] for m in self.sent if m["to"] == email]
        return codes[-1] if codes else None


@pytest.fixture
async def session_factory():
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    await engine.dispose()


@pytest.fixture
def mailer():
    return RecordingMailer()


@pytest.fixture
def app(session_factory, mailer):
    app = create_app()

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_mailer] = lambda: mailer
    return app


@pytest.fixture
async def client(app):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.fixture
def register_user(client, mailer):
    async def _register(name="Alice", email="alice@example.com", password="pw", verify=True):
        res = await client.post("/api/auth/register", json={"name": name, "email": email, "password": password})
        assert res.status_code == 201, res.text
        if verify:
            res = await client.post("/api/auth/verify", json={"email": email, "otp": mailer.last_code(email)})
            assert res.status_code == 200, res.text
        return email

    return _register


@pytest.fixture
def login(client, register_user):
    """Registers, verifies and logs in a user; returns auth headers."""

    async def _login(name="Alice", email="alice@example.com", password="pw"):
        await register_user(name=name, email=email, password=password)
        res = await client.post("/api/auth/login", json={"email": email, "password": password})
        assert res.status_code == 200, res.text
        return {"Authorization": f"Bearer {res.json()['token']}"}

    return _login
