"""Test configuration."""
import os
from collections.abc import AsyncIterator, Callable, Iterator
from datetime import UTC, datetime
from pathlib import Path
from uuid import uuid4

from alembic import command
from alembic.config import Config
import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

# --- Default environment
os.environ.setdefault("DATABASE_URL", "sqlite:///./ops_console_test.db")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("OPS_ENV", "test")
os.environ.setdefault("PROMETHEUS_ENABLED", "false")

from app.main import app  # noqa: E402
from app.config import get_settings  # noqa: E402
from app.db import get_db  # noqa: E402
from app.models import AdminRole, ApiKey, User  # noqa: E402
from app.utils.apikey import hash_key, sign_session  # noqa: E402

DB_PATH = Path("./ops_console_test.db")
# Wednesday; the next week starts on Sunday 2026-03-22.
FIXED_NOW = datetime(2026, 3, 18, 15, 0, tzinfo=UTC)


def _run_migrations() -> None:
    cfg = Config(str(Path(__file__).resolve().parents[1] / "alembic.ini"))
    cfg.set_main_option("sqlalchemy.url", os.environ["DATABASE_URL"])
    command.upgrade(cfg, "head")


# --- (1) Fresh database file per session
if DB_PATH.exists():
    DB_PATH.unlink()

engine = create_engine(
    os.environ["DATABASE_URL"],
    connect_args={"check_same_thread": False},
    future=True,
)
TestingSessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False,
                                   future=True, expire_on_commit=False)

# --- (2) Schema comes from Alembic only
_run_migrations()


@pytest.fixture
def db_session() -> Iterator[Session]:
    connection = engine.connect()
    transaction = connection.begin()
    session = TestingSessionLocal(bind=connection)
    try:
        yield session
    finally:
        session.close()
        transaction.rollback()
        connection.close()


@pytest.fixture(autouse=True)
def override_db_dependency(db_session: Session) -> Iterator[None]:
    def _get_db() -> Iterator[Session]:
        yield db_session
    app.dependency_overrides[get_db] = _get_db
    yield
    app.dependency_overrides.pop(get_db, None)


@pytest.fixture
async def client() -> AsyncIterator[AsyncClient]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as async_client:
        yield async_client


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def fixed_now() -> datetime:
    return FIXED_NOW


@pytest.fixture
def make_staff(db_session: Session) -> Callable[..., User]:
    """Factory creating a back-office user."""

    def _factory(
        role: AdminRole | str | None = AdminRole.admin,
        *,
        is_admin: bool = True,
        is_active: bool = True,
    ) -> User:
        tag = uuid4().hex[:8]
        user = User(
            username=f"staff-{tag}",
            email=f"staff-{tag}@example.com",
            is_admin=is_admin,
            is_active=is_active,
            role=role.value if isinstance(role, AdminRole) else role,
        )
        db_session.add(user)
        db_session.commit()
        return user

    return _factory


@pytest.fixture
def make_api_key(db_session: Session) -> Callable[..., str]:
    """Factory issuing an API key for ``user`` and returning the raw token."""

    def _factory(user: User, *, is_active: bool = True, expires_at: datetime | None = None) -> str:
        token = f"ops_test.{uuid4().hex}"
        api_key = ApiKey(
            name=f"key-{uuid4().hex}",
            prefix="ops_test",
            key_hash=hash_key(token),
            user_id=user.id,
            is_active=is_active,
            expires_at=expires_at,
        )
        db_session.add(api_key)
        db_session.commit()
        return token

    return _factory


@pytest.fixture
def headers_for(make_staff, make_api_key) -> Callable[..., dict[str, str]]:
    """Bearer headers for a fresh staff member with ``role``."""

    def _factory(role: AdminRole | str | None = AdminRole.admin, **kwargs) -> dict[str, str]:
        user = make_staff(role, **kwargs)
        return {"Authorization": f"Bearer {make_api_key(user)}"}

    return _factory


@pytest.fixture
def admin_headers(headers_for) -> dict[str, str]:
    return headers_for(AdminRole.admin)


@pytest.fixture
def support_headers(headers_for) -> dict[str, str]:
    return headers_for(AdminRole.support)


@pytest.fixture
def session_cookie_for(make_staff) -> Callable[..., dict[str, str]]:
    """Cookie jar content authenticating a fresh staff member via the session transport."""

    def _factory(role: AdminRole = AdminRole.admin) -> dict[str, str]:
        user = make_staff(role)
        return {get_settings().SESSION_COOKIE_NAME: sign_session(user.id)}

    return _factory
