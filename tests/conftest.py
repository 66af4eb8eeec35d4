import os
import tempfile

# Settings are read at import time, so the environment goes first.
os.environ.setdefault("SECRET_KEY", "test-secret-key-not-for-production")
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["AUDIT_LOG_DIR"] = tempfile.mkdtemp(prefix="portal-audit-")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine, select

from app.core.bootstrap import seed_defaults
from app.core.security import create_access_token, get_password_hash
from app.db.engine_sync import configure_sqlite, create_sync_db_and_tables, get_sync_session
from app.main import app
from app.models.role import Role
from app.models.user import User
from app.services.auth_service import build_claims
from app.services.customer_service import CustomerService
from app.services.package_service import PackageService

PASSWORD = "Secret123!"


@pytest.fixture(name="engine")
def engine_fixture():
    engine = create_engine(
        "sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool
    )
    configure_sqlite(engine)
    create_sync_db_and_tables(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture(name="session")
def session_fixture(engine):
    with Session(engine) as session:
        seed_defaults(session)
        yield session


@pytest.fixture(name="client")
def client_fixture(session):
    def get_session_override():
        return session

    app.dependency_overrides[get_sync_session] = get_session_override
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()


@pytest.fixture(name="make_user")
def make_user_fixture(session):
    def _make_user(username, role_name=None, full_name=None, password=PASSWORD):
        user = User(
            username=username,
            email=f"{username}@example.com",
            hashed_password=get_password_hash(password),
            full_name=full_name,
        )
        if role_name:
            user.roles = [session.exec(select(Role).where(Role.name == role_name)).one()]
        session.add(user)
        session.commit()
        session.refresh(user)
        return user

    return _make_user


@pytest.fixture(name="auth_headers")
def auth_headers_fixture():
    def _auth_headers(user):
        return {"Authorization": f"Bearer {create_access_token(build_claims(user))}"}

    return _auth_headers


@pytest.fixture(name="admin")
def admin_fixture(session):
    return session.exec(select(User).where(User.username == "admin")).one()


@pytest.fixture(name="cs_user")
def cs_user_fixture(make_user):
    return make_user("cs_agent", "CUSTOMER_SERVICE", full_name="Customer Service Agent")


@pytest.fixture(name="noc_user")
def noc_user_fixture(make_user):
    return make_user("noc_agent", "AGENT_NOC", full_name="NOC Engineer")


@pytest.fixture(name="package")
def package_fixture(session):
    return PackageService(session).create_package(
        {"name": "Premium", "description": "Premium internet package", "price": 49.99}
    )


@pytest.fixture(name="customer")
def customer_fixture(session, package):
    return CustomerService(session).create_customer(
        {"full_name": "John Doe", "email": "john@example.com", "package_id": package.id}
    )
