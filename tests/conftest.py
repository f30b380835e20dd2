import os
import time

# Configure before the application reads its settings
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SUPABASE_JWT_SECRET"] = "test-jwt-secret-for-clinicdesk-tests"
os.environ["RATE_LIMIT_BACKEND"] = "memory"
os.environ["DB_LOG_SLOW_QUERIES"] = "false"

import pytest
from fastapi.testclient import TestClient
from jose import jwt as jose_jwt
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from clinicdesk.database import Base, get_db
from clinicdesk.main import app
from clinicdesk.models import Profile, Tenant
from clinicdesk.rate_limiter import InMemoryRateLimitStore, RateLimiter

JWT_SECRET = os.environ["SUPABASE_JWT_SECRET"]

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def make_token(auth_user_id: str, expires_in: int = 3600) -> str:
    now = int(time.time())
    return jose_jwt.encode(
        {
            "sub": auth_user_id,
            "aud": "authenticated",
            "role": "authenticated",
            "iat": now,
            "exp": now + expires_in,
        },
        JWT_SECRET,
        algorithm="HS256",
    )


@pytest.fixture()
def db_session():
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def rate_limiter():
    # No random sweeps so counters are deterministic
    return RateLimiter(InMemoryRateLimitStore(cleanup_probability=0.0))


@pytest.fixture()
def client(db_session, rate_limiter):
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    previous_limiter = app.state.rate_limiter
    app.state.rate_limiter = rate_limiter

    yield TestClient(app)

    app.dependency_overrides.clear()
    app.state.rate_limiter = previous_limiter


@pytest.fixture()
def tenant(db_session):
    tenant = Tenant(name="Clínica Saúde", slug="clinica-saude", status="active", plan="trial")
    db_session.add(tenant)
    db_session.commit()
    db_session.refresh(tenant)
    return tenant


@pytest.fixture()
def doctor(db_session, tenant):
    profile = Profile(
        auth_user_id="auth-doctor-1",
        email="doctor@clinica.com.br",
        full_name="Dra. Ana",
        role="doctor",
        tenant_id=tenant.id,
    )
    db_session.add(profile)
    db_session.commit()
    db_session.refresh(profile)
    return profile


@pytest.fixture()
def auth_headers(doctor):
    return {"Authorization": f"Bearer {make_token(doctor.auth_user_id)}"}
