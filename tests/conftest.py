# tests/conftest.py
from __future__ import annotations

import os
from collections.abc import Generator, Iterator
from contextlib import nullcontext
from itertools import count

import pytest

os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("AUTO_CREATE_TABLES", "false")
os.environ.setdefault("PASSWORD_BCRYPT_ROUNDS", "4")

from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from pulseboard.api.v1.dependencies import get_session_factory
from pulseboard.core.enums import PostStatus, Role
from pulseboard.core.security import Identity, create_access_token, hash_password
from pulseboard.db.session import Base
from pulseboard.db.session import get_db as app_get_session
from pulseboard.main import app as fastapi_app
from pulseboard.models import Category, Post, User
from pulseboard.services.images import ImageStore

TEST_DB_URL = "sqlite://"
TEST_PASSWORD = "secret-pass"

_EMAIL_COUNTER = count(1)


@pytest.fixture(scope="session")
def engine() -> Generator[Engine, None, None]:
    engine = create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def db_session(engine: Engine) -> Iterator[Session]:
    connection = engine.connect()
    transaction = connection.begin()
    SessionLocal = sessionmaker(
        bind=connection,
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
    )
    session = SessionLocal()
    session.begin_nested()

    @event.listens_for(session, "after_transaction_end")
    def restart_savepoint(sess: Session, trans) -> None:  # pragma: no cover - SQLAlchemy internals
        if trans.nested and not getattr(trans._parent, "nested", False):
            session.begin_nested()

    try:
        yield session
    finally:
        event.remove(session, "after_transaction_end", restart_savepoint)
        session.close()

        if transaction.is_active:
            transaction.rollback()
        connection.close()

        # Ensure each test sees a clean database even if commits occurred.
        with engine.begin() as cleanup_conn:
            for table in reversed(Base.metadata.sorted_tables):
                cleanup_conn.execute(table.delete())


@pytest.fixture(scope="session")
def app() -> FastAPI:
    return fastapi_app


@pytest.fixture(autouse=True)
def override_session_dependency(app: FastAPI, db_session: Session) -> Iterator[None]:
    def _get_session_override() -> Generator[Session, None, None]:
        yield db_session

    def _session_factory_override():
        return lambda: nullcontext(db_session)

    app.dependency_overrides[app_get_session] = _get_session_override
    app.dependency_overrides[get_session_factory] = _session_factory_override
    try:
        yield
    finally:
        app.dependency_overrides.pop(app_get_session, None)
        app.dependency_overrides.pop(get_session_factory, None)


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client


@pytest.fixture()
def image_store(app: FastAPI, mocker) -> Iterator[ImageStore]:
    """Replace the application's image store with a recording mock."""
    original = app.state.images
    store = mocker.MagicMock(spec=ImageStore)
    store.release.return_value = True
    app.state.images = store
    try:
        yield store
    finally:
        app.state.images = original


def make_user(db_session: Session, name: str, role: Role = Role.USER) -> User:
    user = User(
        email=f"user{next(_EMAIL_COUNTER)}@example.com",
        name=name,
        password_hash=hash_password(TEST_PASSWORD),
        role=role,
    )
    db_session.add(user)
    db_session.flush()
    db_session.refresh(user)
    return user


def make_post(
    db_session: Session,
    creator: User,
    *,
    title: str = "Test post",
    status: PostStatus = PostStatus.PUBLIC,
    image_url: str | None = None,
    categories: list[Category] | None = None,
) -> Post:
    post = Post(
        title=title,
        content="Test post content",
        status=status,
        image_url=image_url,
        creator=creator,
        categories=categories or [],
    )
    db_session.add(post)
    db_session.flush()
    db_session.refresh(post)
    return post


def identity_for(user: User) -> Identity:
    return Identity(is_authenticated=True, user_id=user.id, role=user.role)


def auth_headers(user: User) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user.id, user.role)}"}


@pytest.fixture()
def test_user(db_session: Session) -> User:
    """Create and return a persisted test user."""
    return make_user(db_session, "Test User")


@pytest.fixture()
def other_user(db_session: Session) -> User:
    """Create and return a second persisted user."""
    return make_user(db_session, "Other User")


@pytest.fixture()
def admin_user(db_session: Session) -> User:
    return make_user(db_session, "Admin", role=Role.ADMIN)


@pytest.fixture()
def auth_token(test_user: User) -> dict[str, str]:
    """Return authorization headers for the primary test user."""
    return auth_headers(test_user)


@pytest.fixture()
def other_auth_token(other_user: User) -> dict[str, str]:
    """Return authorization headers for the secondary test user."""
    return auth_headers(other_user)


@pytest.fixture()
def admin_auth_token(admin_user: User) -> dict[str, str]:
    return auth_headers(admin_user)


@pytest.fixture()
def test_post(db_session: Session, test_user: User) -> Post:
    """Create a baseline public post owned by the primary test user."""
    return make_post(db_session, test_user)
