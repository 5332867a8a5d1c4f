import os

# Los tests nunca usan la base configurada en .env
os.environ["DATABASE_URL"] = ""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from coming_soon.database import Base, DatabaseHandle, get_db_handle
from coming_soon.main import app


@pytest.fixture
def db_handle():
    """Handle sobre una SQLite en memoria compartida entre conexiones."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    handle = DatabaseHandle("sqlite://", engine=engine)
    yield handle
    engine.dispose()


@pytest.fixture
def unconfigured_handle():
    return DatabaseHandle("")


@pytest.fixture
def unreachable_handle(tmp_path):
    # Directorio inexistente: SQLite no puede abrir el archivo
    return DatabaseHandle(f"sqlite:///{tmp_path / 'missing' / 'coming_soon.db'}")


@pytest.fixture
def db(db_handle):
    session = db_handle.session()
    try:
        yield session
    finally:
        session.close()


def _client_for(handle):
    app.dependency_overrides[get_db_handle] = lambda: handle
    return TestClient(app)


@pytest.fixture
def client(db_handle):
    yield _client_for(db_handle)
    app.dependency_overrides.clear()


@pytest.fixture
def demo_client(unconfigured_handle):
    yield _client_for(unconfigured_handle)
    app.dependency_overrides.clear()
