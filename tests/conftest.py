from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from portal.auth.session_store import SessionStore
from portal.services.database import create_db_engine
from portal.services.user_directory import UserDirectory
from portal.utils.config import AdminSeedSettings, DatabaseSettings, Settings


ADMIN_USERNAME = "root"
ADMIN_PASSWORD = "secret"
ADMIN_EMAIL = "root@x.com"


@pytest.fixture
def database_url(tmp_path: Path) -> str:
    return f"sqlite:///{tmp_path / 'users.db'}"


@pytest.fixture
def settings(database_url: str) -> Settings:
    return Settings(
        database=DatabaseSettings(url=database_url),
        admin=AdminSeedSettings(
            username=ADMIN_USERNAME,
            password=ADMIN_PASSWORD,
            email=ADMIN_EMAIL,
        ),
    )


@pytest.fixture
def directory(database_url: str) -> UserDirectory:
    directory = UserDirectory(create_db_engine(database_url))
    directory.init_schema()
    return directory


@pytest.fixture
def session_store() -> SessionStore:
    return SessionStore()


@pytest.fixture
def client(settings: Settings, session_store: SessionStore):
    from portal_web.main import create_app

    app = create_app(settings, session_store=session_store)
    # context manager runs the startup event (schema + seed admin)
    with TestClient(app) as test_client:
        yield test_client
