import os
from pathlib import Path
from typing import Callable, Iterator

import pytest
from testcontainers.postgres import PostgresContainer
from alembic.config import Config
from alembic import command
from fastapi.testclient import TestClient

from tests.app.conftest import session_cookies

# Ensure allowed environment for env_loader
os.environ.setdefault("ENV", "dev")


@pytest.fixture(scope="session")
def db_url() -> Iterator[str]:
    """Start a Postgres container, run migrations, and return the DB URL."""
    with PostgresContainer("postgres:16") as pg:
        raw_url = pg.get_connection_url()
        # Normalize to psycopg3-compatible URL if needed
        url = raw_url.replace("postgresql+psycopg2://", "postgresql://")
        os.environ["DATABASE_URL"] = url

        # Run Alembic migrations against this database
        repo_dir = Path(__file__).resolve().parents[2]
        alembic_cfg = Config(str(repo_dir / "alembic.ini"))
        command.upgrade(alembic_cfg, "head")

        yield url


@pytest.fixture(scope="session")
def e2e_client(db_url: str) -> Callable[..., TestClient]:
    """Build a client against the migrated database, carrying session cookies."""
    from cupi.app.app import app

    def make(**kwargs) -> TestClient:
        return TestClient(app, cookies=session_cookies(**kwargs))

    return make
