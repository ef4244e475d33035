"""Shared test fixtures and configuration for backend tests.

Tests run against a throwaway SQLite file (aiosqlite) and a temp blob
directory. Each test gets fresh ones.
"""
import os
import tempfile

# Must be set before app modules build the process-wide blob store
os.environ.setdefault("FILE_STORAGE_PATH", tempfile.mkdtemp(prefix="file-store-tests-"))

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.pool import NullPool

from app.database import build_engine, get_db
from app.dependencies import get_blob_store
from app.models import Base
from app.services.file_catalog import FileCatalog
from app.services.file_metadata import FileMetadataStore
from app.services.file_storage import FileStorageService
from app.services.upload_reconciler import UploadReconciler


@pytest.fixture
def db_url(tmp_path):
    path = tmp_path / "files.db"
    sync_engine = create_engine(f"sqlite:///{path}")
    Base.metadata.create_all(sync_engine)
    sync_engine.dispose()
    return f"sqlite+aiosqlite:///{path}"


@pytest.fixture
def session_factory(db_url):
    # NullPool: TestClient may run each request on its own event loop
    engine = build_engine(db_url, poolclass=NullPool)
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def blob_store(tmp_path) -> FileStorageService:
    return FileStorageService(base_path=tmp_path / "blobs")


@pytest.fixture
def metadata_store(db) -> FileMetadataStore:
    return FileMetadataStore(db)


@pytest.fixture
def reconciler(blob_store, metadata_store) -> UploadReconciler:
    return UploadReconciler(blob_store, metadata_store)


@pytest.fixture
def catalog(blob_store, metadata_store) -> FileCatalog:
    return FileCatalog(blob_store, metadata_store)


@pytest.fixture
def api_client(session_factory, blob_store):
    """TestClient for the main app, wired to the test database and blob dir.

    Used without a ``with`` block so the lifespan (which talks to the
    configured PostgreSQL) does not run.
    """
    from app.main import app

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_blob_store] = lambda: blob_store
    yield TestClient(app)
    app.dependency_overrides.clear()
