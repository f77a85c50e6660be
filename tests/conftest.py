"""Shared pytest fixtures for all tests."""

import tempfile
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Generator

import pytest

from blobstore.blob_storage import LocalBlobStore
from cli.config import Config
from server.database import init_database
from server.locks import RecordLockRegistry
from server.repositories.user_repository import UserRepository
from server.service_locator import set_blob_store
from server.services.file_service import FileService


@pytest.fixture
def test_db(monkeypatch) -> Generator[Path, None, None]:
    """
    Create a temporary test database for each test.
    """
    with tempfile.TemporaryDirectory() as tmpdir:
        db_path = Path(tmpdir) / "test.db"
        monkeypatch.setattr("server.database.DATABASE_PATH", str(db_path))
        monkeypatch.setattr("server.config.DATABASE_PATH", str(db_path))
        init_database()
        yield db_path


@pytest.fixture
def blob_store(tmp_path) -> Generator[LocalBlobStore, None, None]:
    """
    Blob store rooted in a temp directory, installed as the process default.
    """
    store = LocalBlobStore(tmp_path / "blobs")
    store.ensure_directory()
    set_blob_store(store)
    yield store
    set_blob_store(None)


@pytest.fixture
def make_user(test_db):
    """
    Factory that registers a user directly in the repository.

    Returns the new user_id. Password hashing is skipped; these users
    never log in.
    """
    def _make_user(username: str) -> str:
        user_id = str(uuid.uuid4())
        UserRepository.create_user(
            user_id=user_id,
            username=username,
            password_hash="not-a-real-hash",
            api_key=f"sd_{uuid.uuid4()}",
            created_at=datetime.now(timezone.utc),
        )
        return user_id

    return _make_user


@pytest.fixture
def users(make_user):
    """Three registered users: alice, bob and carol."""
    return {name: make_user(name) for name in ("alice", "bob", "carol")}


@pytest.fixture
def file_service(test_db, blob_store) -> FileService:
    return FileService(blob_store=blob_store, locks=RecordLockRegistry())


@pytest.fixture
def temp_config_dir(tmp_path):
    """
    Create temporary config directory.

    Returns:
        Path to temporary .sharedrive directory
    """
    config_dir = tmp_path / '.sharedrive'
    config_dir.mkdir()
    return config_dir


@pytest.fixture
def temp_config(temp_config_dir):
    """
    Config instance with a temp config file and retries disabled.
    """
    config = Config(temp_config_dir / 'config.json')
    config.data['max_retries'] = 0
    config.data['server_host'] = 'testserver'
    config.data['server_port'] = 8000
    return config


@pytest.fixture
def sample_file(tmp_path):
    """
    Create a sample file for testing file uploads.
    """
    file_path = tmp_path / 'report.pdf'
    file_path.write_bytes(b'%PDF-1.4 abc')
    return file_path
