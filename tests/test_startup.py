import logging

import pytest

from app.main import probe_metadata_store
from app.scripts import setup_pocketbase
from app.settings import settings
from app.storage.local import LocalStorageService
from app.storage.pocketbase import PocketBaseError


# ------------------------------
# readiness probe
# ------------------------------

@pytest.mark.asyncio
async def test_probe_logs_ready(mocker, caplog):
    mock_db = mocker.AsyncMock()
    mock_db.collection = "images"
    with caplog.at_level(logging.INFO, logger="image-gallery"):
        await probe_metadata_store(mock_db, delay=0)
    mock_db.check_ready.assert_awaited_once()
    assert "collection is ready" in caplog.text


@pytest.mark.asyncio
async def test_probe_failure_only_warns(mocker, caplog):
    mock_db = mocker.AsyncMock()
    mock_db.collection = "images"
    mock_db.check_ready.side_effect = PocketBaseError("Missing collection context.", status=404)
    with caplog.at_level(logging.WARNING, logger="image-gallery"):
        await probe_metadata_store(mock_db, delay=0)
    assert mock_db.check_ready.await_count == 1
    assert "not ready yet" in caplog.text
    assert "Missing collection context." in caplog.text


def test_upload_dir_created_idempotently(tmp_path):
    target = tmp_path / "nested" / "uploads"
    LocalStorageService(target)
    storage = LocalStorageService(target)
    storage.ensure_directory()
    assert target.is_dir()


# ------------------------------
# setup_pocketbase
# ------------------------------

@pytest.mark.asyncio
async def test_setup_collection_already_present(mocker):
    mock_db = mocker.AsyncMock()
    assert await setup_pocketbase.setup_collection(mock_db, startup_wait=0) is True
    mock_db.ensure_collection.assert_not_called()


@pytest.mark.asyncio
async def test_setup_collection_without_credentials(mocker):
    mocker.patch.object(settings, "pocketbase_admin_email", None)
    mocker.patch.object(settings, "pocketbase_admin_password", None)
    mock_db = mocker.AsyncMock()
    mock_db.check_ready.side_effect = PocketBaseError("Missing collection context.", status=404)

    assert await setup_pocketbase.setup_collection(mock_db, startup_wait=0) is False
    mock_db.ensure_collection.assert_not_called()


@pytest.mark.asyncio
async def test_setup_collection_creates_with_credentials(mocker):
    mocker.patch.object(settings, "pocketbase_admin_email", "admin@example.com")
    mocker.patch.object(settings, "pocketbase_admin_password", "secret")
    mock_db = mocker.AsyncMock()
    mock_db.check_ready.side_effect = PocketBaseError("Missing collection context.", status=404)

    assert await setup_pocketbase.setup_collection(mock_db, startup_wait=0) is True
    mock_db.ensure_collection.assert_awaited_once_with("admin@example.com", "secret")


@pytest.mark.asyncio
async def test_setup_collection_store_down(mocker):
    mock_db = mocker.AsyncMock()
    mock_db.check_ready.side_effect = PocketBaseError("PocketBase request failed: connection refused")
    with pytest.raises(PocketBaseError):
        await setup_pocketbase.setup_collection(mock_db, startup_wait=0)
