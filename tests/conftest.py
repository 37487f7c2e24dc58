import json
import os
import tempfile
import uuid
from datetime import datetime, timedelta, timezone

import httpx
import pytest
from fastapi.testclient import TestClient

# Set test environment variables BEFORE importing app modules
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="gallery-uploads-")
os.environ["POCKETBASE_URL"] = "http://pocketbase.test"
os.environ["POCKETBASE_COLLECTION"] = "images"
# keep the startup probe from firing during a test
os.environ["READINESS_PROBE_DELAY"] = "3600"
os.environ.pop("POCKETBASE_ADMIN_EMAIL", None)
os.environ.pop("POCKETBASE_ADMIN_PASSWORD", None)

from app.main import app
from app.settings import settings
from app.storage.pocketbase import PocketBaseService
from app.dependencies.dependencies import get_pocketbase_service


class FakePocketBase:
    """In-memory stand-in for the PocketBase records API of one collection."""

    def __init__(self, collection: str = "images"):
        self.collection = collection
        self.records = []
        self.requests = []
        self.fail_create = None
        self.fail_list = None
        self._clock = datetime(2024, 1, 1, tzinfo=timezone.utc)

    @property
    def records_path(self):
        return f"/api/collections/{self.collection}/records"

    def _timestamp(self) -> str:
        self._clock += timedelta(milliseconds=5)
        return self._clock.strftime("%Y-%m-%d %H:%M:%S.") + f"{self._clock.microsecond // 1000:03d}Z"

    def add(self, **data):
        stamp = self._timestamp()
        record = {
            "id": uuid.uuid4().hex[:15],
            "collectionId": "pbc_images",
            "collectionName": self.collection,
            "created": stamp,
            "updated": stamp,
            **data,
        }
        self.records.append(record)
        return record

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.path != self.records_path:
            return httpx.Response(404, json={"code": 404, "message": "The requested resource wasn't found.", "data": {}})

        if request.method == "POST":
            if self.fail_create:
                return httpx.Response(400, json={"code": 400, "message": self.fail_create, "data": {}})
            data = json.loads(request.content)
            missing = [f for f in ("name", "location", "mime_type") if not data.get(f)]
            if missing:
                return httpx.Response(400, json={
                    "code": 400,
                    "message": "Failed to create record.",
                    "data": {f: {"code": "validation_required", "message": "Missing required value."} for f in missing},
                })
            return httpx.Response(200, json=self.add(**data))

        if self.fail_list:
            return httpx.Response(500, json={"code": 500, "message": self.fail_list, "data": {}})
        params = request.url.params
        items = list(self.records)
        sort = params.get("sort", "")
        if sort.lstrip("-") == "created":
            items.sort(key=lambda r: r["created"], reverse=sort.startswith("-"))
        page = int(params.get("page", 1))
        per_page = int(params.get("perPage", 30))
        chunk = items[(page - 1) * per_page: page * per_page]
        return httpx.Response(200, json={
            "page": page,
            "perPage": per_page,
            "totalItems": -1,
            "totalPages": -1,
            "items": chunk,
        })


@pytest.fixture(scope="function")
def fake_pb():
    return FakePocketBase()


@pytest.fixture(scope="function")
def pb_service(fake_pb):
    return PocketBaseService(
        base_url="http://pocketbase.test",
        collection="images",
        transport=httpx.MockTransport(fake_pb.handler),
    )


@pytest.fixture(scope="function")
def upload_dir():
    return settings.upload_dir


@pytest.fixture(scope="function")
def test_client(pb_service):
    # Replace the PocketBase client created by the lifespan with the faked one
    app.dependency_overrides[get_pocketbase_service] = lambda: pb_service
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()
