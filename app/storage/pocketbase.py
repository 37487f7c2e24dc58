import httpx
from typing import Optional, Dict, Any, List
from app.settings import settings
import logging

log = logging.getLogger(__name__)

# Schema of the images collection (PocketBase v0.22 collection format)
IMAGES_COLLECTION_SCHEMA = [
    {
        "name": field,
        "type": "text",
        "required": True,
        "presentable": False,
        "unique": False,
        "options": {"min": None, "max": None, "pattern": ""},
    }
    for field in ("name", "location", "mime_type")
]

class PocketBaseError(Exception):
    """Raised when the metadata store rejects a call or cannot be reached."""
    def __init__(self, message: str, status: Optional[int] = None, data: Optional[Dict[str, Any]] = None):
        self.status = status
        self.message = message
        self.data = data or {}
        super().__init__(message)

# -------------------------
# PocketBase Service
# -------------------------
class PocketBaseService:
    def __init__(
        self,
        base_url: Optional[str] = None,
        collection: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = (base_url or settings.pocketbase_url).rstrip("/")
        self.collection = collection or settings.pocketbase_collection
        self.client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=settings.pocketbase_timeout,
            transport=transport,
        )
        log.info("Initialized PocketBase client for %s", self.base_url)

    @property
    def records_path(self) -> str:
        return f"/api/collections/{self.collection}/records"

    # Refer here: https://pocketbase.io/docs/api-records/
    async def _request(self, method: str, path: str, **kwargs) -> Any:
        try:
            resp = await self.client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            raise PocketBaseError(f"PocketBase request failed: {e}") from e

        if resp.status_code >= 400:
            try:
                body = resp.json()
            except ValueError:
                body = {}
            if not isinstance(body, dict):
                body = {}
            message = body.get("message") or f"PocketBase returned HTTP {resp.status_code}"
            raise PocketBaseError(message, status=resp.status_code, data=body.get("data"))
        try:
            body = resp.json()
        except ValueError as e:
            raise PocketBaseError(f"PocketBase returned invalid JSON: {e}", status=resp.status_code) from e
        if not isinstance(body, dict):
            raise PocketBaseError(
                f"PocketBase returned an unexpected {type(body).__name__} body", status=resp.status_code
            )
        return body

    async def create_record(self, data: Dict[str, Any]) -> Dict[str, Any]:
        record = await self._request("POST", self.records_path, json=data)
        log.debug("Created record %s in %s", record.get("id"), self.collection)
        return record

    async def list_records(self, sort: str = "-created", batch: int = 500) -> List[Dict[str, Any]]:
        """Every record of the collection, fetched page by page like the SDK's getFullList."""
        items: List[Dict[str, Any]] = []
        page = 1
        while True:
            resp = await self._request(
                "GET",
                self.records_path,
                params={"page": page, "perPage": batch, "sort": sort, "skipTotal": 1},
            )
            batch_items = resp.get("items") or []
            if not isinstance(batch_items, list):
                raise PocketBaseError("PocketBase returned a page without an items list")
            items.extend(batch_items)
            if len(batch_items) < batch:
                break
            page += 1
        log.debug("Listed %d records from %s", len(items), self.collection)
        return items

    async def check_ready(self) -> bool:
        await self._request("GET", self.records_path, params={"page": 1, "perPage": 1, "skipTotal": 1})
        return True

    async def ensure_collection(self, admin_email: str, admin_password: str) -> bool:
        """
            Creates the collection when missing. Returns True if it was created.
            Needs admin credentials; the rules are left open (empty string).
        """
        auth = await self._request(
            "POST",
            "/api/admins/auth-with-password",
            json={"identity": admin_email, "password": admin_password},
        )
        headers = {"Authorization": auth["token"]}
        try:
            await self._request("GET", f"/api/collections/{self.collection}", headers=headers)
            log.info("Collection %s already exists", self.collection)
            return False
        except PocketBaseError as e:
            if e.status != 404:
                raise

        await self._request(
            "POST",
            "/api/collections",
            headers=headers,
            json={
                "name": self.collection,
                "type": "base",
                "schema": IMAGES_COLLECTION_SCHEMA,
                "listRule": "",
                "viewRule": "",
                "createRule": "",
                "updateRule": "",
                "deleteRule": "",
            },
        )
        log.info("Created collection %s", self.collection)
        return True

    async def close(self):
        await self.client.aclose()
        log.info("Closed PocketBase client")
