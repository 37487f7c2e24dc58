from fastapi import Request
from app.storage.local import LocalStorageService
from app.storage.pocketbase import PocketBaseService

def get_storage_service(request: Request) -> LocalStorageService:
    """Dependency provider for LocalStorageService"""
    return request.app.state.storage

def get_pocketbase_service(request: Request) -> PocketBaseService:
    """Dependency provider for PocketBaseService"""
    return request.app.state.db
