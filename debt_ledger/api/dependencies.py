"""Dependency injection for FastAPI endpoints"""

from fastapi import Request
from debt_ledger.infrastructure.storage.photos import PhotoStore


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_photo_store() -> PhotoStore:
    """Provide photo storage rooted at the configured upload directory"""
    return PhotoStore()
