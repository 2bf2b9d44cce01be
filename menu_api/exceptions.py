"""
Application errors raised below the HTTP layer; main.py maps them to responses.

    MenuApiError
    ├── StorageError       → 500 {"error": ...}
    └── ItemNotFoundError  → 404 {"message": "Item not found"}
"""
from __future__ import annotations

from typing import Any, Optional


class MenuApiError(Exception):
    """Base for all menu API errors."""

    def __init__(self, message: str, context: Optional[dict[str, Any]] = None) -> None:
        self.message = message
        self.context = context or {}
        super().__init__(message)


class StorageError(MenuApiError):
    """The database driver or the pool reported a failure."""


class ItemNotFoundError(MenuApiError):
    """A get-by-id query returned zero rows."""

    def __init__(self, item_id: int) -> None:
        super().__init__("Item not found", {"item_id": item_id})
        self.item_id = item_id
