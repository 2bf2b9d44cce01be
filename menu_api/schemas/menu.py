from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict


class MenuItemCreate(BaseModel):
    """Body of POST and PUT /api/menu. Any client-sent id is ignored."""

    model_config = ConfigDict(extra="ignore")

    name: str
    description: Optional[str] = None
    price: float
    image_url: Optional[str] = None


class MenuItemSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: Optional[str] = None
    price: float
    image_url: Optional[str] = None


class ItemCreatedResponse(BaseModel):
    message: str = "Item added"
    id: int


class MessageResponse(BaseModel):
    message: str


class ErrorResponse(BaseModel):
    error: str
