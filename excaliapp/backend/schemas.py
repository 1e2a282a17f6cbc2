"""
Pydantic schemas for the drawings API. Field names follow the client's camelCase wire format.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel

from excaliapp.shared.types import FileRecord


class SaveDrawingPayload(BaseModel):
    id: Optional[str] = None
    name: Optional[str] = None
    data: Optional[str] = None
    thumbnail: Optional[str] = None
    isPublic: Optional[bool] = None


class DrawingResponse(BaseModel):
    id: str
    userId: str
    name: str
    data: str
    thumbnail: Optional[str] = None
    createdAt: str
    updatedAt: str
    isPublic: bool

    @classmethod
    def from_record(cls, record: FileRecord) -> "DrawingResponse":
        return cls(**record.to_json(include_storage=False))


class MessageResponse(BaseModel):
    message: str


class HealthResponse(BaseModel):
    status: str
    message: str
