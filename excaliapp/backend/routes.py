"""
HTTP routes for the drawings API.

Every route except `/testing` and CORS preflight resolves the caller through
`get_current_user`, and every table access is scoped to that identity.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Response

from excaliapp.backend.auth import get_current_user
from excaliapp.backend.db import DbClient
from excaliapp.backend.dependencies import get_db_client
from excaliapp.backend.schemas import (
    DrawingResponse,
    HealthResponse,
    MessageResponse,
    SaveDrawingPayload,
)
from excaliapp.shared.types import DEFAULT_FILE_NAME, FileRecord

logger = logging.getLogger(__name__)

router = APIRouter()

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, PUT, DELETE, OPTIONS",
    "Access-Control-Allow-Headers": "Authorization, Content-Type",
}

OTHER_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE"]


@router.options("/{path:path}", status_code=204)
def preflight(path: str):
    return Response(status_code=204, headers=CORS_HEADERS)


@router.get("/testing", response_model=MessageResponse)
def testing():
    """Unauthenticated liveness probe."""
    logger.info("Excalidraw API is working.")
    return MessageResponse(message="Excalidraw API is working.")


@router.get("/health", response_model=HealthResponse)
@router.get("/health/", response_model=HealthResponse)
def health(user_id: str = Depends(get_current_user)):
    """Health check that also proves the caller's token is accepted."""
    return HealthResponse(status="ok", message="Excalidraw API is healthy.")


@router.get("/drawings", response_model=dict[str, DrawingResponse])
@router.get("/drawings/", response_model=dict[str, DrawingResponse])
def list_drawings(
    user_id: str = Depends(get_current_user),
    db: DbClient = Depends(get_db_client),
):
    return {
        record.id: DrawingResponse.from_record(record)
        for record in db.list_files(user_id)
    }


@router.get("/drawings/{file_id}", response_model=DrawingResponse)
@router.get("/drawings/{file_id}/", response_model=DrawingResponse)
def get_drawing(
    file_id: str,
    user_id: str = Depends(get_current_user),
    db: DbClient = Depends(get_db_client),
):
    record = db.get_file(file_id, user_id)
    if not record:
        raise HTTPException(status_code=404, detail="File not found.")
    return DrawingResponse.from_record(record)


@router.put("/drawings", response_model=DrawingResponse)
@router.put("/drawings/", response_model=DrawingResponse)
def save_drawing(
    payload: SaveDrawingPayload,
    response: Response,
    user_id: str = Depends(get_current_user),
    db: DbClient = Depends(get_db_client),
):
    """
    Upsert by id. Creates the row for the caller (201) or updates the caller's
    own row (200); a row owned by someone else is rejected with 403.

    The existence check and the write are separate statements.
    """
    if not payload.id or not payload.data:
        raise HTTPException(status_code=400, detail="File ID and data are required.")

    existing = db.find_file(payload.id)
    if not existing:
        record = db.insert_file(
            FileRecord(
                id=payload.id,
                user_id=user_id,
                name=payload.name or DEFAULT_FILE_NAME,
                data=payload.data,
                thumbnail=payload.thumbnail,
                is_public=bool(payload.isPublic),
            )
        )
        logger.info("Created drawing %s for %s", record.id, user_id)
        response.status_code = 201
        return DrawingResponse.from_record(record)

    if existing.user_id != user_id:
        raise HTTPException(
            status_code=403, detail="You do not have permission to edit this file."
        )

    record = db.update_file(
        payload.id,
        user_id,
        name=payload.name or existing.name,
        data=payload.data or existing.data,
        thumbnail=(
            payload.thumbnail if payload.thumbnail is not None else existing.thumbnail
        ),
        is_public=(
            payload.isPublic if payload.isPublic is not None else existing.is_public
        ),
    )
    if not record:
        raise HTTPException(status_code=404, detail="File not found.")
    return DrawingResponse.from_record(record)


@router.delete("/drawings/{file_id}", response_model=MessageResponse)
@router.delete("/drawings/{file_id}/", response_model=MessageResponse)
def delete_drawing(
    file_id: str,
    user_id: str = Depends(get_current_user),
    db: DbClient = Depends(get_db_client),
):
    if not db.get_file(file_id, user_id):
        raise HTTPException(status_code=404, detail="File not found.")
    db.delete_file(file_id, user_id)
    logger.info("Deleted drawing %s for %s", file_id, user_id)
    return MessageResponse(message="File deleted successfully.")


@router.api_route("/{path:path}", methods=OTHER_METHODS, include_in_schema=False)
def method_not_allowed(path: str, user_id: str = Depends(get_current_user)):
    raise HTTPException(status_code=405, detail="Method not allowed.")
