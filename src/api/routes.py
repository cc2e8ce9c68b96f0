"""
HTTP routes for the Random Users service.

Three endpoints wrap the operations:
- POST /populate   bulk generate and insert users
- GET /users       one page of users in insertion order
- DELETE /deleteAll remove every user in throttled chunks

Failures surface as 500 responses carrying the driver error; an empty page
is a 404, not an error.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query, Request, status
from fastapi.responses import JSONResponse, PlainTextResponse
from pymongo.errors import PyMongoError

from src.config import Settings
from src.operations import BatchLoader, BulkDeleter, PaginationReader, UserCollection, UserGenerator
from src.utils.logging import get_logger

log = get_logger(__name__)

router = APIRouter()


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_collection(request: Request) -> UserCollection:
    return request.app.state.collection


def error_payload(exc: BaseException) -> Dict[str, Any]:
    """
    Serialize an exception for a 500 body.

    Driver errors keep their server error code when they have one.
    """
    payload: Dict[str, Any] = {"name": type(exc).__name__, "message": str(exc)}
    if isinstance(exc, PyMongoError):
        code = getattr(exc, "code", None)
        if code is not None:
            payload["code"] = code
    return payload


@router.post(
    "/populate",
    summary="Populate the database with random users",
    responses={
        200: {"description": "Approximate number of users inserted"},
        500: {"description": "Storage or generation error"},
    },
)
async def populate_database(
    total: Optional[int] = Query(None, gt=0, description="Target record count (defaults to settings)."),
    batch_size: Optional[int] = Query(None, gt=0, description="Records per insert batch."),
    collection: UserCollection = Depends(get_collection),
    settings: Settings = Depends(get_app_settings),
):
    """
    Generate and bulk-insert random users.

    Parameters
    ----------
    total : int, optional
        Overrides the configured record count.
    batch_size : int, optional
        Overrides the configured batch size.

    Returns
    -------
    dict or JSONResponse
        A message with the approximate number of inserted users, or a 500 body.
    """
    loader = BatchLoader(collection, generator_factory=lambda: UserGenerator.from_settings(settings))
    try:
        result = await loader.populate(
            total_records=total or settings.populate_total_records,
            batch_size=batch_size or settings.populate_batch_size,
            concurrency=settings.populate_concurrency,
        )
    except Exception as exc:  # noqa: BLE001
        log.exception("Error populating database")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"message": "Error populating database", "error": error_payload(exc)},
        )

    return {"message": f"Database populated with approximately {result['records_inserted']} random users"}


@router.get(
    "/users",
    summary="List users page by page",
    responses={
        200: {"description": "Users on the requested page"},
        404: {"description": "Page is past the last user"},
        500: {"description": "Storage error"},
    },
)
async def get_users(
    page: int = Query(1, ge=1, description="1-based page number."),
    collection: UserCollection = Depends(get_collection),
    settings: Settings = Depends(get_app_settings),
):
    reader = PaginationReader(collection)
    try:
        users = await reader.list_users(page=page, page_size=settings.page_size)
    except Exception as exc:  # noqa: BLE001
        log.exception("Error fetching users", extra={"page": page})
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"message": "Error fetching users", "error": error_payload(exc)},
        )

    if not users:
        return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"message": "No users found"})
    return [user.model_dump(by_alias=True) for user in users]


@router.delete(
    "/deleteAll",
    summary="Delete every user",
    responses={
        200: {"description": "Number of deleted users"},
        500: {"description": "Storage error (plain text)"},
    },
)
async def delete_users(
    collection: UserCollection = Depends(get_collection),
    settings: Settings = Depends(get_app_settings),
):
    deleter = BulkDeleter(collection)
    try:
        result = await deleter.delete_all(
            chunk_size=settings.delete_chunk_size,
            pause_seconds=settings.delete_pause_seconds,
        )
    except Exception:  # noqa: BLE001
        log.exception("Error deleting users")
        return PlainTextResponse("Error deleting users", status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)

    return {"message": f"Deleted {result['total_deleted']} users"}


__all__ = ["router", "error_payload", "get_app_settings", "get_collection"]
