"""
Foods API Backend — Foods Route Handlers
==========================================

What:  HTTP endpoints of the foods resource under /api/v1/foods.
How:   Extracts path/query/body/multipart data, delegates to FoodService,
       and returns the service's envelope models.

Endpoints:
    GET    /api/v1/foods                    list (filter, select, sort, paginate)
    GET    /api/v1/foods/photos/{filename}  serve a stored photo
    GET    /api/v1/foods/{id}               single food
    POST   /api/v1/foods                    create
    PUT    /api/v1/foods/{id}               update
    DELETE /api/v1/foods/{id}               delete
    PUT    /api/v1/foods/{id}/photo         upload photo (multipart field `file`)
"""

import logging
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, File, Request, Response, UploadFile
from fastapi.responses import FileResponse
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.schemas.food import (
    DeleteResponse,
    ErrorResponse,
    FoodCreate,
    FoodEnvelope,
    FoodListResponse,
    FoodUpdate,
    PhotoUploadResponse,
)
from app.services.food_service import FoodService, get_food_service
from app.services.query_builder import collect_raw_parameters

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/foods", tags=["Foods"])


@router.get(
    "",
    response_model=FoodListResponse,
    responses={500: {"description": "Unreadable filter or server error", "model": ErrorResponse}},
    summary="List foods",
    description=(
        "Every query parameter other than `select`, `sort`, `page` and `limit` filters "
        "the result. Comparisons use bracket syntax: `price[gt]=10`, `calories[lte]=300`, "
        "`category[in]=fruit,dessert`. `select=name,price` limits the returned fields, "
        "`sort=-name,price` orders results (leading `-` = descending). "
        "`page` and `limit` default to 1 and 10."
    ),
)
async def list_foods(
    request: Request,
    response: Response,
    db: AsyncSession = Depends(get_db_session),
    service: FoodService = Depends(get_food_service),
) -> FoodListResponse:
    """
    Query parameters are read from the raw query string so arbitrary filter
    keys reach the query builder unchanged.
    """
    params = collect_raw_parameters(request.query_params.multi_items())
    result = await service.list_foods(db=db, params=params)
    response.headers["X-Total-Count"] = str(result.total)
    return result


@router.get(
    "/photos/{filename}",
    summary="Serve a stored food photo",
    responses={
        200: {"description": "Image file"},
        404: {"description": "Photo not found", "model": ErrorResponse},
    },
)
async def serve_photo(
    filename: str,
    service: FoodService = Depends(get_food_service),
) -> FileResponse:
    path = service.file_service.resolve_photo(filename)
    return FileResponse(
        path=str(path),
        headers={"Cache-Control": "public, max-age=86400"},
    )


@router.get(
    "/{food_id}",
    response_model=FoodEnvelope,
    responses={404: {"description": "Food not found", "model": ErrorResponse}},
    summary="Get a single food",
)
async def get_food(
    food_id: UUID,
    db: AsyncSession = Depends(get_db_session),
    service: FoodService = Depends(get_food_service),
) -> FoodEnvelope:
    return await service.get_food(db=db, food_id=food_id)


@router.post(
    "",
    status_code=201,
    response_model=FoodEnvelope,
    responses={400: {"description": "Duplicate name", "model": ErrorResponse}},
    summary="Create a food",
)
async def create_food(
    payload: FoodCreate,
    db: AsyncSession = Depends(get_db_session),
    service: FoodService = Depends(get_food_service),
) -> FoodEnvelope:
    return await service.create_food(db=db, payload=payload)


@router.put(
    "/{food_id}",
    response_model=FoodEnvelope,
    responses={
        400: {"description": "Duplicate name", "model": ErrorResponse},
        404: {"description": "Food not found", "model": ErrorResponse},
    },
    summary="Update a food",
)
async def update_food(
    food_id: UUID,
    payload: FoodUpdate,
    db: AsyncSession = Depends(get_db_session),
    service: FoodService = Depends(get_food_service),
) -> FoodEnvelope:
    return await service.update_food(db=db, food_id=food_id, payload=payload)


@router.delete(
    "/{food_id}",
    response_model=DeleteResponse,
    responses={404: {"description": "Food not found", "model": ErrorResponse}},
    summary="Delete a food",
)
async def delete_food(
    food_id: UUID,
    db: AsyncSession = Depends(get_db_session),
    service: FoodService = Depends(get_food_service),
) -> DeleteResponse:
    return await service.delete_food(db=db, food_id=food_id)


@router.put(
    "/{food_id}/photo",
    response_model=PhotoUploadResponse,
    responses={
        400: {"description": "Missing, non-image or oversized file", "model": ErrorResponse},
        404: {"description": "Food not found", "model": ErrorResponse},
        500: {"description": "File could not be written", "model": ErrorResponse},
    },
    summary="Upload a photo for a food",
)
async def upload_photo(
    food_id: UUID,
    file: Optional[UploadFile] = File(default=None, description="Image file"),
    db: AsyncSession = Depends(get_db_session),
    service: FoodService = Depends(get_food_service),
) -> PhotoUploadResponse:
    if file is None:
        return await service.upload_photo(
            db=db, food_id=food_id, filename=None, content_type=None, content=None
        )

    try:
        content = await file.read()
        logger.info(
            "Received photo upload: food=%s filename=%s size=%d bytes",
            food_id,
            file.filename or "unknown",
            len(content),
        )
        return await service.upload_photo(
            db=db,
            food_id=food_id,
            filename=file.filename,
            content_type=file.content_type,
            content=content,
        )
    finally:
        await file.close()
