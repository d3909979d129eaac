"""
Foods API Backend — Food Service (Business Logic)
===================================================

What:  The six operations of the foods resource: list, get, create, update,
       delete and photo upload.
How:   Each call receives the request's AsyncSession. Listing is delegated
       to ListQueryBuilder over a FoodCollection; single-document operations
       use the ORM directly.
Who:   Called by the route handlers in app/routes/foods.py.

Error Handling Strategy:
    - Application errors (NotFoundError, ValidationError, InvalidFilterSyntax,
      FileStorageError) propagate unchanged
    - A uniqueness violation on `name` becomes ValidationError (400)
    - Any other SQLAlchemy error is wrapped in DatabaseError (500) with the
      original error type kept in the context for the server log
"""

import logging
from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import Settings, settings
from app.exceptions import DatabaseError, NotFoundError, ValidationError
from app.models.food import Food, slugify
from app.schemas.food import (
    DeleteResponse,
    FoodCreate,
    FoodEnvelope,
    FoodListResponse,
    FoodResponse,
    FoodUpdate,
    PhotoUploadResponse,
)
from app.services.file_service import FileService
from app.services.food_collection import FoodCollection
from app.services.query_builder import ListQueryBuilder, RawParameters

logger = logging.getLogger(__name__)


class FoodService:
    """
    Business logic layer for food operations.

    Holds no per-request state; the session is passed into every call.
    """

    def __init__(self, config: Settings, file_service: FileService):
        self.query_builder = ListQueryBuilder(config)
        self.file_service = file_service

    async def list_foods(self, db: AsyncSession, params: RawParameters) -> FoodListResponse:
        """
        List foods with filtering, field selection, sorting and pagination.

        Example:
            GET /api/v1/foods?calories[lte]=300&select=name,calories&sort=calories&page=2
        """
        try:
            result = await self.query_builder.run(FoodCollection(db), params)
        except SQLAlchemyError as e:
            logger.error("Database error listing foods: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not retrieve foods. Please try again.",
                context={"error_type": type(e).__name__},
            )

        return FoodListResponse(
            count=len(result.items),
            pagination=result.pagination,
            data=result.items,
            total=result.total,
        )

    async def _load(self, db: AsyncSession, food_id: UUID) -> Food:
        try:
            result = await db.execute(select(Food).where(Food.id == food_id))
            food = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error fetching food %s: %s", food_id, str(e))
            raise DatabaseError(
                message="Could not retrieve the food. Please try again.",
                context={"food_id": str(food_id)},
            )
        if food is None:
            raise NotFoundError(resource="food", resource_id=str(food_id))
        return food

    async def _flush(self, db: AsyncSession, food: Food) -> None:
        """Flush pending changes, translating a duplicate name into a 400."""
        try:
            await db.flush()
        except IntegrityError as e:
            logger.warning("Duplicate food name rejected: %s", food.name)
            raise ValidationError(
                message=f"A food named '{food.name}' already exists",
                field="name",
                context={"error_type": type(e).__name__},
            )
        except SQLAlchemyError as e:
            logger.error("Database error saving food %s: %s", food.name, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not save the food. Please try again.",
                context={"error_type": type(e).__name__},
            )

    async def get_food(self, db: AsyncSession, food_id: UUID) -> FoodEnvelope:
        food = await self._load(db, food_id)
        return FoodEnvelope(data=FoodResponse.model_validate(food))

    async def create_food(self, db: AsyncSession, payload: FoodCreate) -> FoodEnvelope:
        food = Food(slug=slugify(payload.name), **payload.model_dump())
        db.add(food)
        await self._flush(db, food)
        logger.info("Food created: %s (%s)", food.name, food.id)
        return FoodEnvelope(data=FoodResponse.model_validate(food))

    async def update_food(
        self, db: AsyncSession, food_id: UUID, payload: FoodUpdate
    ) -> FoodEnvelope:
        """
        Apply the fields present in `payload`.

        A new name regenerates the slug; photos already stored keep their
        old filename until the next upload.
        """
        food = await self._load(db, food_id)
        changes = payload.model_dump(exclude_unset=True)
        if changes.get("name") is None:
            changes.pop("name", None)
        for field, value in changes.items():
            setattr(food, field, value)
        if "name" in changes:
            food.slug = slugify(food.name)
        await self._flush(db, food)
        logger.info("Food updated: %s (%s fields)", food.id, len(changes))
        return FoodEnvelope(data=FoodResponse.model_validate(food))

    async def delete_food(self, db: AsyncSession, food_id: UUID) -> DeleteResponse:
        food = await self._load(db, food_id)
        try:
            await db.delete(food)
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error deleting food %s: %s", food_id, str(e))
            raise DatabaseError(
                message="Could not delete the food. Please try again.",
                context={"food_id": str(food_id)},
            )
        logger.info("Food deleted: %s", food_id)
        return DeleteResponse()

    async def upload_photo(
        self,
        db: AsyncSession,
        food_id: UUID,
        filename: Optional[str],
        content_type: Optional[str],
        content: Optional[bytes],
    ) -> PhotoUploadResponse:
        """
        Store a photo for a food and record its filename.

        Workflow:
            1. Load the food (404 if missing)
            2. Require a file, an image content type and an allowed size (400)
            3. Write `<slug>-<id><ext>` to the upload directory (500 on failure)
            4. Save the filename on the food; remove the file if that fails
        """
        food = await self._load(db, food_id)

        if content is None:
            raise ValidationError(message="Please upload a file", field="file")
        self.file_service.validate_upload(content_type, len(content))

        photo_name = self.file_service.photo_filename(food.slug, str(food.id), filename or "")
        absolute_path, photo_name = await self.file_service.store_file(photo_name, content)

        food.photo = photo_name
        try:
            await db.flush()
        except SQLAlchemyError as e:
            await self.file_service.cleanup_file(absolute_path)
            logger.error("Database error recording photo for %s: %s", food_id, str(e))
            raise DatabaseError(
                message="Could not save the photo. Please try again.",
                context={"food_id": str(food_id)},
            )

        logger.info("Photo uploaded for food %s: %s", food_id, photo_name)
        return PhotoUploadResponse(data=photo_name)


# ── Singleton Instance ────────────────────────────────────────────────────
food_service = FoodService(settings, FileService(settings))


def get_food_service() -> FoodService:
    """FastAPI dependency; tests override it with a differently configured service."""
    return food_service
