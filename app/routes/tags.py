import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app import schemas
from app.auth import get_current_user
from app.database import models
from app.database.config import get_db
from app.errors import ConflictError, NotFoundError
from app.pagination import LIKE_ESCAPE, PageParams, contains_pattern, page_params, paginate

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/tags", tags=["tags"], dependencies=[Depends(get_current_user)])


async def _get_tag_or_404(db: AsyncSession, tag_id: int) -> models.Tag:
    tag = await db.get(models.Tag, tag_id)
    if not tag:
        raise NotFoundError("Tag not found")
    return tag


async def _ensure_name_available(db: AsyncSession, name: str, exclude_id: Optional[int] = None) -> None:
    stmt = select(models.Tag.id).where(models.Tag.name == name)
    if exclude_id is not None:
        stmt = stmt.where(models.Tag.id != exclude_id)
    if await db.scalar(stmt) is not None:
        raise ConflictError(f"Tag '{name}' already exists", code="TAG_EXISTS")


@router.get("", response_model=schemas.PaginatedResponse[schemas.TagResponse])
async def list_tags(
    search: Optional[str] = Query(None, description="Match against tag name"),
    params: PageParams = Depends(page_params),
    db: AsyncSession = Depends(get_db),
):
    """List tags ordered by name."""
    stmt = select(models.Tag).order_by(models.Tag.name)
    if search:
        stmt = stmt.where(models.Tag.name.ilike(contains_pattern(search), escape=LIKE_ESCAPE))
    return await paginate(db, stmt, params)


@router.get("/{tag_id}", response_model=schemas.ApiResponse[schemas.TagResponse])
async def get_tag(tag_id: int, db: AsyncSession = Depends(get_db)):
    return {"data": await _get_tag_or_404(db, tag_id)}


@router.post("", response_model=schemas.ApiResponse[schemas.TagResponse], status_code=status.HTTP_201_CREATED)
async def create_tag(payload: schemas.TagCreate, db: AsyncSession = Depends(get_db)):
    """Create new tag"""
    await _ensure_name_available(db, payload.name)

    tag = models.Tag(name=payload.name, color=payload.color)
    db.add(tag)
    await db.commit()
    await db.refresh(tag)

    logger.info("Tag created", extra={"tag_id": tag.id, "tag_name": tag.name})
    return {"data": tag}


@router.put("/{tag_id}", response_model=schemas.ApiResponse[schemas.TagResponse])
async def update_tag(tag_id: int, payload: schemas.TagUpdate, db: AsyncSession = Depends(get_db)):
    """Update tag by ID"""
    tag = await _get_tag_or_404(db, tag_id)

    if payload.name is not None:
        await _ensure_name_available(db, payload.name, exclude_id=tag.id)
        tag.name = payload.name
    if payload.color is not None:
        tag.color = payload.color

    await db.commit()
    await db.refresh(tag)
    return {"data": tag}


@router.delete("/{tag_id}", response_model=schemas.MessageResponse)
async def delete_tag(tag_id: int, db: AsyncSession = Depends(get_db)):
    """Delete tag by ID. Links to issues go with it."""
    tag = await _get_tag_or_404(db, tag_id)

    await db.delete(tag)
    await db.commit()

    logger.info("Tag deleted", extra={"tag_id": tag_id})
    return {"message": "Tag deleted successfully"}
