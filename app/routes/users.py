from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app import schemas
from app.auth import get_current_user
from app.database import models
from app.database.config import get_db
from app.errors import NotFoundError
from app.pagination import LIKE_ESCAPE, PageParams, contains_pattern, page_params, paginate

router = APIRouter(prefix="/api/users", tags=["users"], dependencies=[Depends(get_current_user)])


@router.get("", response_model=schemas.PaginatedResponse[schemas.UserResponse])
async def list_users(
    search: Optional[str] = Query(None, description="Match against name or email"),
    params: PageParams = Depends(page_params),
    db: AsyncSession = Depends(get_db),
):
    """List users, optionally filtered by name or email."""
    stmt = select(models.User).order_by(models.User.name, models.User.id)
    if search:
        pattern = contains_pattern(search)
        stmt = stmt.where(
            or_(
                models.User.name.ilike(pattern, escape=LIKE_ESCAPE),
                models.User.email.ilike(pattern, escape=LIKE_ESCAPE),
            )
        )
    return await paginate(db, stmt, params)


@router.get("/me", response_model=schemas.ApiResponse[schemas.UserResponse])
async def get_me(user: models.User = Depends(get_current_user)):
    return {"data": user}


@router.put("/me", response_model=schemas.ApiResponse[schemas.UserResponse])
async def update_me(
    payload: schemas.UserUpdate,
    user: models.User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Update the current user's profile"""
    if payload.name is not None:
        user.name = payload.name

    await db.commit()
    await db.refresh(user)
    return {"data": user}


@router.get("/{user_id}", response_model=schemas.ApiResponse[schemas.UserResponse])
async def get_user(user_id: str, db: AsyncSession = Depends(get_db)):
    """Get user by ID"""
    user = await db.get(models.User, user_id)
    if not user:
        raise NotFoundError("User not found")
    return {"data": user}
