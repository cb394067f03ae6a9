import logging
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Query, status
from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app import schemas
from app.auth import get_current_user
from app.database import models
from app.database.config import get_db
from app.errors import BadRequestError, ForbiddenError, NotFoundError
from app.pagination import LIKE_ESCAPE, PageParams, contains_pattern, page_params, paginate
from app.tasks.notifications import notify_issue_assignment, notify_issue_creation

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/issues", tags=["issues"], dependencies=[Depends(get_current_user)])

# May be omitted from an update but not set to null
NON_NULLABLE_FIELDS = ("title", "status", "priority")


async def _load_issue(db: AsyncSession, issue_id: int) -> models.Issue:
    """Fetch an issue with its tags and users, refreshing anything already in the session."""
    result = await db.execute(
        select(models.Issue)
        .where(models.Issue.id == issue_id)
        .execution_options(populate_existing=True)
    )
    issue = result.scalars().first()

    if not issue:
        raise NotFoundError("Issue not found")

    return issue


async def _validate_assignee(db: AsyncSession, user_id: Optional[str]) -> None:
    if user_id is None:
        return
    if await db.get(models.User, user_id) is None:
        raise BadRequestError(f"Assigned user {user_id} does not exist", code="INVALID_REFERENCE")


async def _resolve_tags(db: AsyncSession, tag_ids: list[int]) -> list[models.Tag]:
    wanted = set(tag_ids)
    if not wanted:
        return []

    result = await db.execute(select(models.Tag).where(models.Tag.id.in_(wanted)))
    tags = list(result.scalars().all())

    missing = wanted - {tag.id for tag in tags}
    if missing:
        raise BadRequestError(
            f"Unknown tag ids: {', '.join(str(tag_id) for tag_id in sorted(missing))}",
            code="INVALID_REFERENCE",
        )
    return tags


@router.get("", response_model=schemas.PaginatedResponse[schemas.IssueResponse])
async def list_issues(
    status_filter: Optional[schemas.IssueStatus] = Query(None, alias="status"),
    priority: Optional[schemas.IssuePriority] = None,
    assigned_user_id: Optional[str] = None,
    created_by_user_id: Optional[str] = None,
    tag_id: Optional[int] = None,
    search: Optional[str] = Query(None, description="Match against title or description"),
    params: PageParams = Depends(page_params),
    db: AsyncSession = Depends(get_db),
):
    """List issues, newest first, with optional filters."""
    stmt = select(models.Issue).order_by(models.Issue.created_at.desc(), models.Issue.id.desc())

    if status_filter is not None:
        stmt = stmt.where(models.Issue.status == status_filter.value)
    if priority is not None:
        stmt = stmt.where(models.Issue.priority == priority.value)
    if assigned_user_id:
        stmt = stmt.where(models.Issue.assigned_user_id == assigned_user_id)
    if created_by_user_id:
        stmt = stmt.where(models.Issue.created_by_user_id == created_by_user_id)
    if tag_id is not None:
        stmt = stmt.where(models.Issue.tags.any(models.Tag.id == tag_id))
    if search:
        pattern = contains_pattern(search.lower())
        stmt = stmt.where(
            or_(
                func.lower(models.Issue.title).like(pattern, escape=LIKE_ESCAPE),
                func.lower(func.coalesce(models.Issue.description, "")).like(pattern, escape=LIKE_ESCAPE),
            )
        )

    return await paginate(db, stmt, params)


@router.get("/{issue_id}", response_model=schemas.ApiResponse[schemas.IssueResponse])
async def get_issue(issue_id: int, db: AsyncSession = Depends(get_db)):
    """Get issue by ID"""
    return {"data": await _load_issue(db, issue_id)}


@router.post("", response_model=schemas.ApiResponse[schemas.IssueResponse], status_code=status.HTTP_201_CREATED)
async def create_issue(
    payload: schemas.IssueCreate,
    background_tasks: BackgroundTasks,
    user: models.User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Create new issue"""
    await _validate_assignee(db, payload.assigned_user_id)
    tags = await _resolve_tags(db, payload.tag_ids)

    new_issue = models.Issue(
        title=payload.title,
        description=payload.description,
        status=payload.status.value,
        priority=payload.priority.value,
        assigned_user_id=payload.assigned_user_id,
        created_by_user_id=user.id,
        tags=tags,
    )
    db.add(new_issue)
    await db.commit()

    issue = await _load_issue(db, new_issue.id)
    logger.info(
        "Issue created",
        extra={"issue_id": issue.id, "created_by_user_id": user.id, "tag_count": len(tags)},
    )

    response = schemas.IssueResponse.model_validate(issue)
    background_tasks.add_task(notify_issue_creation, issue=response)

    return {"data": response}


@router.put("/{issue_id}", response_model=schemas.ApiResponse[schemas.IssueResponse])
async def update_issue(
    issue_id: int,
    payload: schemas.IssueUpdate,
    background_tasks: BackgroundTasks,
    db: AsyncSession = Depends(get_db),
):
    """Update issue by ID. Only the fields present in the body change."""
    issue = await _load_issue(db, issue_id)
    fields = payload.model_fields_set
    previous_assignee = issue.assigned_user_id

    for name in NON_NULLABLE_FIELDS:
        if name in fields and getattr(payload, name) is None:
            raise BadRequestError(f"{name} cannot be null", code="VALIDATION_ERROR")

    if "title" in fields:
        issue.title = payload.title
    if "description" in fields:
        issue.description = payload.description
    if "status" in fields:
        issue.status = payload.status.value
    if "priority" in fields:
        issue.priority = payload.priority.value
    if "assigned_user_id" in fields:
        await _validate_assignee(db, payload.assigned_user_id)
        issue.assigned_user_id = payload.assigned_user_id
    if payload.tag_ids is not None:
        issue.tags = await _resolve_tags(db, payload.tag_ids)

    # Relationship-only changes would otherwise leave updated_at untouched
    issue.updated_at = models.utcnow()
    await db.commit()

    issue = await _load_issue(db, issue_id)
    response = schemas.IssueResponse.model_validate(issue)

    if issue.assigned_user_id and issue.assigned_user_id != previous_assignee:
        background_tasks.add_task(notify_issue_assignment, issue=response)

    return {"data": response}


@router.delete("/{issue_id}", response_model=schemas.MessageResponse)
async def delete_issue(
    issue_id: int,
    user: models.User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Delete issue by ID. Only its creator may delete it."""
    issue = await _load_issue(db, issue_id)

    if issue.created_by_user_id != user.id:
        raise ForbiddenError("Only the creator of an issue can delete it")

    await db.delete(issue)
    await db.commit()

    logger.info("Issue deleted", extra={"issue_id": issue_id, "deleted_by_user_id": user.id})
    return {"message": "Issue deleted successfully"}
