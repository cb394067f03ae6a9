import logging

from fastapi import APIRouter, Depends, Request, Response, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app import auth, schemas, settings
from app.database import models
from app.database.config import get_db
from app.errors import ConflictError, NotFoundError, UnauthorizedError
from app.security import hash_password, hash_token, verify_password

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post(
    "/sign-up/email",
    response_model=schemas.ApiResponse[schemas.UserResponse],
    status_code=status.HTTP_201_CREATED,
)
async def sign_up(
    payload: schemas.SignUpRequest,
    request: Request,
    response: Response,
    db: AsyncSession = Depends(get_db),
):
    """Register a user with email and password and sign them in."""
    email = payload.email.lower()
    result = await db.execute(select(models.User).where(models.User.email == email))
    if result.scalars().first():
        raise ConflictError("A user with this email already exists", code="USER_ALREADY_EXISTS")

    user = models.User(
        email=email,
        name=payload.name,
        password_hash=hash_password(payload.password),
    )
    db.add(user)
    await db.flush()

    _, token = await auth.create_session(db, user, request)
    await db.commit()

    auth.set_session_cookie(response, token)
    logger.info("User signed up", extra={"user_id": user.id})
    return {"data": user}


@router.post("/sign-in/email", response_model=schemas.ApiResponse[schemas.UserResponse])
async def sign_in(
    payload: schemas.SignInRequest,
    request: Request,
    response: Response,
    db: AsyncSession = Depends(get_db),
):
    """Check credentials and start a session."""
    result = await db.execute(select(models.User).where(models.User.email == payload.email.lower()))
    user = result.scalars().first()

    if not verify_password(payload.password, user.password_hash if user else None):
        logger.warning("Failed sign-in attempt", extra={"email": payload.email})
        raise UnauthorizedError("Invalid email or password", code="INVALID_CREDENTIALS")

    _, token = await auth.create_session(db, user, request)
    await db.commit()

    auth.set_session_cookie(response, token)
    logger.info("User signed in", extra={"user_id": user.id})
    return {"data": user}


@router.post("/sign-out", response_model=schemas.MessageResponse)
async def sign_out(request: Request, response: Response, db: AsyncSession = Depends(get_db)):
    token = request.cookies.get(settings.SESSION_COOKIE_NAME)
    if token:
        await auth.delete_session(db, token)
    auth.clear_session_cookie(response)
    return {"message": "Signed out"}


@router.get("/get-session", response_model=schemas.ApiResponse[schemas.SessionResponse])
async def get_session(session: models.Session = Depends(auth.get_current_session)):
    return {"data": {"user": session.user, "session": session}}


@router.post(
    "/api-key/create",
    response_model=schemas.ApiResponse[schemas.ApiKeyCreated],
    status_code=status.HTTP_201_CREATED,
)
async def create_api_key(
    payload: schemas.ApiKeyCreate,
    user: models.User = Depends(auth.get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Create an API key. The plaintext key is only ever returned here."""
    key = auth.generate_api_key()
    api_key = models.ApiKey(
        user_id=user.id,
        name=payload.name,
        key_hash=hash_token(key),
        start=key[:8],
    )
    db.add(api_key)
    await db.commit()

    logger.info("API key created", extra={"user_id": user.id, "api_key_id": api_key.id})
    data = schemas.ApiKeyResponse.model_validate(api_key).model_dump()
    return {"data": {**data, "key": key}}


@router.get("/api-key/list", response_model=schemas.ApiResponse[list[schemas.ApiKeyResponse]])
async def list_api_keys(
    user: models.User = Depends(auth.get_current_user),
    db: AsyncSession = Depends(get_db),
):
    result = await db.execute(
        select(models.ApiKey)
        .where(models.ApiKey.user_id == user.id)
        .order_by(models.ApiKey.created_at.desc())
    )
    return {"data": result.scalars().all()}


@router.delete("/api-key/{key_id}", response_model=schemas.MessageResponse)
async def delete_api_key(
    key_id: str,
    user: models.User = Depends(auth.get_current_user),
    db: AsyncSession = Depends(get_db),
):
    result = await db.execute(
        select(models.ApiKey).where(models.ApiKey.id == key_id, models.ApiKey.user_id == user.id)
    )
    api_key = result.scalars().first()
    if not api_key:
        raise NotFoundError("API key not found")

    await db.delete(api_key)
    await db.commit()
    return {"message": "API key deleted"}
