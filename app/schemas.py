from datetime import datetime, timezone
from enum import Enum
from math import ceil
from typing import Annotated, Generic, Optional, TypeVar

from pydantic import AfterValidator, BaseModel, ConfigDict, EmailStr, Field

T = TypeVar("T")

HEX_COLOR_PATTERN = r"^#[0-9a-fA-F]{6}$"


def _assume_utc(value: datetime) -> datetime:
    # SQLite drops the offset; stored values are always UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


UTCDateTime = Annotated[datetime, AfterValidator(_assume_utc)]


class IssueStatus(str, Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    DONE = "done"


class IssuePriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


# Envelopes

class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    # Serialized as totalPages, the key the web client reads
    total_pages: int = Field(serialization_alias="totalPages")

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> "Pagination":
        return cls(page=page, limit=limit, total=total, total_pages=ceil(total / limit) if total else 0)


class ApiResponse(BaseModel, Generic[T]):
    success: bool = True
    data: T
    message: Optional[str] = None


class PaginatedResponse(BaseModel, Generic[T]):
    success: bool = True
    data: list[T]
    pagination: Pagination


class MessageResponse(BaseModel):
    success: bool = True
    message: str


# Users

class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    email: str
    name: str
    email_verified: bool
    created_at: UTCDateTime
    updated_at: UTCDateTime


class UserUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)


# Auth

class SignUpRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=8, max_length=128)
    name: str = Field(min_length=1, max_length=100)


class SignInRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1, max_length=128)


class SessionInfo(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    expires_at: UTCDateTime
    created_at: UTCDateTime


class SessionResponse(BaseModel):
    user: UserResponse
    session: SessionInfo


class ApiKeyCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)


class ApiKeyResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    start: str
    created_at: UTCDateTime
    last_used_at: Optional[UTCDateTime] = None


class ApiKeyCreated(ApiKeyResponse):
    key: str


# Tags

class TagCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(min_length=1, max_length=50)
    color: str = Field("#3b82f6", pattern=HEX_COLOR_PATTERN)


class TagUpdate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: Optional[str] = Field(None, min_length=1, max_length=50)
    color: Optional[str] = Field(None, pattern=HEX_COLOR_PATTERN)


class TagResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    color: str
    created_at: UTCDateTime
    updated_at: UTCDateTime


# Issues

class IssueCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    title: str = Field(min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=5000)
    status: IssueStatus = IssueStatus.NOT_STARTED
    priority: IssuePriority = IssuePriority.MEDIUM
    assigned_user_id: Optional[str] = None
    tag_ids: list[int] = Field(default_factory=list)


class IssueUpdate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=5000)
    status: Optional[IssueStatus] = None
    priority: Optional[IssuePriority] = None
    assigned_user_id: Optional[str] = None
    tag_ids: Optional[list[int]] = None


class IssueResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    description: Optional[str] = None
    status: IssueStatus
    priority: IssuePriority
    assigned_user_id: Optional[str] = None
    created_by_user_id: str
    created_at: UTCDateTime
    updated_at: UTCDateTime
    created_by_user: Optional[UserResponse] = None
    assigned_user: Optional[UserResponse] = None
    tags: list[TagResponse] = []
