"""
Type definitions for the users resource.

The same shape is exposed three ways: integer ids over a mock list, UUID ids
over an empty list, and rows of the SQL ``users`` table.
"""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class User(BaseModel):
    id: int
    name: str
    email: EmailStr
    active: bool = True


class UserList(BaseModel):
    users: List[User]
    total: int


class CreateUserRequest(BaseModel):
    name: str = Field(..., min_length=2, description="Name must have at least 2 characters")
    email: EmailStr
    password: Optional[str] = Field(default=None, min_length=6)


class UpdateUserRequest(BaseModel):
    name: Optional[str] = Field(default=None, min_length=2)
    email: Optional[EmailStr] = None
    password: Optional[str] = Field(default=None, min_length=6)


class UpdateUserProfileRequest(BaseModel):
    """PATCH body for the mock list, which keeps no passwords."""

    model_config = ConfigDict(extra="forbid")

    name: Optional[str] = Field(default=None, min_length=2)
    email: Optional[EmailStr] = None


class UuidUser(BaseModel):
    id: UUID
    name: str
    email: EmailStr
    created_at: datetime


class CreateUuidUserRequest(BaseModel):
    name: str = Field(..., min_length=3, description="Name must have at least 3 characters")
    email: EmailStr


class UpdateUuidUserRequest(BaseModel):
    name: Optional[str] = Field(default=None, min_length=3)
    email: Optional[EmailStr] = None


class UserRecord(BaseModel):
    """A row of the SQL users table, password omitted."""

    id: int
    name: str
    email: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class UsersCount(BaseModel):
    users: int


class ConnectionStatus(BaseModel):
    message: str
