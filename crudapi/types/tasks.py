"""
Type definitions for the tasks resource.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class Task(BaseModel):
    id: int
    title: str
    description: Optional[str] = None
    status: str  # Free-form, e.g. "pending" or "done"
    id_user: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class CreateTaskRequest(BaseModel):
    title: str = Field(..., min_length=2)
    description: Optional[str] = None
    status: str = Field(..., min_length=1)
    id_user: int = Field(..., gt=0, description="Owning user id")


class UpdateTaskRequest(BaseModel):
    title: Optional[str] = Field(default=None, min_length=2)
    description: Optional[str] = None
    status: Optional[str] = Field(default=None, min_length=1)
    id_user: Optional[int] = Field(default=None, gt=0)
