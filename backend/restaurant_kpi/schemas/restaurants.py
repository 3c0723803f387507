"""Pydantic schemas for restaurants."""

from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class RestaurantCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=255, examples=["Downtown Bistro"])
    city: str = Field(default="", max_length=255)


class RestaurantOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    city: str
    created_at: datetime


class RestaurantUpdateRequest(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    city: Optional[str] = Field(default=None, max_length=255)
