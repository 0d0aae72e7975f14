"""
Pydantic schemas for authentication and the acting staff member
"""

from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime
import uuid

from pos_backend.core.clock import utcnow


class TokenPayload(BaseModel):
    """JWT token payload"""
    sub: str = Field(..., description="User ID")
    role: str = Field(..., description="User role")
    exp: datetime = Field(..., description="Expiration time")
    iat: datetime = Field(default_factory=utcnow, description="Issued at")


class Actor(BaseModel):
    """Staff member on whose behalf a write is performed"""
    user_id: Optional[uuid.UUID] = None
    role: str = "system"
