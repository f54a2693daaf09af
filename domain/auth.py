"""Domain Entities - Auth"""
from pydantic import BaseModel, Field
from datetime import datetime
from uuid import UUID, uuid4
from typing import Optional


class AdminUser(BaseModel):
    """Administrative console user"""
    user_id: UUID = Field(default_factory=uuid4)
    email: str
    display_name: Optional[str] = None
    disabled: bool = False

    class Config:
        from_attributes = True


class AdminUserInDB(AdminUser):
    """Admin user with hashed password for storage"""
    hashed_password: str


class AdminSession(BaseModel):
    """Signed-in admin session returned by the identity provider"""
    access_token: str
    token_type: str = "bearer"
    expires_at: datetime
    user: AdminUser
