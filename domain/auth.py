"""Domain Entities - Auth"""
from pydantic import BaseModel
from datetime import datetime
from typing import Optional

from domain.enums import UserRole


class User(BaseModel):
    """User Entity"""
    user_id: int
    login_id: str
    name: str
    email: str
    phone: str
    password: str  # bcrypt hash, never plaintext
    role: UserRole = UserRole.GUEST
    deleted_at: Optional[datetime] = None

    class Config:
        from_attributes = True

    def update_password(self, hashed_password: str) -> None:
        self.password = hashed_password

    def is_deleted(self) -> bool:
        return self.deleted_at is not None
