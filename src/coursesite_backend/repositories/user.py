"""
User repository for direct database access.
"""

from typing import List, Optional
from sqlalchemy import func
from sqlalchemy.orm import Session

from .base import BaseRepository
from ..model.auth import User


class UserRepository(BaseRepository[User]):
    """Repository for User entity database operations."""
    
    def __init__(self, db: Session):
        super().__init__(db, User)
    
    def find_by_email(self, email: str) -> Optional[User]:
        """Find a user by email address, ignoring case."""
        return (
            self.db.query(User)
            .filter(func.lower(User.email) == email.strip().lower())
            .first()
        )
    
    def find_admins(self) -> List[User]:
        """All users holding the admin flag, in id order."""
        return self.list_by(order_by=User.id, is_admin=True)
