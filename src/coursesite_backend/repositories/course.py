"""
Course and course membership repositories.
"""

from typing import List
from sqlalchemy.orm import Session

from .base import BaseRepository
from ..model.course import Course, CourseMember


class CourseRepository(BaseRepository[Course]):
    """Repository for Course entity database operations."""
    
    def __init__(self, db: Session):
        super().__init__(db, Course)
    
    def find_all(self) -> List[Course]:
        return self.list_by(order_by=[Course.title, Course.id])
    
    def find_by_member(self, user_id: int) -> List[Course]:
        """Courses the user holds any role in, ordered by title."""
        return (
            self.db.query(Course)
            .join(CourseMember, CourseMember.course_id == Course.id)
            .filter(CourseMember.user_id == user_id)
            .order_by(Course.title, Course.id)
            .all()
        )


class CourseMemberRepository(BaseRepository[CourseMember]):
    """Repository for (course, user, role) membership rows."""
    
    def __init__(self, db: Session):
        super().__init__(db, CourseMember)
    
    def find_by_course(self, course_id: int) -> List[CourseMember]:
        return self.list_by(order_by=CourseMember.created_at, course_id=course_id)
    
    def remove(self, course_id: int, user_id: int) -> int:
        return self.delete_where(course_id=course_id, user_id=user_id)
