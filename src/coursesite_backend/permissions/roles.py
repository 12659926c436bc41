from enum import Enum
from functools import lru_cache
from typing import Dict, List, Optional


class CourseRole(str, Enum):
    student = "_student"
    professor = "_professor"


class CourseRoleHierarchy:
    """Manages course role hierarchy and inheritance"""
    
    DEFAULT_HIERARCHY = {
        CourseRole.professor.value: [CourseRole.professor.value],
        CourseRole.student.value: [CourseRole.student.value, CourseRole.professor.value],
    }
    
    def __init__(self, hierarchy: Optional[Dict[str, List[str]]] = None):
        self.hierarchy = hierarchy or self.DEFAULT_HIERARCHY
    
    @lru_cache(maxsize=128)
    def get_allowed_roles(self, role: str) -> List[str]:
        """Get all roles that meet or exceed the given role"""
        return self.hierarchy.get(role, [])
    
    def has_role_permission(self, user_role: Optional[str], required_role: str) -> bool:
        """Check if user_role has permission for required_role"""
        if user_role is None:
            return False
        return user_role in self.get_allowed_roles(required_role)


# Global instance - can be configured at startup
course_role_hierarchy = CourseRoleHierarchy()
