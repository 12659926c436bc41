from .roles import CourseRole, CourseRoleHierarchy, course_role_hierarchy
from .core import (
    Permissioned,
    require_admin,
    require_answer,
    require_edit,
    require_signed_in,
    require_view
)

__all__ = [
    "CourseRole",
    "CourseRoleHierarchy",
    "course_role_hierarchy",
    "Permissioned",
    "require_admin",
    "require_answer",
    "require_edit",
    "require_signed_in",
    "require_view",
]
