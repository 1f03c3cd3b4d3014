"""SQLAlchemy ORM models for the access core."""

from access_core.models.base import Base  # noqa: F401
from access_core.models.permission import Permission, PermissionModule  # noqa: F401
from access_core.models.role import Role  # noqa: F401
from access_core.models.role_permission import RolePermission  # noqa: F401
from access_core.models.user import AgentStatus, User, UserStatus  # noqa: F401
from access_core.models.user_role import UserRole  # noqa: F401
