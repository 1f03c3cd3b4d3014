"""Business logic service layer."""

from access_core.services.auth_context import SqlAlchemyAuthContextGateway  # noqa: F401
from access_core.services.authorization import AuthorizationService  # noqa: F401
from access_core.services.roles import RoleService  # noqa: F401
from access_core.services.seed import SeedService  # noqa: F401
from access_core.services.users import UserService  # noqa: F401
