"""Access policy table: operation name -> AccessPolicy.

Every route passes its operation name to ``require``. Names missing here fall
back to authenticated-only; only the entries marked public skip authentication.
"""

from authcore.schemas.account import Role
from authcore.services.guard import AccessPolicy

AUTH_REGISTER = "auth.register"
AUTH_LOGIN = "auth.login"
AUTH_REFRESH = "auth.refresh"
AUTH_LOGOUT = "auth.logout"
AUTH_ME = "auth.me"
ACCOUNTS_ADMIN = "accounts.admin"
HEALTH_READ = "health.read"

DEFAULT_POLICIES: dict[str, AccessPolicy] = {
    AUTH_REGISTER: AccessPolicy.public_access(),
    AUTH_LOGIN: AccessPolicy.public_access(),
    AUTH_REFRESH: AccessPolicy.public_access(),
    AUTH_LOGOUT: AccessPolicy.authenticated(),
    AUTH_ME: AccessPolicy.authenticated(),
    # Administrative resource operations elsewhere in the API declare this one.
    ACCOUNTS_ADMIN: AccessPolicy.require(Role.ADMIN),
    HEALTH_READ: AccessPolicy.public_access(),
}
