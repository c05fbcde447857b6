"""User service client.

Only the user's email is needed, for notifications. A missing user or an
unreachable User service never blocks a delivery write: ``get_email`` falls
back to a placeholder address.
"""

import structlog

from shared.errors import ServiceError, UserNotFound, UserServiceUnavailable
from shared.http import ServiceClient
from shared.identity import RequestIdentity

logger = structlog.get_logger(__name__)

UNKNOWN_EMAIL = "unknown@example.com"


class UserClient(ServiceClient):
    service_name = "user-service"
    unavailable = UserServiceUnavailable

    def get_user(self, user_id: str, identity: RequestIdentity | None = None) -> dict:
        return self._get_json(f"/users/{user_id}", UserNotFound(user_id), identity)

    def get_email(self, user_id: str, identity: RequestIdentity | None = None) -> str:
        try:
            user = self.get_user(user_id, identity)
        except ServiceError as exc:
            logger.warning("User lookup failed, using placeholder email", user_id=user_id, error=exc.code)
            return UNKNOWN_EMAIL

        email = user.get("email")
        if not email:
            logger.warning("User has no email, using placeholder", user_id=user_id)
            return UNKNOWN_EMAIL
        return email
