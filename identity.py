"""
Request identity

The access-control layer in front of this service authenticates the caller
and forwards who they are in the X-User-Id / X-User-Role headers.
"""
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, Header

from errors import AuthenticationError, AuthorizationError

ADMIN_ROLE = "admin"


@dataclass(frozen=True)
class Identity:
    user_id: str
    role: str = "user"

    @property
    def is_elevated(self) -> bool:
        return self.role == ADMIN_ROLE


async def get_current_identity(
    x_user_id: Optional[str] = Header(None),
    x_user_role: Optional[str] = Header(None),
) -> Identity:
    if not x_user_id:
        raise AuthenticationError("Authentication invalid")
    return Identity(user_id=x_user_id, role=x_user_role or "user")


def authorize_roles(*roles: str):
    async def dependency(identity: Identity = Depends(get_current_identity)) -> Identity:
        if identity.role not in roles:
            raise AuthorizationError("Unauthorized to access this route")
        return identity

    return dependency
