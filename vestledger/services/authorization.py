"""Authorization gate for owner-only operations"""
from typing import Protocol

import structlog

from vestledger.exceptions import InvalidConfiguration, Unauthorized

logger = structlog.get_logger()


class Authorizer(Protocol):
    def is_authorized(self, caller: str) -> bool:
        ...

    def require_authorized(self, caller: str) -> None:
        ...


class OwnerAuthorizer:
    """Allows a single owner account, rejecting everybody else"""

    def __init__(self, owner: str):
        if not owner:
            raise InvalidConfiguration("owner cannot be empty")
        self.owner = owner

    def is_authorized(self, caller: str) -> bool:
        return bool(caller) and caller == self.owner

    def require_authorized(self, caller: str) -> None:
        """Fail closed unless `caller` is the owner"""
        if not self.is_authorized(caller):
            logger.warning("Unauthorized call rejected", caller=caller)
            raise Unauthorized(f"{caller!r} is not the owner", caller=caller)

    def transfer_ownership(self, caller: str, new_owner: str) -> None:
        self.require_authorized(caller)
        if not new_owner:
            raise InvalidConfiguration("new owner cannot be empty")
        logger.info("Ownership transferred", previous_owner=self.owner, new_owner=new_owner)
        self.owner = new_owner
