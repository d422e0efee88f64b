"""Minimal role checks for administrative and distribution entry points."""

from typing import Dict, Iterable, Optional, Set

import bittensor as bt

from dlprewards.deployer.utils.error_handling import AccessDenied

ADMIN_ROLE = "admin"
REWARD_DEPLOYER_ROLE = "reward_deployer"
ORACLE_ROLE = "oracle"


class AccessControl:
    """Role → members mapping. Admins may grant and revoke every role."""

    def __init__(self, admins: Iterable[str] = (), grants: Optional[Dict[str, Iterable[str]]] = None):
        self._members: Dict[str, Set[str]] = {
            ADMIN_ROLE: set(admins),
            REWARD_DEPLOYER_ROLE: set(),
            ORACLE_ROLE: set(),
        }
        for role, members in (grants or {}).items():
            self._members.setdefault(role, set()).update(members)

    def has_role(self, role: str, caller: str) -> bool:
        return caller in self._members.get(role, set())

    def require(self, role: str, caller: str) -> None:
        """Raise AccessDenied unless ``caller`` holds ``role``."""
        if not self.has_role(role, caller):
            bt.logging.warning(f"Access denied: {caller} lacks role {role}")
            raise AccessDenied(f"{caller} lacks role {role}")

    def grant_role(self, admin: str, role: str, account: str) -> None:
        self.require(ADMIN_ROLE, admin)
        self._members.setdefault(role, set()).add(account)
        bt.logging.info(f"Granted role {role} to {account}")

    def revoke_role(self, admin: str, role: str, account: str) -> None:
        self.require(ADMIN_ROLE, admin)
        self._members.get(role, set()).discard(account)
        bt.logging.info(f"Revoked role {role} from {account}")
