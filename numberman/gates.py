"""
Numberman Gates - Access rules.

G1: Authenticated - Caller resolved to an Account
G2: Approved - Caller's account was approved by an admin
G3: Admin - Caller holds the admin role
G4: NotSelf - Admins cannot change their own role or status

Gates take already-resolved accounts; they never verify identity themselves.
"""

import logging
import uuid
from dataclasses import dataclass

from numberman.exceptions import ForbiddenError

logger = logging.getLogger(__name__)


@dataclass
class GateResult:
    """Result of a gate check."""

    passed: bool
    gate_name: str
    message: str = ""


def _refuse(gate_name: str, code: str, **data):
    logger.warning("%s refused: %s %s", gate_name, code, data or "")
    raise ForbiddenError(code, gate=gate_name, **data)


def _same_id(pk, target_id) -> bool:
    """Compare ids the way UUIDField parses them (any spelling, or an int)."""
    try:
        if isinstance(target_id, uuid.UUID):
            target = target_id
        elif isinstance(target_id, int):
            target = uuid.UUID(int=target_id)
        else:
            target = uuid.UUID(str(target_id))
    except (ValueError, TypeError):
        # Not an id at all; the lookup reports it as unknown
        return False
    return target == pk


# =============================================================================
# Gates
# =============================================================================


class Gates:
    """Numberman access gates."""

    # =========================================================================
    # G1: Authenticated
    # =========================================================================

    @classmethod
    def authenticated(cls, account) -> GateResult:
        """
        G1: A caller must be resolved to an Account.

        Raises:
            ForbiddenError: NOT_AUTHENTICATED
        """
        if account is None:
            _refuse("G1_Authenticated", "NOT_AUTHENTICATED")
        return GateResult(True, "G1_Authenticated")

    @classmethod
    def check_authenticated(cls, account) -> bool:
        """Check without raising (returns bool)."""
        try:
            cls.authenticated(account)
            return True
        except ForbiddenError:
            return False

    # =========================================================================
    # G2: Approved
    # =========================================================================

    @classmethod
    def approved(cls, account) -> GateResult:
        """
        G2: Pending and rejected accounts cannot read the inventory.

        Raises:
            ForbiddenError: NOT_AUTHENTICATED or NOT_APPROVED
        """
        cls.authenticated(account)
        if not account.is_approved:
            _refuse("G2_Approved", "NOT_APPROVED", status=account.status)
        return GateResult(True, "G2_Approved")

    @classmethod
    def check_approved(cls, account) -> bool:
        """Check without raising (returns bool)."""
        try:
            cls.approved(account)
            return True
        except ForbiddenError:
            return False

    # =========================================================================
    # G3: Admin
    # =========================================================================

    @classmethod
    def admin(cls, account) -> GateResult:
        """
        G3: Only approved admins mutate inventory and accounts.

        Raises:
            ForbiddenError: NOT_AUTHENTICATED, NOT_APPROVED or ADMIN_REQUIRED
        """
        cls.approved(account)
        if not account.is_admin:
            _refuse("G3_Admin", "ADMIN_REQUIRED", role=account.role)
        return GateResult(True, "G3_Admin")

    @classmethod
    def check_admin(cls, account) -> bool:
        """Check without raising (returns bool)."""
        try:
            cls.admin(account)
            return True
        except ForbiddenError:
            return False

    # =========================================================================
    # G4: Not Self
    # =========================================================================

    @classmethod
    def not_self(cls, actor, target_id) -> GateResult:
        """
        G4: An admin cannot change their own role or status.

        Args:
            actor: Account performing the change
            target_id: Id of the account being changed

        Raises:
            ForbiddenError: SELF_MODIFICATION
        """
        cls.authenticated(actor)
        if _same_id(actor.pk, target_id):
            _refuse("G4_NotSelf", "SELF_MODIFICATION")
        return GateResult(True, "G4_NotSelf")

    @classmethod
    def check_not_self(cls, actor, target_id) -> bool:
        """Check without raising (returns bool)."""
        try:
            cls.not_self(actor, target_id)
            return True
        except ForbiddenError:
            return False
