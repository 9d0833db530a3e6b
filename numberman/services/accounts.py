"""Account service - sign-in, approval workflow and role management.

The first account ever created becomes the approved bootstrap admin; every
later one starts as a pending user. Role and status changes are admin-only
and an admin can never change their own account.
"""

import logging

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db.models import Case, IntegerField, Value, When

from numberman.exceptions import ConflictError, NotFoundError, ValidationError
from numberman.gates import Gates
from numberman.models import Account, AccountStatus, Role
from numberman.signals import account_created, account_updated
from numberman.store import unit_of_work

logger = logging.getLogger(__name__)

STATUS_ORDER = [AccountStatus.PENDING, AccountStatus.APPROVED, AccountStatus.REJECTED]


def _normalize_email(email: str | None) -> str:
    email = (email or "").strip().lower()
    if not email:
        raise ValidationError("EMAIL_REQUIRED")
    return email


def get(account_id) -> Account | None:
    """Get account by id."""
    try:
        return Account.objects.get(pk=account_id)
    except (Account.DoesNotExist, DjangoValidationError, ValueError):
        return None


def get_or_raise(account_id) -> Account:
    account = get(account_id)
    if account is None:
        raise NotFoundError("ACCOUNT_NOT_FOUND", account_id=str(account_id))
    return account


def get_by_email(email: str) -> Account | None:
    """Get account by email (case-insensitive)."""
    if not email or not email.strip():
        return None
    try:
        return Account.objects.get(email__iexact=email.strip())
    except Account.DoesNotExist:
        return None


def _create(email: str, name: str, image: str) -> Account:
    if not Account.objects.exists():
        try:
            with unit_of_work():
                return Account.objects.create(
                    email=email,
                    name=name,
                    image=image,
                    role=Role.ADMIN,
                    status=AccountStatus.APPROVED,
                    is_bootstrap=True,
                )
        except ConflictError:
            # Another sign-in won the bootstrap slot (or the same email raced)
            logger.info("Bootstrap slot taken, %s created as pending user", email)

    with unit_of_work():
        return Account.objects.create(email=email, name=name, image=image)


def sign_in(email: str, name: str | None = None, image: str | None = None) -> Account:
    """
    Resolve the account of a signed-in identity, creating it on first sight.

    An existing account gets its name and image refreshed when the provider
    sends new ones. Role and status are never touched here.

    Raises:
        ValidationError: EMAIL_REQUIRED
    """
    email = _normalize_email(email)
    name = (name or "").strip()
    image = (image or "").strip()

    account = get_by_email(email)
    if account is not None:
        changed = []
        if name and account.name != name:
            account.name = name
            changed.append("name")
        if image and account.image != image:
            account.image = image
            changed.append("image")
        if changed:
            account.save(update_fields=changed + ["updated_at"])
        return account

    try:
        account = _create(email, name, image)
    except ConflictError:
        # Concurrent first sign-in of the same email
        account = get_by_email(email)
        if account is None:
            raise
        return account

    logger.info(
        "Account created: %s (role=%s, status=%s)", account.email, account.role, account.status
    )
    account_created.send(sender=Account, account=account)
    return account


def list_accounts() -> list[Account]:
    """All accounts: pending, then approved, then rejected; newest first within each."""
    rank = Case(
        *[When(status=status, then=Value(i)) for i, status in enumerate(STATUS_ORDER)],
        default=Value(len(STATUS_ORDER)),
        output_field=IntegerField(),
    )
    return list(Account.objects.annotate(status_rank=rank).order_by("status_rank", "-created_at"))


def _update(actor: Account, account_id, field: str, value: str, choices, code: str) -> Account:
    Gates.admin(actor)
    Gates.not_self(actor, account_id)
    if value not in choices:
        raise ValidationError(code, **{field: value})
    account = get_or_raise(account_id)
    return _save_change(account, field, value, by=actor.email)


def _save_change(account: Account, field: str, value: str, by: str) -> Account:
    previous = getattr(account, field)
    setattr(account, field, value)
    with unit_of_work():
        account.save(update_fields=[field, "updated_at"])

    logger.info("Account %s %s: %s -> %s (by %s)", account.email, field, previous, value, by)
    account_updated.send(
        sender=Account,
        account=account,
        changes={field: (previous, value)},
    )
    return account


def set_role(actor: Account, account_id, role: str) -> Account:
    """
    Change an account's role.

    Raises:
        ForbiddenError: Actor not an approved admin, or actor is the target
        ValidationError: INVALID_ROLE
        NotFoundError: ACCOUNT_NOT_FOUND
    """
    return _update(actor, account_id, "role", role, Role.values, "INVALID_ROLE")


def set_status(actor: Account, account_id, status: str) -> Account:
    """
    Approve, reject or re-open an account.

    Raises:
        ForbiddenError: Actor not an approved admin, or actor is the target
        ValidationError: INVALID_STATUS
        NotFoundError: ACCOUNT_NOT_FOUND
    """
    return _update(actor, account_id, "status", status, AccountStatus.values, "INVALID_STATUS")


def moderate(queryset, status: str, by: str) -> list[Account]:
    """
    Set the status of several accounts on behalf of a Django staff user.

    Used by the admin site, where the operator may have no Account of their
    own. The bootstrap admin and accounts already in ``status`` are skipped.

    Returns:
        The accounts that changed
    """
    if status not in AccountStatus.values:
        raise ValidationError("INVALID_STATUS", status=status)
    changed = []
    for account in queryset:
        if account.is_bootstrap or account.status == status:
            continue
        changed.append(_save_change(account, "status", status, by=by))
    return changed
