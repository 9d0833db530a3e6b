"""Tests for access gates and the account service."""

import uuid
from datetime import timedelta
from unittest.mock import patch

import pytest
from django.utils import timezone

from numberman.exceptions import ForbiddenError, NotFoundError, ValidationError
from numberman.gates import Gates
from numberman.models import Account, AccountStatus, Role
from numberman.services import accounts
from numberman.signals import account_created, account_updated

pytestmark = pytest.mark.django_db


# ═══════════════════════════════════════════════════════════════════
# G1-G4: Gates
# ═══════════════════════════════════════════════════════════════════


class TestG1Authenticated:
    def test_account_passes(self, pending_account):
        assert Gates.authenticated(pending_account).passed

    def test_none_refused(self):
        with pytest.raises(ForbiddenError) as exc:
            Gates.authenticated(None)
        assert exc.value.code == "NOT_AUTHENTICATED"
        assert exc.value.http_status == 401
        assert exc.value.data["gate"] == "G1_Authenticated"

    def test_check_variant_returns_bool(self, pending_account):
        assert Gates.check_authenticated(pending_account)
        assert not Gates.check_authenticated(None)


class TestG2Approved:
    def test_approved_passes(self, user_account):
        assert Gates.approved(user_account).gate_name == "G2_Approved"

    @pytest.mark.parametrize("status", [AccountStatus.PENDING, AccountStatus.REJECTED])
    def test_not_approved_refused(self, status):
        account = Account.objects.create(email="x@example.com", status=status)
        with pytest.raises(ForbiddenError) as exc:
            Gates.approved(account)
        assert exc.value.code == "NOT_APPROVED"
        assert exc.value.http_status == 403

    def test_none_refused_as_unauthenticated(self):
        with pytest.raises(ForbiddenError) as exc:
            Gates.approved(None)
        assert exc.value.code == "NOT_AUTHENTICATED"

    def test_check_variant_returns_bool(self, user_account, pending_account):
        assert Gates.check_approved(user_account)
        assert not Gates.check_approved(pending_account)


class TestG3Admin:
    def test_admin_passes(self, admin_account):
        assert Gates.admin(admin_account).passed

    def test_user_refused(self, user_account):
        with pytest.raises(ForbiddenError) as exc:
            Gates.admin(user_account)
        assert exc.value.code == "ADMIN_REQUIRED"

    def test_rejected_admin_refused(self):
        account = Account.objects.create(
            email="x@example.com", role=Role.ADMIN, status=AccountStatus.REJECTED
        )
        with pytest.raises(ForbiddenError) as exc:
            Gates.admin(account)
        assert exc.value.code == "NOT_APPROVED"

    def test_check_variant_returns_bool(self, admin_account, user_account):
        assert Gates.check_admin(admin_account)
        assert not Gates.check_admin(user_account)
        assert not Gates.check_admin(None)


class TestG4NotSelf:
    def test_other_passes(self, admin_account, user_account):
        assert Gates.not_self(admin_account, user_account.pk).passed

    def test_self_refused_uuid_or_str(self, admin_account):
        for target in (admin_account.pk, str(admin_account.pk)):
            with pytest.raises(ForbiddenError) as exc:
                Gates.not_self(admin_account, target)
            assert exc.value.code == "SELF_MODIFICATION"

    def test_self_refused_in_any_spelling(self, admin_account):
        """Every form UUIDField accepts for the actor's id is still the actor."""
        pk = admin_account.pk
        for target in (str(pk).upper(), pk.hex, pk.hex.upper(), f"urn:uuid:{pk}", pk.int):
            with pytest.raises(ForbiddenError) as exc:
                Gates.not_self(admin_account, target)
            assert exc.value.code == "SELF_MODIFICATION"

    def test_malformed_id_is_not_self(self, admin_account):
        assert Gates.not_self(admin_account, "not-an-id").passed

    def test_check_variant_returns_bool(self, admin_account, user_account):
        assert Gates.check_not_self(admin_account, user_account.pk)
        assert not Gates.check_not_self(admin_account, admin_account.pk)


# ═══════════════════════════════════════════════════════════════════
# Sign-in
# ═══════════════════════════════════════════════════════════════════


class TestSignIn:
    def test_first_account_is_bootstrap_admin(self):
        account = accounts.sign_in("First@Example.com", name="First")

        assert account.email == "first@example.com"
        assert account.role == Role.ADMIN
        assert account.status == AccountStatus.APPROVED
        assert account.is_bootstrap

    def test_later_accounts_are_pending_users(self):
        accounts.sign_in("first@example.com")
        second = accounts.sign_in("second@example.com")

        assert second.role == Role.USER
        assert second.status == AccountStatus.PENDING
        assert not second.is_bootstrap

    def test_existing_account_refreshed(self, pending_account):
        account = accounts.sign_in(
            "PENDING@example.com", name="New Name", image="https://img.example.com/a.png"
        )

        assert account.pk == pending_account.pk
        assert account.name == "New Name"
        assert account.image == "https://img.example.com/a.png"
        assert account.status == AccountStatus.PENDING
        assert Account.objects.count() == 1

    def test_blank_profile_keeps_stored_values(self, user_account):
        account = accounts.sign_in("user@example.com", name="")
        assert account.name == "User"

    def test_email_required(self):
        with pytest.raises(ValidationError) as exc:
            accounts.sign_in("  ")
        assert exc.value.code == "EMAIL_REQUIRED"

    def test_bootstrap_race_loser_becomes_pending(self, admin_account):
        """When another sign-in takes the bootstrap slot first, the account starts pending."""
        with patch.object(Account.objects, "exists", return_value=False):
            account = accounts.sign_in("late@example.com")

        assert account.role == Role.USER
        assert account.status == AccountStatus.PENDING
        assert Account.objects.filter(is_bootstrap=True).count() == 1

    def test_account_created_signal(self):
        received = []

        def handler(sender, account, **kwargs):
            received.append(account.email)

        account_created.connect(handler)
        try:
            accounts.sign_in("first@example.com")
            accounts.sign_in("first@example.com")
        finally:
            account_created.disconnect(handler)

        assert received == ["first@example.com"]


class TestLookups:
    def test_get(self, user_account):
        assert accounts.get(user_account.pk) == user_account
        assert accounts.get(uuid.uuid4()) is None
        assert accounts.get("garbage") is None

    def test_get_by_email(self, user_account):
        assert accounts.get_by_email("USER@example.com") == user_account
        assert accounts.get_by_email("") is None
        assert accounts.get_by_email("nobody@example.com") is None

    def test_list_order(self, admin_account):
        now = timezone.now()
        old_pending = Account.objects.create(email="p1@example.com")
        new_pending = Account.objects.create(email="p2@example.com")
        rejected = Account.objects.create(email="r@example.com", status=AccountStatus.REJECTED)
        Account.objects.filter(pk=old_pending.pk).update(created_at=now - timedelta(days=2))
        Account.objects.filter(pk=new_pending.pk).update(created_at=now - timedelta(days=1))

        assert accounts.list_accounts() == [new_pending, old_pending, admin_account, rejected]


# ═══════════════════════════════════════════════════════════════════
# Role and status changes
# ═══════════════════════════════════════════════════════════════════


class TestSetRoleAndStatus:
    def test_approve(self, admin_account, pending_account):
        account = accounts.set_status(admin_account, pending_account.pk, AccountStatus.APPROVED)

        assert account.status == AccountStatus.APPROVED
        pending_account.refresh_from_db()
        assert pending_account.is_approved

    def test_promote(self, admin_account, user_account):
        accounts.set_role(admin_account, str(user_account.pk), Role.ADMIN)
        user_account.refresh_from_db()
        assert user_account.is_admin

    def test_admin_can_change_other_admin(self, admin_account, other_admin):
        accounts.set_role(admin_account, other_admin.pk, Role.USER)
        other_admin.refresh_from_db()
        assert other_admin.role == Role.USER

    @pytest.mark.parametrize(
        "change, value",
        [
            (accounts.set_role, Role.USER),
            (accounts.set_role, Role.ADMIN),
            (accounts.set_role, "superuser"),
            (accounts.set_status, AccountStatus.REJECTED),
            (accounts.set_status, AccountStatus.APPROVED),
        ],
    )
    def test_self_modification_refused(self, admin_account, change, value):
        """Whatever the value, an admin cannot change their own account."""
        with pytest.raises(ForbiddenError) as exc:
            change(admin_account, admin_account.pk, value)

        assert exc.value.code == "SELF_MODIFICATION"
        admin_account.refresh_from_db()
        assert admin_account.role == Role.ADMIN
        assert admin_account.status == AccountStatus.APPROVED

    @pytest.mark.parametrize("spelling", [str.upper, lambda s: s.replace("-", "")])
    def test_self_modification_refused_for_respelled_id(self, admin_account, spelling):
        target = spelling(str(admin_account.pk))

        with pytest.raises(ForbiddenError):
            accounts.set_role(admin_account, target, Role.USER)
        with pytest.raises(ForbiddenError):
            accounts.set_status(admin_account, target, AccountStatus.REJECTED)

        admin_account.refresh_from_db()
        assert admin_account.role == Role.ADMIN
        assert admin_account.status == AccountStatus.APPROVED

    def test_respelled_id_of_other_account_accepted(self, admin_account, user_account):
        accounts.set_role(admin_account, str(user_account.pk).upper(), Role.ADMIN)
        user_account.refresh_from_db()
        assert user_account.is_admin

    def test_malformed_id_not_found(self, admin_account):
        with pytest.raises(NotFoundError) as exc:
            accounts.set_status(admin_account, "not-an-id", AccountStatus.APPROVED)
        assert exc.value.code == "ACCOUNT_NOT_FOUND"

    def test_non_admin_refused(self, user_account, pending_account):
        with pytest.raises(ForbiddenError) as exc:
            accounts.set_status(user_account, pending_account.pk, AccountStatus.APPROVED)
        assert exc.value.code == "ADMIN_REQUIRED"

    def test_invalid_role(self, admin_account, user_account):
        with pytest.raises(ValidationError) as exc:
            accounts.set_role(admin_account, user_account.pk, "owner")
        assert exc.value.code == "INVALID_ROLE"

    def test_invalid_status(self, admin_account, user_account):
        with pytest.raises(ValidationError) as exc:
            accounts.set_status(admin_account, user_account.pk, "banned")
        assert exc.value.code == "INVALID_STATUS"

    def test_unknown_account(self, admin_account):
        with pytest.raises(NotFoundError) as exc:
            accounts.set_role(admin_account, uuid.uuid4(), Role.ADMIN)
        assert exc.value.code == "ACCOUNT_NOT_FOUND"

    def test_account_updated_signal(self, admin_account, pending_account):
        received = []

        def handler(sender, account, changes, **kwargs):
            received.append(changes)

        account_updated.connect(handler)
        try:
            accounts.set_status(admin_account, pending_account.pk, AccountStatus.REJECTED)
        finally:
            account_updated.disconnect(handler)

        assert received == [{"status": (AccountStatus.PENDING, AccountStatus.REJECTED)}]


class TestModerate:
    """Bulk status changes made from the Django admin."""

    def test_changes_and_signals(self, admin_account, pending_account, user_account):
        received = []

        def handler(sender, account, changes, **kwargs):
            received.append((account.email, changes))

        account_updated.connect(handler)
        try:
            changed = accounts.moderate(
                Account.objects.all(), AccountStatus.REJECTED, by="staff"
            )
        finally:
            account_updated.disconnect(handler)

        assert {a.email for a in changed} == {pending_account.email, user_account.email}
        assert sorted(received) == [
            (pending_account.email, {"status": (AccountStatus.PENDING, AccountStatus.REJECTED)}),
            (user_account.email, {"status": (AccountStatus.APPROVED, AccountStatus.REJECTED)}),
        ]

    def test_bootstrap_admin_untouched(self, admin_account):
        assert accounts.moderate([admin_account], AccountStatus.REJECTED, by="staff") == []
        admin_account.refresh_from_db()
        assert admin_account.status == AccountStatus.APPROVED

    def test_unchanged_accounts_skipped(self, user_account):
        assert accounts.moderate([user_account], AccountStatus.APPROVED, by="staff") == []

    def test_invalid_status(self, pending_account):
        with pytest.raises(ValidationError):
            accounts.moderate([pending_account], "banned", by="staff")
