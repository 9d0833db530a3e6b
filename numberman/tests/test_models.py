"""Tests for Numberman models."""

import pytest
from django.db import IntegrityError, transaction

from numberman.models import (
    Account,
    AccountStatus,
    EventType,
    PhoneNumber,
    PhoneStatus,
    Role,
    UsageEvent,
)

pytestmark = pytest.mark.django_db


class TestPhoneNumber:
    """Tests for PhoneNumber model."""

    def test_defaults(self):
        """New numbers are FREE without client."""
        phone = PhoneNumber.objects.create(number="0361281200")
        assert phone.status == PhoneStatus.FREE
        assert phone.client is None
        assert not phone.is_in_use

    def test_str(self, free_phone, assigned_phone):
        assert str(free_phone) == "0212561700"
        assert str(assigned_phone) == "0212561701 (ACME)"

    def test_block_prefix(self, free_phone):
        """Block replaces the last two digits with XX."""
        assert free_phone.block_prefix == "02125617XX"

    def test_leading_zeros_kept(self):
        phone = PhoneNumber.objects.create(number="0000000001")
        phone.refresh_from_db()
        assert phone.number == "0000000001"

    def test_number_unique(self, free_phone):
        with pytest.raises(IntegrityError), transaction.atomic():
            PhoneNumber.objects.create(number=free_phone.number)

    def test_default_ordering_by_number(self, make_phone):
        make_phone("0300")
        make_phone("0100")
        make_phone("0200")
        assert list(PhoneNumber.objects.values_list("number", flat=True)) == [
            "0100",
            "0200",
            "0300",
        ]


class TestUsageEvent:
    """Tests for UsageEvent model."""

    def test_history_related_name(self, free_phone):
        UsageEvent.objects.create(phone=free_phone, event_type=EventType.ACTIVATION)
        assert free_phone.history.count() == 1

    def test_cascade_delete(self, free_phone):
        """Deleting a phone removes its history."""
        UsageEvent.objects.create(phone=free_phone, event_type=EventType.ACTIVATION)
        UsageEvent.objects.create(
            phone=free_phone, event_type=EventType.ASSIGNED, client_name="ACME"
        )
        free_phone.delete()
        assert UsageEvent.objects.count() == 0

    def test_str(self, free_phone):
        event = UsageEvent.objects.create(
            phone=free_phone, event_type=EventType.ASSIGNED, client_name="ACME"
        )
        assert str(event) == "[ASSIGNED] ACME"


class TestAccount:
    """Tests for Account model."""

    def test_defaults(self):
        """New accounts are pending users."""
        account = Account.objects.create(email="someone@example.com")
        assert account.role == Role.USER
        assert account.status == AccountStatus.PENDING
        assert not account.is_admin
        assert not account.is_approved
        assert not account.is_bootstrap

    def test_flags(self, admin_account):
        assert admin_account.is_admin
        assert admin_account.is_approved
        assert str(admin_account) == "admin@example.com"

    def test_single_bootstrap_admin(self, admin_account):
        """Only one account may carry the bootstrap flag."""
        with pytest.raises(IntegrityError), transaction.atomic():
            Account.objects.create(email="second@example.com", is_bootstrap=True)

    def test_many_regular_accounts(self, admin_account):
        Account.objects.create(email="a@example.com")
        Account.objects.create(email="b@example.com")
        assert Account.objects.filter(is_bootstrap=False).count() == 2
