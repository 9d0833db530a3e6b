"""Pytest fixtures for Numberman tests."""

import pytest

from numberman.models import (
    Account,
    AccountStatus,
    EventType,
    PhoneNumber,
    PhoneStatus,
    Role,
    UsageEvent,
)


def _make_phone(number, client=None, activated=None):
    """Create a phone, IN_USE when a client is given, with an optional ACTIVATION event."""
    phone = PhoneNumber.objects.create(
        number=number,
        status=PhoneStatus.IN_USE if client else PhoneStatus.FREE,
        client=client,
    )
    if activated is not None:
        UsageEvent.objects.create(
            phone=phone,
            event_type=EventType.ACTIVATION,
            event_date=activated,
        )
    return phone


@pytest.fixture
def make_phone(db):
    """Factory: make_phone(number, client=None, activated=None)."""
    return _make_phone


@pytest.fixture
def admin_account(db):
    """Approved bootstrap admin."""
    return Account.objects.create(
        email="admin@example.com",
        name="Admin",
        role=Role.ADMIN,
        status=AccountStatus.APPROVED,
        is_bootstrap=True,
    )


@pytest.fixture
def other_admin(db):
    """Second approved admin."""
    return Account.objects.create(
        email="ops@example.com",
        name="Ops",
        role=Role.ADMIN,
        status=AccountStatus.APPROVED,
    )


@pytest.fixture
def user_account(db):
    """Approved regular user."""
    return Account.objects.create(
        email="user@example.com",
        name="User",
        role=Role.USER,
        status=AccountStatus.APPROVED,
    )


@pytest.fixture
def pending_account(db):
    """Freshly signed-in user waiting for approval."""
    return Account.objects.create(email="pending@example.com", name="Pending")


@pytest.fixture
def block(db):
    """Block 03612812XX: 3 numbers, one of them held by ACME."""
    return [
        _make_phone("0361281200"),
        _make_phone("0361281201", client="ACME"),
        _make_phone("0361281202"),
    ]


@pytest.fixture
def free_phone(db):
    return _make_phone("0212561700")


@pytest.fixture
def assigned_phone(db):
    return _make_phone("0212561701", client="ACME")
