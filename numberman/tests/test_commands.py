"""Tests for management commands and the admin."""

from io import StringIO

import pytest
from django.core.management import call_command
from django.core.management.base import CommandError
from django.urls import reverse

from numberman.models import AccountStatus, PhoneNumber, PhoneStatus, UsageEvent
from numberman.services import transitions
from numberman.signals import account_updated
from numberman.utils import coerce_datetime

pytestmark = pytest.mark.django_db


class TestGenerateCommand:
    def test_prefix(self):
        out = StringIO()
        call_command("numberman_generate", "--prefix", "03612812XX", stdout=out)

        assert PhoneNumber.objects.count() == 100
        assert "Created 100 numbers (0361281200 - 0361281299)" in out.getvalue()

    def test_range(self):
        out = StringIO()
        call_command("numberman_generate", "--range", "0100 - 0109", stdout=out)
        assert PhoneNumber.objects.count() == 10

    def test_duplicate_fails(self, block):
        with pytest.raises(CommandError, match="DUPLICATE_NUMBER"):
            call_command("numberman_generate", "--prefix", "03612812XX", stdout=StringIO())
        assert PhoneNumber.objects.count() == 3


class TestBackdateCommands:
    def test_backdate_history(self, make_phone):
        phone = make_phone("0100")
        transitions.assign([phone.pk], "ACME")

        out = StringIO()
        call_command(
            "numberman_backdate_history", "acme", "Nobody", "--date", "2023-01-01", stdout=out
        )

        assert phone.history.get().event_date == coerce_datetime("2023-01-01")
        assert "acme: 1 history entries updated" in out.getvalue()
        assert "Nobody: 0 history entries updated" in out.getvalue()

    def test_backdate_phones(self, make_phone):
        phone = make_phone("0100", client="ACME")

        out = StringIO()
        call_command("numberman_backdate_phones", "ACME", "--date", "2023-01-01", stdout=out)

        phone.refresh_from_db()
        assert phone.updated_at == coerce_datetime("2023-01-01")
        assert "Updated 1 phones." in out.getvalue()

    def test_bad_date(self):
        with pytest.raises(CommandError, match="INVALID_DATE"):
            call_command("numberman_backdate_phones", "ACME", "--date", "soon", stdout=StringIO())


class TestAdmin:
    """Admin pages render and actions go through the services."""

    def test_changelists(self, admin_client, block):
        for model in ("phonenumber", "usageevent", "account"):
            response = admin_client.get(reverse(f"admin:numberman_{model}_changelist"))
            assert response.status_code == 200

    def test_phone_change_page(self, admin_client, assigned_phone):
        transitions.deassign([assigned_phone.pk])
        url = reverse("admin:numberman_phonenumber_change", args=[assigned_phone.pk])
        assert admin_client.get(url).status_code == 200

    def test_deassign_action(self, admin_client, block):
        response = admin_client.post(
            reverse("admin:numberman_phonenumber_changelist"),
            {"action": "deassign_selected", "_selected_action": [str(p.pk) for p in block]},
        )

        assert response.status_code == 302
        assert not PhoneNumber.objects.filter(status=PhoneStatus.IN_USE).exists()
        assert UsageEvent.objects.count() == 3

    def test_history_not_deletable(self, admin_client, free_phone):
        transitions.assign([free_phone.pk], "ACME")
        event = free_phone.history.get()
        url = reverse("admin:numberman_usageevent_delete", args=[event.pk])
        assert admin_client.get(url).status_code == 403

    def test_approve_action_sends_account_updated(self, admin_client, pending_account):
        received = []

        def handler(sender, account, changes, **kwargs):
            received.append((account.email, changes))

        account_updated.connect(handler)
        try:
            response = admin_client.post(
                reverse("admin:numberman_account_changelist"),
                {"action": "approve_selected", "_selected_action": [str(pending_account.pk)]},
            )
        finally:
            account_updated.disconnect(handler)

        assert response.status_code == 302
        pending_account.refresh_from_db()
        assert pending_account.status == AccountStatus.APPROVED
        assert received == [
            (pending_account.email, {"status": (AccountStatus.PENDING, AccountStatus.APPROVED)})
        ]
