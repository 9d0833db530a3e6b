"""UsageEvent model: per-number event log.

Append-only in practice: rows are never deleted one by one, only through the
cascade when their phone number goes. ``event_date`` stays editable so admins
can correct when something actually happened.
"""

import uuid

from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _


class EventType(models.TextChoices):
    ACTIVATION = "ACTIVATION", _("Activation")
    ASSIGNED = "ASSIGNED", _("Assigned")
    DEASSIGNED = "DEASSIGNED", _("Deassigned")
    REASSIGNED = "REASSIGNED", _("Reassigned")


# Events that end (or hand over) a client's hold on a number
RELEASE_EVENTS = (EventType.DEASSIGNED, EventType.REASSIGNED)


class UsageEvent(models.Model):
    """One entry in a phone number's usage history."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    phone = models.ForeignKey(
        "numberman.PhoneNumber",
        on_delete=models.CASCADE,
        related_name="history",
        verbose_name=_("phone number"),
    )

    event_type = models.CharField(
        _("event type"),
        max_length=20,
        choices=EventType.choices,
    )
    client_name = models.CharField(
        _("client"),
        max_length=255,
        null=True,
        blank=True,
    )
    event_date = models.DateTimeField(_("event date"), default=timezone.now, db_index=True)
    notes = models.TextField(_("notes"), null=True, blank=True)

    class Meta:
        db_table = "numberman_usage_event"
        verbose_name = _("usage event")
        verbose_name_plural = _("usage history")
        ordering = ["event_date"]
        indexes = [
            models.Index(fields=["phone", "event_type"], name="nm_event_phone_type_idx"),
            models.Index(fields=["client_name", "event_type"], name="nm_event_client_type_idx"),
        ]

    def __str__(self):
        if self.client_name:
            return f"[{self.event_type}] {self.client_name}"
        return f"[{self.event_type}]"
