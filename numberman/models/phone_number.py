"""PhoneNumber model (inventory entry).

A number is FREE or IN_USE. ``client`` is set iff the number is IN_USE; the
transition engine keeps that pairing, the database does not.

Blocks are not stored: a block is every number sharing ``number[:-2]``.
"""

import uuid

from django.db import models
from django.utils.translation import gettext_lazy as _

# Trailing digits that vary inside a block, and the marker shown in their place
BLOCK_SUFFIX_LENGTH = 2
BLOCK_MARKER = "XX"


class PhoneStatus(models.TextChoices):
    FREE = "FREE", _("Free")
    IN_USE = "IN_USE", _("In use")


class PhoneNumber(models.Model):
    """Single telephone number in the inventory."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    number = models.CharField(
        _("number"),
        max_length=32,
        unique=True,
        help_text=_("Digits only, leading zeros preserved"),
    )

    # Current state (history lives in UsageEvent)
    status = models.CharField(
        _("status"),
        max_length=10,
        choices=PhoneStatus.choices,
        default=PhoneStatus.FREE,
        db_index=True,
    )
    client = models.CharField(
        _("client"),
        max_length=255,
        null=True,
        blank=True,
        db_index=True,
    )

    # Audit
    created_at = models.DateTimeField(_("created at"), auto_now_add=True)
    updated_at = models.DateTimeField(_("updated at"), auto_now=True)

    class Meta:
        db_table = "numberman_phone_number"
        verbose_name = _("phone number")
        verbose_name_plural = _("phone numbers")
        ordering = ["number"]

    def __str__(self):
        if self.client:
            return f"{self.number} ({self.client})"
        return self.number

    @property
    def is_in_use(self) -> bool:
        return self.status == PhoneStatus.IN_USE

    @property
    def block_prefix(self) -> str:
        """Block this number belongs to, e.g. ``03612812XX``."""
        return self.number[:-BLOCK_SUFFIX_LENGTH] + BLOCK_MARKER
