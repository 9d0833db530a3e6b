"""Account model: people allowed into the inventory.

Identity comes from an external provider; this table only keeps what the
approval workflow needs (role and status) plus the profile the provider sends.
"""

import uuid

from django.db import models
from django.db.models import Q
from django.utils.translation import gettext_lazy as _


class Role(models.TextChoices):
    ADMIN = "admin", _("Administrator")
    USER = "user", _("User")


class AccountStatus(models.TextChoices):
    PENDING = "pending", _("Pending")
    APPROVED = "approved", _("Approved")
    REJECTED = "rejected", _("Rejected")


class Account(models.Model):
    """
    Inventory user.

    The first account ever created is the bootstrap admin (approved). Every
    later account starts as a pending user until an admin approves it.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    email = models.EmailField(_("email"), unique=True)
    name = models.CharField(_("name"), max_length=255, blank=True)
    image = models.URLField(_("image"), max_length=1024, blank=True)

    role = models.CharField(
        _("role"),
        max_length=10,
        choices=Role.choices,
        default=Role.USER,
    )
    status = models.CharField(
        _("status"),
        max_length=10,
        choices=AccountStatus.choices,
        default=AccountStatus.PENDING,
        db_index=True,
    )

    # At most one row may carry this flag (see constraint)
    is_bootstrap = models.BooleanField(_("bootstrap admin"), default=False, editable=False)

    created_at = models.DateTimeField(_("created at"), auto_now_add=True)
    updated_at = models.DateTimeField(_("updated at"), auto_now=True)

    class Meta:
        db_table = "numberman_account"
        verbose_name = _("account")
        verbose_name_plural = _("accounts")
        ordering = ["-created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["is_bootstrap"],
                condition=Q(is_bootstrap=True),
                name="numberman_single_bootstrap_admin",
            ),
        ]

    def __str__(self):
        return self.email

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    @property
    def is_approved(self) -> bool:
        return self.status == AccountStatus.APPROVED
