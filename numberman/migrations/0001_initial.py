# Initial schema: phone numbers, usage history and accounts

import uuid

import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="PhoneNumber",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4,
                        editable=False,
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                (
                    "number",
                    models.CharField(
                        help_text="Digits only, leading zeros preserved",
                        max_length=32,
                        unique=True,
                        verbose_name="number",
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[("FREE", "Free"), ("IN_USE", "In use")],
                        db_index=True,
                        default="FREE",
                        max_length=10,
                        verbose_name="status",
                    ),
                ),
                (
                    "client",
                    models.CharField(
                        blank=True,
                        db_index=True,
                        max_length=255,
                        null=True,
                        verbose_name="client",
                    ),
                ),
                (
                    "created_at",
                    models.DateTimeField(auto_now_add=True, verbose_name="created at"),
                ),
                (
                    "updated_at",
                    models.DateTimeField(auto_now=True, verbose_name="updated at"),
                ),
            ],
            options={
                "verbose_name": "phone number",
                "verbose_name_plural": "phone numbers",
                "db_table": "numberman_phone_number",
                "ordering": ["number"],
            },
        ),
        migrations.CreateModel(
            name="UsageEvent",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4,
                        editable=False,
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                (
                    "event_type",
                    models.CharField(
                        choices=[
                            ("ACTIVATION", "Activation"),
                            ("ASSIGNED", "Assigned"),
                            ("DEASSIGNED", "Deassigned"),
                            ("REASSIGNED", "Reassigned"),
                        ],
                        max_length=20,
                        verbose_name="event type",
                    ),
                ),
                (
                    "client_name",
                    models.CharField(
                        blank=True,
                        max_length=255,
                        null=True,
                        verbose_name="client",
                    ),
                ),
                (
                    "event_date",
                    models.DateTimeField(
                        db_index=True,
                        default=django.utils.timezone.now,
                        verbose_name="event date",
                    ),
                ),
                ("notes", models.TextField(blank=True, null=True, verbose_name="notes")),
                (
                    "phone",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="history",
                        to="numberman.phonenumber",
                        verbose_name="phone number",
                    ),
                ),
            ],
            options={
                "verbose_name": "usage event",
                "verbose_name_plural": "usage history",
                "db_table": "numberman_usage_event",
                "ordering": ["event_date"],
                "indexes": [
                    models.Index(
                        fields=["phone", "event_type"],
                        name="nm_event_phone_type_idx",
                    ),
                    models.Index(
                        fields=["client_name", "event_type"],
                        name="nm_event_client_type_idx",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="Account",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4,
                        editable=False,
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                ("email", models.EmailField(max_length=254, unique=True, verbose_name="email")),
                ("name", models.CharField(blank=True, max_length=255, verbose_name="name")),
                ("image", models.URLField(blank=True, max_length=1024, verbose_name="image")),
                (
                    "role",
                    models.CharField(
                        choices=[("admin", "Administrator"), ("user", "User")],
                        default="user",
                        max_length=10,
                        verbose_name="role",
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("pending", "Pending"),
                            ("approved", "Approved"),
                            ("rejected", "Rejected"),
                        ],
                        db_index=True,
                        default="pending",
                        max_length=10,
                        verbose_name="status",
                    ),
                ),
                (
                    "is_bootstrap",
                    models.BooleanField(
                        default=False,
                        editable=False,
                        verbose_name="bootstrap admin",
                    ),
                ),
                (
                    "created_at",
                    models.DateTimeField(auto_now_add=True, verbose_name="created at"),
                ),
                (
                    "updated_at",
                    models.DateTimeField(auto_now=True, verbose_name="updated at"),
                ),
            ],
            options={
                "verbose_name": "account",
                "verbose_name_plural": "accounts",
                "db_table": "numberman_account",
                "ordering": ["-created_at"],
                "constraints": [
                    models.UniqueConstraint(
                        condition=models.Q(is_bootstrap=True),
                        fields=("is_bootstrap",),
                        name="numberman_single_bootstrap_admin",
                    ),
                ],
            },
        ),
    ]
