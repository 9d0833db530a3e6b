"""Aggregation engine - block and customer views.

Nothing here is stored: blocks and customers are recomputed from PhoneNumber
and UsageEvent on every call. All functions are read-only and return empty
lists when there is nothing to report.

Block: numbers sharing ``number[:-2]``. Activation date is the earliest
ACTIVATION event of the block.

Customer: a distinct non-empty client name, either on a phone right now
(active) or only on release events (DEASSIGNED/REASSIGNED) in the history
(inactive). Active clients are counted from current assignments only.
"""

from dataclasses import dataclass
from datetime import datetime

from django.db.models import Count, F, Min, Q
from django.db.models.functions import Length, Substr

from numberman.exceptions import ValidationError
from numberman.models import (
    BLOCK_MARKER,
    BLOCK_SUFFIX_LENGTH,
    RELEASE_EVENTS,
    EventType,
    PhoneNumber,
    PhoneStatus,
    UsageEvent,
)
from numberman.services import phones


@dataclass(frozen=True)
class BlockSummary:
    prefix: str
    total: int
    used: int
    available: int
    activation_date: datetime | None


@dataclass(frozen=True)
class CustomerSummary:
    client_name: str
    phone_count: int
    active_count: int
    status: str  # "active" | "inactive"


@dataclass(frozen=True)
class CustomerPhone:
    """A number a client holds now (is_active) or held before."""

    id: str
    number: str
    status: str
    client: str | None
    is_active: bool
    return_date: datetime | None
    created_at: datetime | None = None
    updated_at: datetime | None = None


# ======================================================================
# Blocks
# ======================================================================


def compute_blocks() -> list[BlockSummary]:
    """
    Summarize every block, ordered by prefix.

    One grouped query: counts are distinct because the activation join can
    return several rows per number.
    """
    rows = (
        PhoneNumber.objects.annotate(
            block=Substr("number", 1, Length("number") - BLOCK_SUFFIX_LENGTH)
        )
        .values("block")
        .annotate(
            total=Count("id", distinct=True),
            used=Count("id", distinct=True, filter=Q(status=PhoneStatus.IN_USE)),
            activation_date=Min(
                "history__event_date",
                filter=Q(history__event_type=EventType.ACTIVATION),
            ),
        )
        .order_by("block")
    )

    return [
        BlockSummary(
            prefix=row["block"] + BLOCK_MARKER,
            total=row["total"],
            used=row["used"],
            available=row["total"] - row["used"],
            activation_date=row["activation_date"],
        )
        for row in rows
    ]


def block_activation_date(prefix: str) -> datetime | None:
    """Earliest ACTIVATION date of one block, or None."""
    result = UsageEvent.objects.filter(
        phone__in=phones.in_block(prefix),
        event_type=EventType.ACTIVATION,
    ).aggregate(activation_date=Min("event_date"))
    return result["activation_date"]


# ======================================================================
# Customers
# ======================================================================


def _current_clients():
    return PhoneNumber.objects.exclude(client__isnull=True).exclude(client="")


def compute_customers() -> list[CustomerSummary]:
    """
    List every customer once.

    Active customers come first (by name), then customers that only appear
    in release events (by name).
    """
    current = (
        _current_clients()
        .values("client")
        .annotate(
            phone_count=Count("id"),
            active_count=Count("id", filter=Q(status=PhoneStatus.IN_USE)),
        )
        .order_by("client")
    )

    customers: dict[str, CustomerSummary] = {}
    for row in current:
        customers[row["client"]] = CustomerSummary(
            client_name=row["client"],
            phone_count=row["phone_count"],
            active_count=row["active_count"],
            status="active",
        )

    historical = (
        UsageEvent.objects.filter(event_type__in=RELEASE_EVENTS)
        .exclude(client_name__isnull=True)
        .exclude(client_name="")
        .exclude(client_name__in=_current_clients().values("client"))
        .values("client_name")
        .annotate(phone_count=Count("id"))
        .order_by("client_name")
    )
    for row in historical:
        customers.setdefault(
            row["client_name"],
            CustomerSummary(
                client_name=row["client_name"],
                phone_count=row["phone_count"],
                active_count=0,
                status="inactive",
            ),
        )

    return list(customers.values())


def customer_phones(client_name: str) -> list[CustomerPhone]:
    """
    Numbers a client holds now plus the ones it gave back.

    Current numbers (by number) come first. Released numbers follow, most
    recent release first; a number released several times is listed once,
    with its latest release date.

    Raises:
        ValidationError: CLIENT_REQUIRED
    """
    client_name = (client_name or "").strip()
    if not client_name:
        raise ValidationError("CLIENT_REQUIRED")

    result: list[CustomerPhone] = []
    seen = set()

    for phone in PhoneNumber.objects.filter(client=client_name).order_by("number"):
        seen.add(phone.pk)
        result.append(
            CustomerPhone(
                id=str(phone.pk),
                number=phone.number,
                status=phone.status,
                client=phone.client,
                is_active=True,
                return_date=None,
                created_at=phone.created_at,
                updated_at=phone.updated_at,
            )
        )

    released = (
        UsageEvent.objects.filter(client_name=client_name, event_type__in=RELEASE_EVENTS)
        .select_related("phone")
        .order_by(F("event_date").desc())
    )
    for event in released:
        if event.phone_id in seen:
            continue
        seen.add(event.phone_id)
        phone = event.phone
        result.append(
            CustomerPhone(
                id=str(phone.pk),
                number=phone.number,
                status=phone.status,
                client=phone.client,
                is_active=False,
                return_date=event.event_date,
                created_at=phone.created_at,
                updated_at=phone.updated_at,
            )
        )

    return result
