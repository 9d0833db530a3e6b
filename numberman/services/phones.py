"""Phone number store access - lookups, listing, history and deletion.

All operations that modify >1 record run inside store.unit_of_work().
"""

import logging
from dataclasses import dataclass, field

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db.models import Q
from django.db.models.functions import Length

from numberman.conf import numberman_settings
from numberman.exceptions import NotFoundError, ValidationError
from numberman.models import (
    BLOCK_MARKER,
    BLOCK_SUFFIX_LENGTH,
    PhoneNumber,
    PhoneStatus,
    UsageEvent,
)
from numberman.signals import phones_deleted
from numberman.store import unit_of_work
from numberman.utils import coerce_datetime

logger = logging.getLogger(__name__)


@dataclass
class Page:
    """One page of a listing."""

    items: list = field(default_factory=list)
    total: int = 0
    limit: int = 0
    offset: int = 0


def strip_marker(prefix: str) -> str:
    """``03612812XX`` -> ``03612812``."""
    prefix = (prefix or "").strip()
    if prefix.upper().endswith(BLOCK_MARKER):
        prefix = prefix[: -len(BLOCK_MARKER)]
    return prefix


def _page_bounds(limit: int | None, offset: int | None) -> tuple[int, int]:
    if limit is None or limit <= 0:
        limit = numberman_settings.DEFAULT_PAGE_SIZE
    limit = min(limit, numberman_settings.MAX_PAGE_SIZE)
    offset = max(offset or 0, 0)
    return limit, offset


def get(phone_id) -> PhoneNumber | None:
    """Get phone number by id."""
    try:
        return PhoneNumber.objects.get(pk=phone_id)
    except (PhoneNumber.DoesNotExist, DjangoValidationError, ValueError):
        return None


def get_or_raise(phone_id) -> PhoneNumber:
    """Get phone number by id or raise NotFoundError."""
    phone = get(phone_id)
    if phone is None:
        raise NotFoundError("PHONE_NOT_FOUND", phone_id=str(phone_id))
    return phone


def get_by_number(number: str) -> PhoneNumber | None:
    """Get phone number by its digits."""
    try:
        return PhoneNumber.objects.get(number=number.strip())
    except PhoneNumber.DoesNotExist:
        return None


def in_block(prefix: str):
    """
    QuerySet of the numbers in a block (marker optional).

    Same grouping as the block summaries: ``number[:-2] == base``, so longer
    numbers sharing the prefix belong to other blocks.
    """
    base = strip_marker(prefix)
    if not base:
        raise ValidationError("PREFIX_REQUIRED")
    return (
        PhoneNumber.objects.alias(number_length=Length("number"))
        .filter(number__startswith=base, number_length=len(base) + BLOCK_SUFFIX_LENGTH)
    )


def search(
    search: str | None = None,
    status: str | None = None,
    prefix: str | None = None,
    limit: int | None = None,
    offset: int | None = None,
) -> Page:
    """
    Filtered, paginated listing ordered by number.

    Args:
        search: Case-insensitive substring of the number or the client
        status: FREE, IN_USE, or ALL/empty for both
        prefix: Block prefix (``XX`` marker optional)
        limit: Page size (clamped to MAX_PAGE_SIZE)
        offset: Rows to skip

    Returns:
        Page of PhoneNumber
    """
    limit, offset = _page_bounds(limit, offset)
    qs = PhoneNumber.objects.all()

    term = (search or "").strip()
    if term:
        qs = qs.filter(Q(number__icontains=term) | Q(client__icontains=term))

    if status and status != "ALL":
        if status not in PhoneStatus.values:
            raise ValidationError("INVALID_STATUS", status=status)
        qs = qs.filter(status=status)

    base = strip_marker(prefix or "")
    if base:
        qs = qs.filter(number__startswith=base)

    total = qs.count()
    items = list(qs.order_by("number")[offset : offset + limit])
    return Page(items=items, total=total, limit=limit, offset=offset)


def history_for(phone_ids) -> dict:
    """Events of several phones in one query, grouped by phone id."""
    grouped: dict = {pid: [] for pid in phone_ids}
    events = UsageEvent.objects.filter(phone_id__in=list(phone_ids)).order_by(
        "phone_id", "event_date"
    )
    for event in events:
        grouped.setdefault(event.phone_id, []).append(event)
    return grouped


def history(phone_id, limit: int | None = None, offset: int | None = None) -> Page:
    """Usage history of one phone, oldest first."""
    limit, offset = _page_bounds(limit, offset)
    qs = UsageEvent.objects.filter(phone_id=phone_id).order_by("event_date")
    total = qs.count()
    return Page(
        items=list(qs[offset : offset + limit]),
        total=total,
        limit=limit,
        offset=offset,
    )


def delete(phone_id) -> None:
    """Delete one phone number and its history."""
    phone = get_or_raise(phone_id)
    with unit_of_work():
        phone.delete()
    logger.info("Deleted phone %s", phone.number)
    phones_deleted.send(sender=PhoneNumber, count=1, prefix=None)


def delete_block(prefix: str) -> int:
    """
    Delete every number in a block, history included.

    Returns:
        Number of phone numbers deleted
    """
    qs = in_block(prefix)
    with unit_of_work():
        count = qs.count()
        qs.delete()
    logger.info("Deleted %d phones in block %s", count, prefix)
    phones_deleted.send(sender=PhoneNumber, count=count, prefix=prefix)
    return count


def backdate_client_phones(client_names: list[str], date) -> dict[str, int]:
    """
    Set ``updated_at`` of the phones each client currently holds.

    Client names match case-insensitively. Used to align imported data with
    the real assignment date.

    Returns:
        {client_name: phones updated}
    """
    date = coerce_datetime(date)

    results = {}
    with unit_of_work():
        for name in client_names:
            name = name.strip()
            if not name:
                continue
            # QuerySet.update() skips auto_now, so the date sticks
            results[name] = PhoneNumber.objects.filter(client__iexact=name).update(
                updated_at=date
            )
    return results
