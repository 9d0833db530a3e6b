"""Bulk range generator.

Two input modes:

    Block:  "03612812XX"                -> 0361281200 .. 0361281299 (100 numbers)
    Range:  "02125617950 - 02125617999" -> every number in between, width kept

Every generated number starts FREE with exactly one ACTIVATION event. The
batch is written in one unit of work: a single pre-existing number aborts it
with ConflictError and nothing is created.
"""

import logging
import uuid
from dataclasses import dataclass

from django.utils import timezone

from numberman.conf import numberman_settings
from numberman.exceptions import CapacityError, ConflictError, ValidationError
from numberman.models import (
    BLOCK_MARKER,
    BLOCK_SUFFIX_LENGTH,
    EventType,
    PhoneNumber,
    PhoneStatus,
    UsageEvent,
)
from numberman.signals import phones_generated
from numberman.store import unit_of_work

logger = logging.getLogger(__name__)

BLOCK_SIZE = 10**BLOCK_SUFFIX_LENGTH
BATCH_SIZE = 500

MODE_BLOCK = "block"
MODE_RANGE = "range"

NOTES = {
    MODE_BLOCK: "Bulk generation - 100 block",
    MODE_RANGE: "Bulk generation - manual range",
}


def _is_digits(value: str) -> bool:
    return value.isascii() and value.isdecimal()


@dataclass
class GenerationResult:
    created_count: int
    mode: str
    first_number: str
    last_number: str


def expand_block(pattern: str) -> list[str]:
    """
    Expand a block pattern into its 100 numbers.

    The ``XX`` marker is optional: "0361281200" style input without it is
    treated as the base prefix.

    Raises:
        ValidationError: PREFIX_REQUIRED, INVALID_PREFIX
    """
    base = (pattern or "").strip().upper().replace(BLOCK_MARKER, "")
    if not base:
        raise ValidationError("PREFIX_REQUIRED")
    if not _is_digits(base):
        raise ValidationError("INVALID_PREFIX", prefix=pattern)
    return [f"{base}{i:0{BLOCK_SUFFIX_LENGTH}d}" for i in range(BLOCK_SIZE)]


def parse_range(range_spec: str) -> tuple[str, str]:
    """
    Split "start - end" into two digit strings of equal width.

    Raises:
        ValidationError: INVALID_RANGE, INVALID_RANGE_ORDER
    """
    parts = [p.strip() for p in (range_spec or "").split("-")]
    if len(parts) != 2:
        raise ValidationError("INVALID_RANGE", range=range_spec)

    start, end = parts
    if not (_is_digits(start) and _is_digits(end)) or len(start) != len(end):
        raise ValidationError("INVALID_RANGE", range=range_spec)
    # A number needs at least one digit outside its block suffix
    if len(start) <= BLOCK_SUFFIX_LENGTH:
        raise ValidationError("INVALID_RANGE", range=range_spec)
    if int(end) < int(start):
        raise ValidationError("INVALID_RANGE_ORDER", range=range_spec)
    return start, end


def expand_range(range_spec: str) -> list[str]:
    """
    Expand "start - end" into every number in between, leading zeros kept.

    Raises:
        ValidationError: Malformed range
        CapacityError: More than MAX_RANGE_SIZE numbers
    """
    start, end = parse_range(range_spec)
    width = len(start)
    count = int(end) - int(start) + 1

    limit = numberman_settings.MAX_RANGE_SIZE
    if count > limit:
        raise CapacityError(
            "RANGE_TOO_LARGE",
            message=f"Maximum range is {limit:,} numbers per request.",
            requested=count,
            limit=limit,
        )
    return [str(n).zfill(width) for n in range(int(start), int(end) + 1)]


def _existing(numbers: list[str]) -> list[str]:
    """Numbers of the batch already in the inventory."""
    # Batches are contiguous and equal-width, so a string range covers them
    wanted = set(numbers)
    candidates = PhoneNumber.objects.filter(
        number__gte=numbers[0], number__lte=numbers[-1]
    ).values_list("number", flat=True)
    return sorted(n for n in candidates if n in wanted)


def generate(prefix: str | None = None, range_spec: str | None = None) -> GenerationResult:
    """
    Create a batch of FREE numbers, each with one ACTIVATION event.

    Args:
        prefix: Block pattern (used when no range is given)
        range_spec: "start - end" manual range (takes precedence)

    Returns:
        GenerationResult

    Raises:
        ValidationError: Nothing to generate or malformed input
        CapacityError: Range too large
        ConflictError: DUPLICATE_NUMBER (nothing is created)
    """
    if range_spec and range_spec.strip():
        mode = MODE_RANGE
        numbers = expand_range(range_spec)
    elif prefix and prefix.strip():
        mode = MODE_BLOCK
        numbers = expand_block(prefix)
    else:
        raise ValidationError("PREFIX_REQUIRED")

    now = timezone.now()
    note = NOTES[mode]

    with unit_of_work("DUPLICATE_NUMBER"):
        duplicates = _existing(numbers)
        if duplicates:
            raise ConflictError(
                "DUPLICATE_NUMBER",
                message=f"{len(duplicates)} number(s) already exist, first: {duplicates[0]}",
                numbers=duplicates[:20],
                count=len(duplicates),
            )

        rows = [
            PhoneNumber(
                id=uuid.uuid4(),
                number=number,
                status=PhoneStatus.FREE,
                client=None,
            )
            for number in numbers
        ]
        PhoneNumber.objects.bulk_create(rows, batch_size=BATCH_SIZE)
        UsageEvent.objects.bulk_create(
            [
                UsageEvent(
                    phone_id=row.id,
                    event_type=EventType.ACTIVATION,
                    client_name=None,
                    event_date=now,
                    notes=note,
                )
                for row in rows
            ],
            batch_size=BATCH_SIZE,
        )

    result = GenerationResult(
        created_count=len(numbers),
        mode=mode,
        first_number=numbers[0],
        last_number=numbers[-1],
    )
    logger.info(
        "Generated %d numbers (%s) %s..%s",
        result.created_count,
        mode,
        result.first_number,
        result.last_number,
    )
    phones_generated.send(sender=PhoneNumber, result=result)
    return result
