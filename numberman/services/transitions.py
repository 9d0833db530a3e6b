"""Status-transition engine.

A transition changes the (status, client) pair of one or more numbers and
appends one UsageEvent per number. Both writes happen in one unit of work:
every id is locked and checked before anything is written, so a single
unknown id aborts the whole call.

Transitions are explicit variants:

    Assign(client_name, notes)     FREE/IN_USE -> IN_USE, event ASSIGNED
    Reassign(client_name, notes)   same fields as Assign, event REASSIGNED
    Deassign(notes)                -> FREE, event DEASSIGNED
    SetActivation(date, notes)     no field change, ACTIVATION upsert

Concurrent transitions on one id are last-write-wins.
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime

from django.core.exceptions import ValidationError as DjangoValidationError
from django.utils import timezone

from numberman.conf import numberman_settings
from numberman.exceptions import NotFoundError, ValidationError
from numberman.models import EventType, PhoneNumber, PhoneStatus, UsageEvent
from numberman.services import phones
from numberman.signals import phones_transitioned
from numberman.store import unit_of_work
from numberman.utils import coerce_datetime

logger = logging.getLogger(__name__)

ACTIVATION_NOTE = "Activation date set via block edit"


# ======================================================================
# Transition variants
# ======================================================================


@dataclass(frozen=True)
class Assign:
    client_name: str
    notes: str | None = None


@dataclass(frozen=True)
class Reassign:
    client_name: str
    notes: str | None = None


@dataclass(frozen=True)
class Deassign:
    notes: str | None = None


@dataclass(frozen=True)
class SetActivation:
    date: datetime
    notes: str | None = None


Transition = Assign | Reassign | Deassign | SetActivation


@dataclass
class TransitionResult:
    """Outcome of one applied transition."""

    updated_count: int
    events_created: int = 0
    events_updated: int = 0


def transition_from_action(
    action: str,
    client_name: str | None = None,
    notes: str | None = None,
    date=None,
) -> Transition:
    """
    Build a transition from an action keyword.

    Args:
        action: assign, deassign, reassign or activation (case-insensitive)
        client_name: Required for assign/reassign
        notes: Free text stored on the event
        date: Required for activation (datetime, date or ISO string)

    Raises:
        ValidationError: INVALID_ACTION, CLIENT_REQUIRED, DATE_REQUIRED
    """
    keyword = (action or "").strip().lower()
    if keyword == "assign":
        return Assign(_require_client(client_name), notes or None)
    if keyword == "reassign":
        return Reassign(_require_client(client_name), notes or None)
    if keyword == "deassign":
        return Deassign(notes or None)
    if keyword == "activation":
        return SetActivation(coerce_datetime(date), notes or None)
    raise ValidationError("INVALID_ACTION", action=action)


# ======================================================================
# Dispatch
# ======================================================================


def apply(transition: Transition, ids) -> TransitionResult:
    """
    Apply a transition to a set of phone ids, all or nothing.

    Raises:
        ValidationError: Empty id set, malformed id, missing client
        NotFoundError: Any id does not exist (nothing is written)
    """
    if isinstance(transition, Assign):
        return _hold(ids, transition, EventType.ASSIGNED)
    if isinstance(transition, Reassign):
        return _hold(ids, transition, EventType.REASSIGNED)
    if isinstance(transition, Deassign):
        return _release(ids, transition.notes)
    if isinstance(transition, SetActivation):
        return set_activation(ids, transition.date, transition.notes)
    raise ValidationError("INVALID_ACTION", action=type(transition).__name__)


def assign(ids, client_name: str, notes: str | None = None) -> TransitionResult:
    """Assign numbers to a client."""
    return apply(Assign(client_name, notes), ids)


def reassign(ids, client_name: str, notes: str | None = None) -> TransitionResult:
    """Hand numbers over to another client."""
    return apply(Reassign(client_name, notes), ids)


def deassign(ids, notes: str | None = None) -> TransitionResult:
    """Return numbers to the free pool."""
    return apply(Deassign(notes), ids)


def transition_phone(phone_id, transition: Transition) -> PhoneNumber:
    """
    Apply a transition to one number and return it refreshed.

    Raises:
        NotFoundError: PHONE_NOT_FOUND, also for a malformed id
    """
    phone = phones.get_or_raise(phone_id)
    apply(transition, [phone.pk])
    phone.refresh_from_db()
    return phone


# ======================================================================
# Internals
# ======================================================================


def _require_client(client_name: str | None) -> str:
    name = (client_name or "").strip()
    if not name:
        raise ValidationError("CLIENT_REQUIRED")
    return name


def _normalize_ids(ids) -> list[uuid.UUID]:
    """Deduplicate ids (order kept) and reject malformed ones."""
    if isinstance(ids, (str, uuid.UUID)):
        ids = [ids]
    result = []
    for raw in ids or []:
        try:
            value = raw if isinstance(raw, uuid.UUID) else uuid.UUID(str(raw))
        except ValueError:
            raise ValidationError("INVALID_ID", phone_id=str(raw))
        if value not in result:
            result.append(value)
    if not result:
        raise ValidationError("IDS_REQUIRED")
    return result


def _lock(ids: list[uuid.UUID]) -> list[PhoneNumber]:
    """Lock the rows of a transition; every id must exist."""
    found = {
        phone.pk: phone
        for phone in PhoneNumber.objects.select_for_update().filter(pk__in=ids)
    }
    missing = [str(pk) for pk in ids if pk not in found]
    if missing:
        raise NotFoundError("PHONE_NOT_FOUND", phone_ids=missing)
    return [found[pk] for pk in ids]


def _hold(ids, transition: Assign | Reassign, event_type: str) -> TransitionResult:
    client_name = _require_client(transition.client_name)
    notes = transition.notes
    ids = _normalize_ids(ids)

    with unit_of_work():
        locked = _lock(ids)
        now = timezone.now()
        PhoneNumber.objects.filter(pk__in=ids).update(
            status=PhoneStatus.IN_USE,
            client=client_name,
            updated_at=now,
        )
        UsageEvent.objects.bulk_create(
            [
                UsageEvent(
                    phone_id=phone.pk,
                    event_type=event_type,
                    client_name=client_name,
                    event_date=now,
                    notes=notes or None,
                )
                for phone in locked
            ]
        )

    logger.info("%s %d phones to %s", event_type, len(ids), client_name)
    phones_transitioned.send(sender=PhoneNumber, transition=transition, phone_ids=ids)
    return TransitionResult(updated_count=len(ids), events_created=len(ids))


def _release(ids, notes: str | None) -> TransitionResult:
    ids = _normalize_ids(ids)
    keep_client = numberman_settings.DEASSIGN_RECORDS_PREVIOUS_CLIENT

    with unit_of_work():
        locked = _lock(ids)
        now = timezone.now()
        # Events are built from the locked rows, before the client is cleared
        events = [
            UsageEvent(
                phone_id=phone.pk,
                event_type=EventType.DEASSIGNED,
                client_name=(phone.client or None) if keep_client else None,
                event_date=now,
                notes=notes or None,
            )
            for phone in locked
        ]
        PhoneNumber.objects.filter(pk__in=ids).update(
            status=PhoneStatus.FREE,
            client=None,
            updated_at=now,
        )
        UsageEvent.objects.bulk_create(events)

    logger.info("DEASSIGNED %d phones", len(ids))
    phones_transitioned.send(sender=PhoneNumber, transition=Deassign(notes), phone_ids=ids)
    return TransitionResult(updated_count=len(ids), events_created=len(ids))


# ======================================================================
# Activation and history dates
# ======================================================================


def set_activation(target, date, notes: str | None = None) -> TransitionResult:
    """
    Set the activation date of a block (prefix) or of explicit ids.

    Upsert keyed on (phone, ACTIVATION): existing ACTIVATION events get the
    new date, phones without one get a new event.

    Args:
        target: Block prefix (``XX`` marker optional) or iterable of phone ids
        date: New activation date (datetime, date or ISO string)
        notes: Note for created events

    Raises:
        NotFoundError: BLOCK_NOT_FOUND (empty block) or PHONE_NOT_FOUND
    """
    date = coerce_datetime(date)

    with unit_of_work():
        if isinstance(target, str):
            phone_qs = phones.in_block(target)
            phone_ids = list(phone_qs.select_for_update().values_list("pk", flat=True))
            if not phone_ids:
                raise NotFoundError("BLOCK_NOT_FOUND", prefix=target)
            events = UsageEvent.objects.filter(
                phone__in=phone_qs, event_type=EventType.ACTIVATION
            )
        else:
            phone_ids = [phone.pk for phone in _lock(_normalize_ids(target))]
            phone_qs = PhoneNumber.objects.filter(pk__in=phone_ids)
            events = UsageEvent.objects.filter(
                phone_id__in=phone_ids, event_type=EventType.ACTIVATION
            )

        activated = set(events.values_list("phone_id", flat=True))
        events_updated = events.update(event_date=date)
        missing = [pk for pk in phone_ids if pk not in activated]
        UsageEvent.objects.bulk_create(
            [
                UsageEvent(
                    phone_id=pk,
                    event_type=EventType.ACTIVATION,
                    client_name=None,
                    event_date=date,
                    notes=notes or ACTIVATION_NOTE,
                )
                for pk in missing
            ]
        )
        phone_qs.update(updated_at=timezone.now())

    logger.info(
        "Activation date %s: %d events updated, %d created",
        date.isoformat(),
        events_updated,
        len(missing),
    )
    phones_transitioned.send(
        sender=PhoneNumber,
        transition=SetActivation(date, notes),
        phone_ids=phone_ids,
    )
    return TransitionResult(
        updated_count=len(phone_ids),
        events_created=len(missing),
        events_updated=events_updated,
    )


def edit_history_date(history_id, new_date) -> UsageEvent:
    """
    Correct the date of one history entry.

    Raises:
        NotFoundError: HISTORY_NOT_FOUND
    """
    new_date = coerce_datetime(new_date)

    with unit_of_work():
        try:
            event = UsageEvent.objects.select_for_update().get(pk=history_id)
        except (UsageEvent.DoesNotExist, DjangoValidationError, ValueError):
            raise NotFoundError("HISTORY_NOT_FOUND", history_id=str(history_id))
        event.event_date = new_date
        event.save(update_fields=["event_date"])
        PhoneNumber.objects.filter(pk=event.phone_id).update(updated_at=timezone.now())

    logger.info("History %s dated %s", event.pk, new_date.isoformat())
    return event


def backdate_client_history(client_names: list[str], date) -> dict[str, int]:
    """
    Set ``event_date`` on every event naming one of the clients.

    Client names match case-insensitively. Used when historical assignments
    are imported after the fact.

    Returns:
        {client_name: events updated}
    """
    date = coerce_datetime(date)
    results = {}
    with unit_of_work():
        for name in client_names:
            name = name.strip()
            if not name:
                continue
            results[name] = UsageEvent.objects.filter(client_name__iexact=name).update(
                event_date=date
            )
    for name, count in results.items():
        logger.info("Backdated %d events of %s to %s", count, name, date.isoformat())
    return results
