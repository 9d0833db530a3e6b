"""Numberman helpers."""

from datetime import date, datetime, time

from django.utils import timezone
from django.utils.dateparse import parse_date, parse_datetime

from numberman.exceptions import ValidationError


def coerce_datetime(value) -> datetime:
    """
    Turn user input into an aware datetime.

    Accepts datetime, date (midnight) or an ISO 8601 string with or without a
    time part. Naive values are read in the current time zone.

    Raises:
        ValidationError: DATE_REQUIRED or INVALID_DATE
    """
    if value is None or value == "":
        raise ValidationError("DATE_REQUIRED")

    if isinstance(value, str):
        text = value.strip()
        try:
            parsed = parse_datetime(text)
            if parsed is None:
                day = parse_date(text)
                parsed = datetime.combine(day, time.min) if day else None
        except ValueError:
            parsed = None
        if parsed is None:
            raise ValidationError("INVALID_DATE", value=value)
        value = parsed
    elif isinstance(value, date) and not isinstance(value, datetime):
        value = datetime.combine(value, time.min)
    elif not isinstance(value, datetime):
        raise ValidationError("INVALID_DATE", value=str(value))

    if timezone.is_naive(value):
        value = timezone.make_aware(value)
    return value
