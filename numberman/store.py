"""Unit of work for multi-row writes.

Every write that touches more than one row runs inside ``unit_of_work()``:
all rows commit together or none do. Database failures surface as
``ConflictError`` (integrity) or ``StoreError`` (anything else); errors raised
by the caller inside the block roll back and propagate unchanged.
"""

import logging
from contextlib import contextmanager

from django.db import DatabaseError, IntegrityError, transaction

from numberman.exceptions import ConflictError, StoreError

logger = logging.getLogger(__name__)


@contextmanager
def unit_of_work(conflict_code: str = "CONFLICT", **conflict_data):
    """
    Run the enclosed writes atomically.

    Args:
        conflict_code: Error code used when a uniqueness constraint fails
        **conflict_data: Extra data attached to the ConflictError

    Raises:
        ConflictError: On IntegrityError
        StoreError: On any other DatabaseError
    """
    try:
        with transaction.atomic():
            yield
    except IntegrityError as exc:
        logger.warning("Integrity violation (%s): %s", conflict_code, exc)
        raise ConflictError(conflict_code, **conflict_data) from exc
    except DatabaseError as exc:
        logger.exception("Store failure")
        raise StoreError("STORE_FAILURE") from exc
